# REQUIRE_CLINICAL_REVIEW: scoring logic is not clinically validated
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from .config import DEFAULT_MULTIPLIERS, RiskMultipliers
from .knowledge_base import AGE, ALLERGIES, BLOOD_PRESSURE, DIABETES, lookup
from .models import (
    ClassifiedIngredient, IngredientScore, Multiplier, RiskLevel, UserProfile,
)

ALLERGEN_ALERT = "⚠️ ALLERGEN ALERT: This ingredient matches your allergy profile and should be avoided."
GENERALLY_SAFE = "✓ Generally considered safe with no specific concerns for your profile."
MODERATE_NO_FACTORS = "Moderate concern ingredient, but no personalized risk factors apply."

REASON_ALLERGY = "Matches your allergen list"
REASON_DIABETES = "High glycemic concern for diabetes"
REASON_BLOOD_PRESSURE = "Sodium concern for blood pressure"
REASON_AGE = "Increased concern for age > 65"


def round_half_up(x: float) -> int:
    return int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def matches_allergy(ingredient_name: str, allergies: Sequence[str]) -> bool:
    # symmetric containment: "nut" also matches "nutmeg"
    name = ingredient_name.lower()
    for allergy in allergies:
        a = allergy.lower()
        if a and (a in name or name in a):
            return True
    return False


def generate_comment(
    is_allergen: bool,
    multipliers: Sequence[Multiplier],
    baseline_risk: RiskLevel,
    concerns: Sequence[str],
) -> str:
    if is_allergen:
        return ALLERGEN_ALERT
    if not multipliers:
        if baseline_risk == RiskLevel.LOW:
            return GENERALLY_SAFE
        return MODERATE_NO_FACTORS
    return f"Elevated concern due to: {', '.join(concerns)}. {multipliers[0].reason}."


def _canonical(name: str) -> str:
    return re.sub(r"\s+", "_", name.lower())


class RiskScorer:
    """
    Personalized per-ingredient scoring. Both entry points run the same
    ordered policy: allergy penalty (additive), then diabetes, blood
    pressure and age factors (multiplicative, applied to the running score).
    """

    def __init__(self, multipliers: RiskMultipliers = DEFAULT_MULTIPLIERS):
        self.m = multipliers

    def has_high_bp(self, profile: UserProfile) -> bool:
        s, d = profile.blood_pressure_systolic, profile.blood_pressure_diastolic
        return (s is not None and s >= self.m.high_bp_systolic) or (
            d is not None and d >= self.m.high_bp_diastolic
        )

    def is_senior(self, profile: UserProfile) -> bool:
        return profile.age is not None and profile.age > self.m.age_threshold

    def _apply(
        self,
        base: float,
        profile: UserProfile,
        allergen: bool,
        diabetes: bool,
        blood_pressure: bool,
        age: bool,
        ceiling: Optional[int],
    ):
        score = base
        applied: List[Multiplier] = []

        if allergen:
            score += self.m.allergy_penalty
            applied.append(Multiplier(REASON_ALLERGY, self.m.allergy_penalty))

        if diabetes and profile.has_diabetes:
            score *= self.m.diabetes_factor
            applied.append(Multiplier(REASON_DIABETES, self.m.diabetes_factor))

        if blood_pressure and self.has_high_bp(profile):
            score *= self.m.blood_pressure_factor
            applied.append(Multiplier(REASON_BLOOD_PRESSURE, self.m.blood_pressure_factor))

        if age and self.is_senior(profile):
            score *= self.m.age_factor
            applied.append(Multiplier(REASON_AGE, self.m.age_factor))

        final = round_half_up(score)
        if ceiling is not None:
            final = min(final, ceiling)
        return final, tuple(applied)

    def score_local(self, raw_name: str, profile: UserProfile) -> IngredientScore:
        rec = lookup(raw_name)
        flags = rec.affected_by
        is_allergen = ALLERGIES in flags and matches_allergy(raw_name, profile.allergies)

        final, applied = self._apply(
            rec.base_score,
            profile,
            allergen=is_allergen,
            diabetes=DIABETES in flags,
            blood_pressure=BLOOD_PRESSURE in flags,
            age=AGE in flags,
            ceiling=self.m.local_score_ceiling,
        )
        return IngredientScore(
            name=rec.name,
            canonical_form=rec.canonical_form,
            category=rec.category,
            baseline_risk=rec.baseline_risk,
            base_score=rec.base_score,
            multipliers=applied,
            final_score=final,
            comment=generate_comment(is_allergen, applied, rec.baseline_risk, rec.concerns),
            is_allergen=is_allergen,
        )

    def score_classified(self, item: ClassifiedIngredient, profile: UserProfile) -> IngredientScore:
        # the classifier has no age flag; age sensitivity comes from the category
        final, applied = self._apply(
            item.base_score,
            profile,
            allergen=item.is_allergen,
            diabetes=item.diabetes_risk,
            blood_pressure=item.bp_risk,
            age=item.category in self.m.age_sensitive_categories,
            ceiling=self.m.classifier_score_ceiling,
        )
        return IngredientScore(
            name=item.name,
            canonical_form=_canonical(item.name),
            category=item.category,
            baseline_risk=item.risk_level,
            base_score=item.base_score,
            multipliers=applied,
            final_score=final,
            comment=generate_comment(item.is_allergen, applied, item.risk_level, item.concerns),
            is_allergen=item.is_allergen,
        )

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from jsonschema import validate

from .classifier import IngredientClassifier
from .db_supabase import SupabaseDB
from .models import (
    Available, IngredientScore, OcrResult, ProductScore, RiskLevel, ScanReport, UserProfile, Verdict,
)
from .parse import extract_nutrition_facts, parse_ingredients
from .schemas import SCAN_RECORD_SCHEMA
from .score import RiskScorer, round_half_up

DISCLAIMER = (
    "This analysis is for informational purposes only and is not a substitute for "
    "professional medical advice, diagnosis, or treatment."
)

# assumed ceiling of a single personalized ingredient score
MAX_INGREDIENT_SCORE = 30
GOOD_MAX = 30
MODERATE_MAX = 60
MAX_TOP_REASONS = 3
NO_ALLERGENS_REASON = "No allergens or high-risk additives detected"

# OBS=1 enables [obs] trace lines
OBS = os.getenv("OBS", "") == "1"


def _obs(msg: str) -> None:
    if OBS:
        print(msg)


def verdict_for(product_score: int) -> Verdict:
    if product_score <= GOOD_MAX:
        return Verdict.GOOD
    if product_score <= MODERATE_MAX:
        return Verdict.MODERATE
    return Verdict.BAD


def normalize_product_score(scores: Sequence[IngredientScore]) -> int:
    total = sum(s.final_score for s in scores)
    avg = total / len(scores) if scores else 0
    return min(round_half_up(avg / MAX_INGREDIENT_SCORE * 100), 100)


def top_reasons(scores: Sequence[IngredientScore], verdict: Verdict) -> List[str]:
    reasons: List[str] = []

    allergens = [s for s in scores if s.is_allergen]
    if allergens:
        reasons.append(f"Contains {len(allergens)} allergen(s) matching your profile")

    high_risk = [s for s in scores if s.baseline_risk == RiskLevel.HIGH]
    if high_risk:
        names = ", ".join(s.name for s in high_risk)
        reasons.append(f"Contains {len(high_risk)} high-risk ingredient(s): {names}")

    with_multipliers = [s for s in scores if s.multipliers]
    if with_multipliers and len(reasons) < MAX_TOP_REASONS:
        reasons.append(with_multipliers[0].multipliers[0].reason)

    if verdict == Verdict.GOOD and not reasons:
        low = sum(1 for s in scores if s.baseline_risk == RiskLevel.LOW)
        reasons.append(f"{low} low-risk ingredients with no personalized concerns")
        reasons.append(NO_ALLERGENS_REASON)

    return reasons[:MAX_TOP_REASONS]


def score_product(
    product_name: str,
    ingredients: Sequence[str],
    profile: UserProfile,
    classifier: Optional[IngredientClassifier] = None,
    scorer: Optional[RiskScorer] = None,
    now: Optional[datetime] = None,
) -> ProductScore:
    scorer = scorer or RiskScorer()
    ingredients = list(ingredients)

    classified = ()
    if classifier is not None and ingredients:
        _obs("[obs] before classify_batch")
        outcome = classifier.classify_batch(ingredients, profile)
        _obs("[obs] after classify_batch")
        if isinstance(outcome, Available):
            classified = outcome.ingredients
        else:
            _obs(f"[obs] classifier unavailable ({outcome.reason}); scoring {len(ingredients)} locally")

    scores: List[IngredientScore] = []
    for i, name in enumerate(ingredients):
        if i < len(classified):
            scores.append(scorer.score_classified(classified[i], profile))
        else:
            scores.append(scorer.score_local(name, profile))

    product_score = normalize_product_score(scores)
    verdict = verdict_for(product_score)

    return ProductScore(
        product_name=product_name,
        scan_date=(now or datetime.now(timezone.utc)).isoformat(),
        user_profile=profile.redacted(),
        ingredient_scores=tuple(scores),
        product_score=product_score,
        verdict=verdict,
        top_reasons=tuple(top_reasons(scores, verdict)),
        disclaimer=DISCLAIMER,
    )


def analyze_label(
    ocr: OcrResult,
    profile: UserProfile,
    classifier: Optional[IngredientClassifier] = None,
    scorer: Optional[RiskScorer] = None,
) -> ScanReport:
    parsed = parse_ingredients(ocr.text)
    facts = extract_nutrition_facts(ocr.text)
    _obs(f"[obs] parsed product={parsed.product_name!r} ingredients={len(parsed.ingredients)}")

    if not parsed.ingredients:
        return ScanReport(parsed=parsed, nutrition_facts=facts, low_confidence=ocr.is_low_confidence)

    score = score_product(parsed.product_name, parsed.ingredients, profile, classifier, scorer)
    return ScanReport(parsed=parsed, nutrition_facts=facts, score=score, low_confidence=ocr.is_low_confidence)


def build_scan_record(user_id: str, report: ScanReport) -> Dict[str, Any]:
    if report.score is None:
        raise ValueError("cannot store a scan without a product score")
    s = report.score
    record = {
        "user_id": user_id,
        "product_name": s.product_name,
        "ingredients": [i.to_dict() for i in s.ingredient_scores],
        "nutrition_facts": dict(report.nutrition_facts) or None,
        "product_score": s.product_score,
        "verdict": s.verdict.value,
        "top_reasons": list(s.top_reasons),
    }
    validate(instance=record, schema=SCAN_RECORD_SCHEMA)
    return record


def run_scan(
    ocr: OcrResult,
    profile: UserProfile,
    classifier: Optional[IngredientClassifier] = None,
    db: Optional[SupabaseDB] = None,
    user_id: Optional[str] = None,
) -> ScanReport:
    report = analyze_label(ocr, profile, classifier)
    if db is not None and user_id and report.score is not None:
        row = db.insert_scan(build_scan_record(user_id, report))
        _obs(f"[obs] stored scan id={row.get('id')}")
    return report

"""
Value types passed between the parser, scorer and aggregator.

- IngredientRecord: one knowledge base entry.
- UserProfile: normalized health profile (built once via from_dict).
- ClassifiedIngredient: one item returned by the remote classifier.
- IngredientScore / ProductScore: scored output of a scan.
- Available / Unavailable: outcome of a batched classification call.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class RiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class Verdict(str, Enum):
    GOOD = "Good"
    MODERATE = "Moderate"
    BAD = "Bad"


LOW_OCR_CONFIDENCE = 60


@dataclass(frozen=True)
class IngredientRecord:
    name: str
    canonical_form: str
    category: str
    baseline_risk: RiskLevel
    base_score: int
    concerns: Tuple[str, ...] = ()
    # subset of {"allergies", "diabetes", "blood_pressure", "age"}
    affected_by: frozenset = frozenset()


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f) or f < 0:
        return None
    return int(f)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


@dataclass(frozen=True)
class UserProfile:
    age: Optional[int] = None
    allergies: Tuple[str, ...] = ()
    has_diabetes: bool = False
    diabetes_measure: Optional[str] = None
    diabetes_value: Optional[float] = None
    blood_pressure_systolic: Optional[int] = None
    blood_pressure_diastolic: Optional[int] = None

    @staticmethod
    def from_dict(raw: Optional[Mapping[str, Any]]) -> "UserProfile":
        """
        Build a profile from an untrusted mapping (profiles row, JSON file).
        Unusable values are dropped to "absent" instead of raising.
        """
        raw = raw or {}

        allergies_raw = raw.get("allergies") or []
        if isinstance(allergies_raw, str):
            allergies_raw = allergies_raw.split(",")
        allergies = tuple(
            a.strip() for a in allergies_raw if isinstance(a, str) and a.strip()
        )

        has_diabetes = raw.get("has_diabetes") is True
        measure = raw.get("diabetes_measure") if has_diabetes else None
        if measure is not None and not isinstance(measure, str):
            measure = str(measure)

        return UserProfile(
            age=_as_int(raw.get("age")),
            allergies=allergies,
            has_diabetes=has_diabetes,
            diabetes_measure=measure or None,
            diabetes_value=_as_float(raw.get("diabetes_value")) if has_diabetes else None,
            blood_pressure_systolic=_as_int(raw.get("blood_pressure_systolic")),
            blood_pressure_diastolic=_as_int(raw.get("blood_pressure_diastolic")),
        )

    def to_request(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "allergies": list(self.allergies),
            "has_diabetes": self.has_diabetes,
        }
        optional = {
            "age": self.age,
            "diabetes_measure": self.diabetes_measure,
            "diabetes_value": self.diabetes_value,
            "blood_pressure_systolic": self.blood_pressure_systolic,
            "blood_pressure_diastolic": self.blood_pressure_diastolic,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out

    def redacted(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "has_diabetes": self.has_diabetes,
            "blood_pressure_systolic": self.blood_pressure_systolic,
            "blood_pressure_diastolic": self.blood_pressure_diastolic,
        }


@dataclass(frozen=True)
class ClassifiedIngredient:
    name: str
    category: str
    risk_level: RiskLevel
    base_score: float
    concerns: Tuple[str, ...]
    is_allergen: bool
    diabetes_risk: bool
    bp_risk: bool

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "ClassifiedIngredient":
        return ClassifiedIngredient(
            name=str(d["name"]),
            category=str(d["category"]).lower(),
            risk_level=RiskLevel(d["riskLevel"]),
            base_score=d["baseScore"],
            concerns=tuple(d.get("concerns") or ()),
            is_allergen=bool(d.get("isAllergen")),
            diabetes_risk=bool(d.get("diabetesRisk")),
            bp_risk=bool(d.get("bpRisk")),
        )


@dataclass(frozen=True)
class Available:
    ingredients: Tuple[ClassifiedIngredient, ...]


@dataclass(frozen=True)
class Unavailable:
    reason: str


ClassificationOutcome = Union[Available, Unavailable]


@dataclass(frozen=True)
class Multiplier:
    reason: str
    value: float


@dataclass(frozen=True)
class IngredientScore:
    name: str
    canonical_form: str
    category: str
    baseline_risk: RiskLevel
    base_score: float
    multipliers: Tuple[Multiplier, ...]
    final_score: int
    comment: str
    is_allergen: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "canonicalForm": self.canonical_form,
            "category": self.category,
            "baselineRisk": self.baseline_risk.value,
            "baseScore": self.base_score,
            "multipliers": [{"reason": m.reason, "value": m.value} for m in self.multipliers],
            "finalScore": self.final_score,
            "comment": self.comment,
            "isAllergen": self.is_allergen,
        }


@dataclass(frozen=True)
class ProductScore:
    product_name: str
    scan_date: str
    user_profile: Dict[str, Any]
    ingredient_scores: Tuple[IngredientScore, ...]
    product_score: int
    verdict: Verdict
    top_reasons: Tuple[str, ...]
    disclaimer: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productName": self.product_name,
            "scanDate": self.scan_date,
            "userProfile": dict(self.user_profile),
            "ingredientScores": [s.to_dict() for s in self.ingredient_scores],
            "productScore": self.product_score,
            "verdict": self.verdict.value,
            "topReasons": list(self.top_reasons),
            "disclaimer": self.disclaimer,
        }


@dataclass(frozen=True)
class ParsedLabel:
    product_name: str
    ingredients: List[str]
    raw_text: str


@dataclass(frozen=True)
class OcrResult:
    text: str
    confidence: float = 100.0

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence < LOW_OCR_CONFIDENCE


@dataclass(frozen=True)
class ScanReport:
    parsed: ParsedLabel
    nutrition_facts: Dict[str, float] = field(default_factory=dict)
    score: Optional[ProductScore] = None
    low_confidence: bool = False

    @property
    def no_ingredients(self) -> bool:
        return not self.parsed.ingredients

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productName": self.parsed.product_name,
            "ingredients": list(self.parsed.ingredients),
            "nutritionFacts": dict(self.nutrition_facts),
            "lowConfidence": self.low_confidence,
            "noIngredients": self.no_ingredients,
            "result": self.score.to_dict() if self.score else None,
        }

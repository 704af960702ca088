import re
from types import MappingProxyType
from typing import Dict, List, Mapping

from .models import IngredientRecord, RiskLevel

# REQUIRE_CLINICAL_REVIEW: baseline risk values are a demonstration table only.
ALLERGIES = "allergies"
DIABETES = "diabetes"
BLOOD_PRESSURE = "blood_pressure"
AGE = "age"

NOT_IN_DATABASE = "Ingredient not in database"


def _rec(name, canonical, category, risk, score, concerns, *affected_by) -> IngredientRecord:
    return IngredientRecord(
        name=name,
        canonical_form=canonical,
        category=category,
        baseline_risk=risk,
        base_score=score,
        concerns=tuple(concerns),
        affected_by=frozenset(affected_by),
    )


_LOW, _MOD, _HIGH = RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH

_TABLE: Dict[str, IngredientRecord] = {
    # sugars and sweeteners
    "sugar": _rec("Sugar", "sugar", "sweetener", _MOD, 5,
                  ["High glycemic index", "Blood sugar spikes"], DIABETES),
    "high fructose corn syrup": _rec("High Fructose Corn Syrup", "high_fructose_corn_syrup", "sweetener", _HIGH, 10,
                                     ["Metabolic issues", "High glycemic"], DIABETES),
    "corn syrup": _rec("Corn Syrup", "corn_syrup", "sweetener", _HIGH, 10,
                       ["High glycemic index"], DIABETES),

    # sodium and preservatives
    "sodium": _rec("Sodium", "sodium", "mineral", _MOD, 5,
                   ["Blood pressure elevation"], BLOOD_PRESSURE),
    "salt": _rec("Salt", "salt", "mineral", _MOD, 5,
                 ["Blood pressure elevation", "Fluid retention"], BLOOD_PRESSURE),
    "monosodium glutamate": _rec("Monosodium Glutamate (MSG)", "msg", "flavor_enhancer", _MOD, 5,
                                 ["Sodium content", "Headaches in sensitive individuals"], BLOOD_PRESSURE),
    "sodium benzoate": _rec("Sodium Benzoate", "sodium_benzoate", "preservative", _MOD, 5,
                            ["Preservative", "Sodium content"], BLOOD_PRESSURE, AGE),

    # fats
    "saturated fat": _rec("Saturated Fat", "saturated_fat", "fat", _MOD, 5,
                          ["Cardiovascular health"], AGE),
    "trans fat": _rec("Trans Fat", "trans_fat", "fat", _HIGH, 10,
                      ["Cardiovascular disease", "Banned in many countries"], AGE),
    "palm oil": _rec("Palm Oil", "palm_oil", "fat", _MOD, 5,
                     ["High in saturated fat"], AGE),

    # artificial ingredients
    "artificial flavors": _rec("Artificial Flavors", "artificial_flavors", "additive", _MOD, 5,
                               ["Synthetic additives", "Unclear composition"], ALLERGIES),
    "artificial colors": _rec("Artificial Colors", "artificial_colors", "additive", _MOD, 5,
                              ["Hyperactivity in children", "Allergic reactions"], ALLERGIES),

    # common allergens
    "milk": _rec("Milk", "milk", "dairy", _LOW, 0, ["Common allergen"], ALLERGIES),
    "wheat": _rec("Wheat", "wheat", "grain", _LOW, 0, ["Common allergen", "Gluten content"], ALLERGIES),
    "soy": _rec("Soy", "soy", "legume", _LOW, 0, ["Common allergen"], ALLERGIES),
    "peanuts": _rec("Peanuts", "peanuts", "nut", _LOW, 0, ["Severe allergen"], ALLERGIES),

    # generally safe
    "whole wheat": _rec("Whole Wheat", "whole_wheat", "grain", _LOW, 0, [], ALLERGIES),
    "oats": _rec("Oats", "oats", "grain", _LOW, 0, []),
    "water": _rec("Water", "water", "liquid", _LOW, 0, []),
}

INGREDIENT_DATABASE: Mapping[str, IngredientRecord] = MappingProxyType(_TABLE)

# Longest key first so "whole wheat flour" hits "whole wheat" before "wheat".
# sorted() is stable, so equal lengths keep table order.
_SUBSTRING_ORDER: List[str] = sorted(_TABLE, key=len, reverse=True)


def default_record(raw_name: str) -> IngredientRecord:
    normalized = raw_name.lower().strip()
    return IngredientRecord(
        name=raw_name,
        canonical_form=re.sub(r"\s+", "_", normalized),
        category="unknown",
        baseline_risk=RiskLevel.LOW,
        base_score=0,
        concerns=(NOT_IN_DATABASE,),
        affected_by=frozenset(),
    )


def lookup(raw_name: str) -> IngredientRecord:
    """
    Resolve free text to a knowledge base entry: exact key, then substring
    in either direction, then a default low-risk record. Never raises.
    """
    normalized = raw_name.lower().strip()
    if not normalized:
        return default_record(raw_name)

    hit = INGREDIENT_DATABASE.get(normalized)
    if hit is not None:
        return hit

    for key in _SUBSTRING_ORDER:
        if key in normalized or normalized in key:
            return INGREDIENT_DATABASE[key]

    return default_record(raw_name)

from typing import List

from .models import UserProfile

CLASSIFIER_CATEGORIES: List[str] = [
    "sweetener", "preservative", "fat", "additive", "protein", "fiber", "vitamin", "mineral",
    "grain", "dairy", "nut", "legume", "fruit", "vegetable", "unknown",
]

SYSTEM_PROMPT = "You are a nutrition expert. Output JSON only."


def _blood_pressure_text(profile: UserProfile) -> str:
    s, d = profile.blood_pressure_systolic, profile.blood_pressure_diastolic
    if s and d:
        return f"{s}/{d}"
    if s:
        return f"{s} systolic"
    if d:
        return f"{d} diastolic"
    return "Normal"


def classify_prompt(ingredients: List[str], profile: UserProfile) -> str:
    numbered = "\n".join(f"{i}. {name}" for i, name in enumerate(ingredients, start=1))
    return f"""
Analyze these ingredients and provide an assessment for each one.

Ingredients ({len(ingredients)}):
{numbered}

User Profile:
- Allergies: {", ".join(profile.allergies) or "None"}
- Has Diabetes: {"Yes" if profile.has_diabetes else "No"}
- Blood Pressure: {_blood_pressure_text(profile)}
- Age: {profile.age if profile.age is not None else "Not specified"}

Return exactly one entry per ingredient, in the same order as the input list.
Each entry:
- name: ingredient name
- category: one of ({", ".join(CLASSIFIER_CATEGORIES)})
- riskLevel: one of (LOW, MODERATE, HIGH)
- baseScore: number 0-10 (0=healthy, 10=unhealthy)
- concerns: array of health concerns (empty if none)
- isAllergen: boolean (true if matches user allergies)
- diabetesRisk: boolean (true if problematic for diabetes)
- bpRisk: boolean (true if affects blood pressure)

Output format:
{{"ingredients": [{{"name": "", "category": "", "riskLevel": "LOW", "baseScore": 0, "concerns": [], "isAllergen": false, "diabetesRisk": false, "bpRisk": false}}]}}
""".strip()

CLASSIFIED_INGREDIENT_SCHEMA = {
  "type": "object",
  "required": ["name", "category", "riskLevel", "baseScore"],
  "properties": {
    "name": {"type": "string"},
    "category": {"type": "string"},
    "riskLevel": {"type": "string", "enum": ["LOW", "MODERATE", "HIGH"]},
    "baseScore": {"type": "number", "minimum": 0, "maximum": 10},
    "concerns": {"type": "array", "items": {"type": "string"}},
    "isAllergen": {"type": "boolean"},
    "diabetesRisk": {"type": "boolean"},
    "bpRisk": {"type": "boolean"},
  }
}

CLASSIFICATION_SCHEMA = {
  "type": "object",
  "required": ["ingredients"],
  "properties": {
    "ingredients": {"type": "array", "items": CLASSIFIED_INGREDIENT_SCHEMA}
  }
}

# mirrors the check constraints on the scans table
SCAN_RECORD_SCHEMA = {
  "type": "object",
  "additionalProperties": False,
  "required": ["user_id", "product_name", "ingredients", "nutrition_facts", "product_score", "verdict", "top_reasons"],
  "properties": {
    "user_id": {"type": "string", "minLength": 1},
    "product_name": {"type": ["string", "null"]},
    "ingredients": {"type": "array", "items": {"type": "object"}},
    "nutrition_facts": {
      "type": ["object", "null"],
      "additionalProperties": False,
      "properties": {
        "sugar_g_per_100g": {"type": "number", "minimum": 0},
        "sodium_mg_per_100g": {"type": "number", "minimum": 0},
        "sat_fat_g_per_100g": {"type": "number", "minimum": 0},
      }
    },
    "product_score": {"type": "integer", "minimum": 0, "maximum": 100},
    "verdict": {"type": "string", "enum": ["Good", "Moderate", "Bad"]},
    "top_reasons": {"type": "array", "maxItems": 3, "items": {"type": "string"}},
  }
}

import re
from typing import Dict, List

from .models import ParsedLabel

UNKNOWN_PRODUCT = "Unknown Product"

_PRODUCT_NAME_RE = re.compile(r"^(.+?)ingredients", re.I)
_SECTION_RE = re.compile(r"ingredients[:\s]+(.+?)(?:contains|nutrition|$)", re.I)
_AFTER_MARKER_RE = re.compile(r"ingredients[:\s]+(.+)", re.I)

_PAREN_RE = re.compile(r"\([^)]*\)")
_OCR_NOISE_RE = re.compile(r"[^\w\s-]")

_NUTRITION_PATTERNS = {
    "sugar_g_per_100g": re.compile(r"sugars?[:\s]+(\d+\.?\d*)\s*g", re.I),
    "sodium_mg_per_100g": re.compile(r"sodium[:\s]+(\d+\.?\d*)\s*mg", re.I),
    "sat_fat_g_per_100g": re.compile(r"saturated\s+fat[:\s]+(\d+\.?\d*)\s*g", re.I),
}


def clean_text(ocr_text: str) -> str:
    return re.sub(r"\s+", " ", ocr_text or "").strip()


def parse_ingredients(ocr_text: str) -> ParsedLabel:
    """
    Split OCR text into product name and an ordered ingredient list.
    Product name is whatever precedes "Ingredients"; the list runs until
    "Contains" / "Nutrition" or the end of the text.
    """
    cleaned = clean_text(ocr_text)

    m = _PRODUCT_NAME_RE.match(cleaned)
    product_name = m.group(1).strip() if m else UNKNOWN_PRODUCT
    if not product_name:
        product_name = UNKNOWN_PRODUCT

    section = _SECTION_RE.search(cleaned)
    if section:
        ingredients_text = section.group(1)
    else:
        fallback = _AFTER_MARKER_RE.search(cleaned)
        ingredients_text = fallback.group(1) if fallback else cleaned

    return ParsedLabel(
        product_name=product_name,
        ingredients=split_ingredient_list(ingredients_text),
        raw_text=cleaned,
    )


def split_ingredient_list(text: str) -> List[str]:
    out: List[str] = []
    for token in re.split(r"[,;]", text):
        token = _PAREN_RE.sub("", token.strip()).strip()
        token = _OCR_NOISE_RE.sub(" ", token).strip()
        token = re.sub(r"\s+", " ", token)
        # short fragments and bare numbers are OCR noise
        if len(token) <= 2 or token.isdigit():
            continue
        out.append(token)
    return out


def extract_nutrition_facts(ocr_text: str) -> Dict[str, float]:
    facts: Dict[str, float] = {}
    for key, pattern in _NUTRITION_PATTERNS.items():
        m = pattern.search(ocr_text or "")
        if m:
            facts[key] = float(m.group(1))
    return facts

import json
import re
import sys
from typing import Any, List, Optional

import requests
from jsonschema import ValidationError, validate

from .config import Settings
from .llm_client import LLMClient, OpenAIAPIError
from .models import Available, ClassificationOutcome, ClassifiedIngredient, Unavailable, UserProfile
from .prompts import SYSTEM_PROMPT, classify_prompt
from .schemas import CLASSIFICATION_SCHEMA

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class ClassifierResponseError(ValueError):
    pass


def _coerce_payload(payload: Any) -> Any:
    """
    Accept {"ingredients": [...]}, a bare list, or free text wrapping a JSON
    array, and return the {"ingredients": [...]} form.
    """
    if isinstance(payload, list):
        return {"ingredients": payload}
    if isinstance(payload, str):
        m = _JSON_ARRAY_RE.search(payload)
        if not m:
            raise ClassifierResponseError("no JSON array in classifier response")
        try:
            return {"ingredients": json.loads(m.group(0))}
        except ValueError as exc:
            raise ClassifierResponseError(f"unparseable classifier response: {exc}") from exc
    return payload


def parse_classification(payload: Any, expected: int) -> List[ClassifiedIngredient]:
    body = _coerce_payload(payload)
    try:
        validate(instance=body, schema=CLASSIFICATION_SCHEMA)
    except ValidationError as exc:
        raise ClassifierResponseError(f"schema: {exc.message}") from exc

    items = body["ingredients"]
    # results are matched to inputs by position
    if len(items) != expected:
        raise ClassifierResponseError(
            f"length mismatch: sent {expected} ingredients, got {len(items)}"
        )
    return [ClassifiedIngredient.from_dict(d) for d in items]


class IngredientClassifier:
    """
    Batched remote classification. classify_batch never raises: every
    failure comes back as Unavailable so the caller can score locally.
    """

    name = "classifier"

    def _request(self, ingredients: List[str], profile: UserProfile) -> Any:
        raise NotImplementedError

    def classify_batch(self, ingredients: List[str], profile: UserProfile) -> ClassificationOutcome:
        if not ingredients:
            return Available(())
        try:
            payload = self._request(list(ingredients), profile)
            return Available(tuple(parse_classification(payload, len(ingredients))))
        except (requests.RequestException, OpenAIAPIError, ClassifierResponseError) as exc:
            reason = f"{type(exc).__name__}: {exc}"
        except Exception as exc:
            reason = f"malformed response: {type(exc).__name__}: {exc}"
        print(f"[classify] {self.name} unavailable, falling back to local database: {reason}", file=sys.stderr)
        return Unavailable(reason)


class EdgeFunctionClassifier(IngredientClassifier):
    """POSTs {ingredients, userProfile} and expects {ingredients: [...]} back."""

    name = "edge-function"

    def __init__(self, url: str, api_key: str = "", timeout: float = 30):
        self.url = url
        self.timeout = timeout
        self.h = {"Content-Type": "application/json"}
        if api_key:
            self.h["Authorization"] = f"Bearer {api_key}"

    def _request(self, ingredients: List[str], profile: UserProfile) -> Any:
        body = {"ingredients": ingredients, "userProfile": profile.to_request()}
        r = requests.post(self.url, headers=self.h, json=body, timeout=self.timeout)
        r.raise_for_status()
        return r.json()


class LLMClassifier(IngredientClassifier):
    name = "llm"

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def _request(self, ingredients: List[str], profile: UserProfile) -> Any:
        return self.llm.json_call(SYSTEM_PROMPT, classify_prompt(ingredients, profile))


def build_classifier(s: Settings) -> Optional[IngredientClassifier]:
    if s.classifier_url:
        return EdgeFunctionClassifier(s.classifier_url, s.classifier_api_key, s.classifier_timeout_seconds)
    if s.openai_api_key:
        llm = LLMClient(s.openai_api_key, s.openai_base_url, s.openai_model, s.classifier_timeout_seconds)
        return LLMClassifier(llm)
    return None

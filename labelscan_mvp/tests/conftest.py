import json

import pytest
import requests

from labelscan.models import UserProfile


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None, url="http://fake"):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)
        self.url = url

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class Recorder:
    """Stands in for requests.post/get and remembers each call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def senior_diabetic_profile():
    return UserProfile.from_dict({
        "has_diabetes": True,
        "allergies": [],
        "age": 70,
        "blood_pressure_systolic": 140,
    })


def ai_item(name, category="unknown", risk="LOW", base=0, concerns=(), allergen=False, diabetes=False, bp=False):
    return {
        "name": name,
        "category": category,
        "riskLevel": risk,
        "baseScore": base,
        "concerns": list(concerns),
        "isAllergen": allergen,
        "diabetesRisk": diabetes,
        "bpRisk": bp,
    }


@pytest.fixture
def make_ai_item():
    return ai_item

import json

import pytest

from labelscan.config import Settings
from labelscan.models import OcrResult, UserProfile


def test_profile_from_dict_normalizes_fields():
    p = UserProfile.from_dict({
        "age": "72",
        "allergies": [" Peanut ", "", "  ", "milk", None],
        "has_diabetes": True,
        "diabetes_measure": "hba1c",
        "diabetes_value": "7.1",
        "blood_pressure_systolic": 135.0,
        "blood_pressure_diastolic": "n/a",
    })
    assert p.age == 72
    assert p.allergies == ("Peanut", "milk")
    assert p.diabetes_value == 7.1
    assert p.blood_pressure_systolic == 135
    assert p.blood_pressure_diastolic is None


def test_diabetes_details_ignored_without_diabetes():
    p = UserProfile.from_dict({"has_diabetes": False, "diabetes_measure": "hba1c", "diabetes_value": 9})
    assert p.diabetes_measure is None
    assert p.diabetes_value is None
    assert "diabetes_value" not in p.to_request()


@pytest.mark.parametrize("raw", [
    None, {}, {"age": -3}, {"age": True}, {"allergies": "soy, wheat"},
    {"age": 1e999, "blood_pressure_systolic": "inf"}, {"age": "nan"},
])
def test_profile_from_dict_never_raises(raw):
    p = UserProfile.from_dict(raw)
    assert p.age is None
    assert not p.has_diabetes


def test_non_finite_numbers_are_absent():
    p = UserProfile.from_dict(json.loads('{"age": 1e999, "blood_pressure_systolic": "inf", "blood_pressure_diastolic": 85,'
                                         ' "has_diabetes": true, "diabetes_value": "-inf"}'))
    assert p.age is None
    assert p.blood_pressure_systolic is None
    assert p.blood_pressure_diastolic == 85
    assert p.diabetes_value is None


def test_comma_separated_allergies():
    assert UserProfile.from_dict({"allergies": "soy, wheat"}).allergies == ("soy", "wheat")


def test_redacted_profile_has_no_allergies():
    p = UserProfile.from_dict({"age": 30, "allergies": ["soy"], "blood_pressure_systolic": 120})
    assert p.redacted() == {
        "age": 30,
        "has_diabetes": False,
        "blood_pressure_systolic": 120,
        "blood_pressure_diastolic": None,
    }


def test_low_confidence_threshold():
    assert OcrResult("x", 59.9).is_low_confidence
    assert not OcrResult("x", 60).is_low_confidence


def test_settings_from_env(monkeypatch):
    for k in ["CLASSIFIER_URL", "OPENAI_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "OPENAI_MODEL"]:
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("CLASSIFIER_TIMEOUT_SECONDS", "12")
    s = Settings.from_env()
    assert s.classifier_timeout_seconds == 12
    assert s.openai_model == "gpt-4.1-mini"
    with pytest.raises(RuntimeError):
        s.require_supabase()


def test_settings_rejects_non_positive_timeout(monkeypatch):
    monkeypatch.setenv("CLASSIFIER_TIMEOUT_SECONDS", "0")
    with pytest.raises(RuntimeError):
        Settings.from_env()

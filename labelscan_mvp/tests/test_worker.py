import json

import pytest

import worker
from labelscan import classifier as classifier_mod


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ["CLASSIFIER_URL", "CLASSIFIER_API_KEY", "OPENAI_API_KEY", "SUPABASE_URL",
              "SUPABASE_SERVICE_ROLE_KEY", "CLASSIFIER_TIMEOUT_SECONDS"]:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture
def label(tmp_path):
    p = tmp_path / "label.txt"
    p.write_text("Choco Bar\nIngredients: Sugar, Milk, Cocoa\nContains: Milk", encoding="utf-8")
    return p


@pytest.fixture
def profile_file(tmp_path):
    p = tmp_path / "profile.json"
    p.write_text(json.dumps({"allergies": ["milk"], "has_diabetes": True}), encoding="utf-8")
    return p


def test_local_scan_prints_report(label, profile_file, capsys):
    code = worker.main(["--text-file", str(label), "--profile", str(profile_file)])
    out, err = capsys.readouterr()
    assert code == worker.EXIT_OK
    report = json.loads(out)
    assert report["productName"] == "Choco Bar"
    assert report["ingredients"] == ["Sugar", "Milk", "Cocoa"]
    result = report["result"]
    assert [i["finalScore"] for i in result["ingredientScores"]] == [8, 10, 0]
    assert result["topReasons"][0] == "Contains 1 allergen(s) matching your profile"
    assert "no classifier configured" in err


def test_no_ingredients_exit_code(tmp_path, capsys):
    p = tmp_path / "blank.txt"
    p.write_text("", encoding="utf-8")
    assert worker.main(["--text-file", str(p), "--no-classifier"]) == worker.EXIT_NO_INGREDIENTS
    assert "no ingredients found" in capsys.readouterr().err


def test_low_confidence_warning(label, capsys):
    worker.main(["--text-file", str(label), "--confidence", "40", "--no-classifier"])
    assert "low OCR confidence" in capsys.readouterr().err


def test_user_id_without_supabase_is_fatal(label, capsys):
    assert worker.main(["--text-file", str(label), "--user-id", "u1"]) == worker.EXIT_ERROR
    assert "FATAL" in capsys.readouterr().err


def test_save_requires_user_id(label):
    with pytest.raises(SystemExit):
        worker.main(["--text-file", str(label), "--save"])


def test_classifier_failure_falls_back(label, profile_file, monkeypatch, capsys):
    import requests

    def down(*a, **kw):
        raise requests.ConnectionError("refused")

    monkeypatch.setenv("CLASSIFIER_URL", "https://edge/analyze")
    monkeypatch.setattr(classifier_mod.requests, "post", down)

    code = worker.main(["--text-file", str(label), "--profile", str(profile_file)])
    out, err = capsys.readouterr()
    assert code == worker.EXIT_OK
    assert "[classify] edge-function unavailable" in err
    assert json.loads(out)["result"]["ingredientScores"][0]["name"] == "Sugar"

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class RiskMultipliers:
    # REQUIRE_CLINICAL_REVIEW: multiplier values are not clinically validated
    allergy_penalty: float = 10
    diabetes_factor: float = 1.5
    blood_pressure_factor: float = 1.3
    age_factor: float = 1.1
    age_threshold: int = 65
    high_bp_systolic: int = 130
    high_bp_diastolic: int = 80
    age_sensitive_categories: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"preservative", "fat", "additive"})
    )
    # None = no ceiling
    local_score_ceiling: Optional[int] = None
    classifier_score_ceiling: Optional[int] = 10


DEFAULT_MULTIPLIERS = RiskMultipliers()


@dataclass(frozen=True)
class Settings:
    classifier_url: str
    classifier_api_key: str
    openai_api_key: str
    openai_base_url: str
    openai_model: str
    classifier_timeout_seconds: int
    supabase_url: str
    supabase_service_role_key: str

    @staticmethod
    def from_env() -> "Settings":
        classifier_url = os.environ.get("CLASSIFIER_URL", "").strip()
        classifier_key = os.environ.get("CLASSIFIER_API_KEY", "").strip()
        openai_key = os.environ.get("OPENAI_API_KEY", "").strip()
        base_url = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        model = os.environ.get("OPENAI_MODEL", "gpt-4.1-mini").strip()
        timeout_seconds = int(os.environ.get("CLASSIFIER_TIMEOUT_SECONDS", "30"))
        supabase_url = os.environ.get("SUPABASE_URL", "").strip()
        supabase_key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "").strip()

        if timeout_seconds <= 0:
            raise RuntimeError("CLASSIFIER_TIMEOUT_SECONDS must be positive")

        return Settings(
            classifier_url=classifier_url,
            classifier_api_key=classifier_key,
            openai_api_key=openai_key,
            openai_base_url=base_url,
            openai_model=model,
            classifier_timeout_seconds=timeout_seconds,
            supabase_url=supabase_url,
            supabase_service_role_key=supabase_key,
        )

    def require_supabase(self) -> None:
        if not self.supabase_url or not self.supabase_service_role_key:
            raise RuntimeError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")

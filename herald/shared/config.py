import os
from dataclasses import dataclass, field, replace
from typing import List

from dotenv import load_dotenv

# Load .env if present
load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _csv(name: str, default: str) -> List[str]:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]


# Hosted auth backend (URL/key pair)
BACKEND_URL = os.getenv("BACKEND_URL", "")
BACKEND_ANON_KEY = os.getenv("BACKEND_ANON_KEY", "")

# AI polishing
GPT_API_KEY = os.getenv("GPT_API_KEY", "")
OPENAI_MODEL_POLISH = os.getenv("OPENAI_MODEL_POLISH", "gpt-4o-mini")

# Payment provider
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET", "")
RAZORPAY_API_BASE = os.getenv("RAZORPAY_API_BASE", "https://api.razorpay.com/v1")

PUBLIC_SITE_URL = os.getenv("PUBLIC_SITE_URL", "http://localhost:3000")
CORS_ORIGINS = _csv("CORS_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Builder behaviour
AUTO_SAVE_INTERVAL_SEC = float(os.getenv("AUTO_SAVE_INTERVAL_SEC", "30"))
SLUG_POLICY = os.getenv("SLUG_POLICY", "per_save")  # per_save | stable
ENFORCE_TIER_SECTIONS = _flag("ENFORCE_TIER_SECTIONS")
REQUIRE_PAYMENT_TO_PUBLISH = _flag("REQUIRE_PAYMENT_TO_PUBLISH")

# Rate limits
AI_POLISH_HOURLY_LIMIT = int(os.getenv("AI_POLISH_HOURLY_LIMIT", "5"))
AI_POLISH_DAILY_LIMIT = int(os.getenv("AI_POLISH_DAILY_LIMIT", "10"))
NOMINATION_HOURLY_LIMIT = int(os.getenv("NOMINATION_HOURLY_LIMIT", "5"))


@dataclass(frozen=True)
class Settings:
    backend_url: str = BACKEND_URL
    backend_anon_key: str = BACKEND_ANON_KEY
    gpt_api_key: str = GPT_API_KEY
    openai_model_polish: str = OPENAI_MODEL_POLISH
    razorpay_key_id: str = RAZORPAY_KEY_ID
    razorpay_key_secret: str = RAZORPAY_KEY_SECRET
    razorpay_webhook_secret: str = RAZORPAY_WEBHOOK_SECRET
    razorpay_api_base: str = RAZORPAY_API_BASE
    public_site_url: str = PUBLIC_SITE_URL
    cors_origins: List[str] = field(default_factory=lambda: list(CORS_ORIGINS))
    log_level: str = LOG_LEVEL
    enforce_tier_sections: bool = ENFORCE_TIER_SECTIONS
    require_payment_to_publish: bool = REQUIRE_PAYMENT_TO_PUBLISH
    ai_polish_hourly_limit: int = AI_POLISH_HOURLY_LIMIT
    ai_polish_daily_limit: int = AI_POLISH_DAILY_LIMIT
    nomination_hourly_limit: int = NOMINATION_HOURLY_LIMIT

    def with_overrides(self, **kwargs) -> "Settings":
        return replace(self, **kwargs)


def get_settings() -> Settings:
    return Settings()

import os
from datetime import timedelta
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MONGO_URI = "mongodb://localhost:27017/catalog"
DEFAULT_BCRYPT_ROUNDS = 12
TOKEN_LIFETIME = timedelta(hours=1)


def _int_from_env(name: str, default: int) -> int:
    raw_value = os.getenv(name, "")
    try:
        return int(raw_value) if raw_value.strip() else default
    except (TypeError, ValueError):
        return default


def cors_origins_from_env() -> List[str]:
    origins = []
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(","):
        trimmed = origin.strip()
        if trimmed:
            origins.append(trimmed)
    return origins


def load_settings() -> Dict[str, object]:
    """Collect application settings from the environment (and any .env file)."""
    secret = (
        os.getenv("TOKEN_SECRET")
        or os.getenv("JWT_SECRET_KEY")
        or "change-me-in-production"
    )
    return {
        "MONGO_URI": os.getenv("MONGO_URI", DEFAULT_MONGO_URI) or DEFAULT_MONGO_URI,
        "JWT_SECRET_KEY": secret,
        "JWT_ACCESS_TOKEN_EXPIRES": TOKEN_LIFETIME,
        "BCRYPT_ROUNDS": _int_from_env("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        "CORS_ALLOWED_ORIGINS": cors_origins_from_env(),
    }

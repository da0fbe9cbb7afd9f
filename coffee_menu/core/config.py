from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./coffee_menu.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

# Auth (JWT)
JWT_SECRET = os.getenv("JWT_SECRET", "").strip()
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))

# Tenant resolution
TRUST_FORWARDED_HOST = os.getenv("TRUST_FORWARDED_HOST", "0").strip().lower() in _TRUTHY
ENFORCE_SHOP_TENANT_SCOPE = os.getenv("ENFORCE_SHOP_TENANT_SCOPE", "1").strip().lower() in _TRUTHY

# Rate limiting (per client address, in process memory)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "1").strip().lower() in _TRUTHY
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "20"))
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "1"))
TRUST_FORWARDED_FOR = os.getenv("TRUST_FORWARDED_FOR", "0").strip().lower() in _TRUTHY

# Main admin bootstrap on startup
BOOTSTRAP_MAIN_ADMIN_USERNAME = os.getenv("BOOTSTRAP_MAIN_ADMIN_USERNAME", "admin").strip() or "admin"
BOOTSTRAP_MAIN_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_MAIN_ADMIN_PASSWORD", "").strip()


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    expire_hours: int = 24
    algorithm: str = "HS256"


def load_token_settings() -> TokenSettings:
    if not JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not configured.")
    if JWT_EXPIRE_HOURS <= 0:
        raise RuntimeError(f"Invalid JWT_EXPIRE_HOURS: {JWT_EXPIRE_HOURS}")
    return TokenSettings(secret=JWT_SECRET, expire_hours=JWT_EXPIRE_HOURS, algorithm=JWT_ALGORITHM)

# backend/bakery/config.py
from __future__ import annotations
import os


def _split_env_list(value: str | None, default: set[str]) -> set[str]:
    if not value:
        return set(default)
    return {item.strip() for item in value.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/bakery.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///bakery.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session tokens live for a shift (8h), then the user logs in again
    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "8"))

    # bcrypt cost factor; tests lower it to keep hashing fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    CORS_ALLOWED_ORIGINS = _split_env_list(
        os.environ.get("CORS_ALLOWED_ORIGINS"),
        {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:4173",
            "http://127.0.0.1:4173",
        },
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

"""
Application settings, read from the environment (and .env) once at import.
"""

import os

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
DATABASE_URL = os.getenv("DATABASE_URL")
STORE_BACKEND = os.getenv("STORE_BACKEND", "postgres").strip().lower()
SESSION_EXPIRATION_MINUTES = int(os.getenv("SESSION_EXPIRATION_MINUTES", 1440))  # Default 24 hours
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", 3000))


def default_config() -> dict:
    return {
        "SECRET_KEY": SECRET_KEY,
        "DATABASE_URL": DATABASE_URL,
        "STORE_BACKEND": STORE_BACKEND,
        "SESSION_EXPIRATION_MINUTES": SESSION_EXPIRATION_MINUTES,
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
    }

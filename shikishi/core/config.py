# shikishi/core/config.py
import logging
import os

logger = logging.getLogger("shikishi.config")
logger.setLevel(logging.INFO)


def _int_env(name: str, default: int) -> int:
    """Read an integer env var, falling back to the default on junk values"""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        logger.warning(f"Invalid {name}, using default {default}")
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shikishi.db")
AUTO_CREATE_TABLES = _bool_env("AUTO_CREATE_TABLES", True)

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
# Manage tokens live about as long as a board is passed around
MANAGE_TOKEN_EXPIRE_MINUTES = _int_env("MANAGE_TOKEN_EXPIRE_MINUTES", 60 * 24 * 365)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if o.strip()
]

CLIENT_BUILD_DIR = os.getenv("CLIENT_BUILD_DIR", "")

DEFAULT_VIEWPORT_WIDTH = _int_env("DEFAULT_VIEWPORT_WIDTH", 1024)

"""Environment-driven configuration for the chat client."""

import os
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:5000/api"


def load_env() -> None:
    """Load .env into os.environ (existing variables win)."""
    load_dotenv()


def get_api_url() -> str:
    """Base URL of the shop backend, without a trailing slash."""
    return os.getenv("SHOPCHAT_API_URL", DEFAULT_API_URL).rstrip("/")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO")


def get_log_file() -> Optional[str]:
    return os.getenv("LOG_FILE") or None


def background_persistence_enabled() -> bool:
    """Whether chat messages are saved on a daemon thread."""
    return os.getenv("SHOPCHAT_BACKGROUND_PERSISTENCE", "1").lower() in {"1", "true", "yes"}

"""Environment helpers shared by the settings modules."""

from __future__ import annotations

import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured  # type: ignore
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Optional .env in the project root; real environment variables win.
load_dotenv(BASE_DIR / ".env", override=False)


def get_env(var_name: str, default=None, required: bool = False):
    value = os.environ.get(var_name, default)
    if required and value in (None, ""):
        raise ImproperlyConfigured(f"Missing required environment variable: {var_name}")
    return value


def get_env_bool(var_name: str, default: bool = False) -> bool:
    return str(get_env(var_name, str(default))).lower() in ("1", "true", "yes")


def get_env_list(var_name: str, default: str = "") -> list[str]:
    raw = get_env(var_name, default) or ""
    return [item.strip() for item in raw.split(",") if item.strip()]

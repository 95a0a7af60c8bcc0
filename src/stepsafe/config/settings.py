"""
Settings/secret loading helpers.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()

DEFAULT_DATA_DIR = Path("stepsafe_data")
DEFAULT_OUTPUT_ROOT = Path("outputs/dashboards")


class Secrets(BaseModel):
    """
    API keys loaded from environment variables.

    Attributes:
        google_api_key: Key for the Google Geocoding fallback.
        openai_api_key: Key for OpenAI.
        openrouter_api_key: Key for OpenRouter.
        gemini_api_key: Key for the Gemini API (direct Google).
    """
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")

    model_config = {
        "populate_by_name": True,
    }


@lru_cache(maxsize=1)
def get_secrets() -> Secrets:
    """
    Load secrets from environment/.env exactly once.
    """
    values = {field.alias: os.getenv(field.alias) for field in Secrets.model_fields.values()}
    return Secrets(**values)


def resolve_data_dir(configured: Optional[Path] = None) -> Path:
    """Return the cache/history directory: config value, then STEPSAFE_DATA_DIR, then the default."""
    raw = configured or os.getenv("STEPSAFE_DATA_DIR") or DEFAULT_DATA_DIR
    return Path(raw).expanduser().resolve()


def resolve_output_root(configured: Optional[Path] = None) -> Path:
    return Path(configured or DEFAULT_OUTPUT_ROOT).expanduser().resolve()

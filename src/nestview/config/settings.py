"""
Environment settings loading.
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


class Settings(BaseModel):
    """
    Process-wide defaults read from the environment (or a project .env).

    Attributes:
        document_root: Used when a composer is created without a document root.
        log_level: Overrides the CLI --log-level option.
    """
    document_root: Optional[Path] = Field(default=None, alias="NESTVIEW_DOCUMENT_ROOT")
    log_level: Optional[str] = Field(default=None, alias="NESTVIEW_LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load settings from environment/.env exactly once.
    """
    values = {field.alias: os.getenv(field.alias) or None for field in Settings.model_fields.values()}
    return Settings(**values)

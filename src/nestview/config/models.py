"""
Pydantic models for site configuration files.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


HeadKindName = Literal["title", "meta", "link", "css", "script", "js", "custom"]


class HeadEntry(BaseModel):
    """
    A head declaration applied to every page rendered from the config.

    Attributes:
        kind: title, meta, link, css, script (or js), custom.
        value: String or table, depending on kind.
        value_contains_path: For scripts, search the directory given in value.
    """
    kind: HeadKindName
    value: Any
    value_contains_path: bool = False

    model_config = {"extra": "forbid"}


class SiteConfig(BaseModel):
    """
    Top-level site configuration.

    Attributes:
        document_root: Base directory; every template and asset lives below it.
        outer: Outer template filename.
        link_root: Directory searched for ``link`` hrefs.
        paths: Group name to search directory (html, css, js, ...).
        vars: Instance variables visible to every template.
        head: Head entries declared before rendering.
    """
    document_root: Path
    outer: Optional[str] = None
    link_root: str = "view"
    paths: Dict[str, str] = Field(default_factory=dict)
    vars: Dict[str, Any] = Field(default_factory=dict)
    head: List[HeadEntry] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


def load_config(path: Path | str) -> SiteConfig:
    """
    Load and validate a TOML config file into a SiteConfig instance.

    A relative ``document_root`` is taken relative to the config file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    try:
        config = SiteConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    root = config.document_root.expanduser()
    if not root.is_absolute():
        root = config_path.parent / root
    root = root.resolve()
    if not root.is_dir():
        raise ConfigError(f"Document root is not a directory: {root}")
    return config.model_copy(update={"document_root": root})

"""Configuration settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

from .schema import STORAGE_KEY

logger = logging.getLogger(__name__)

CONFIG_ENV = "NOTEBOOK_CONFIG"
ROOT_ENV = "NOTEBOOK_ROOT"
LOG_LEVEL_ENV = "NOTEBOOK_LOG_LEVEL"
DEFAULT_ROOT_DIRNAME = ".notebook"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_root_path() -> str:
    """Get the default storage root: ``NOTEBOOK_ROOT`` or ``./.notebook``."""
    return os.environ.get(ROOT_ENV, str(Path.cwd() / DEFAULT_ROOT_DIRNAME))


class Settings(BaseModel):
    """Runtime settings for a notebook session."""

    root: str
    storage_key: str = STORAGE_KEY
    log_level: str = "INFO"

    @field_validator("storage_key")
    @classmethod
    def _check_storage_key(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            msg = f"Invalid storage_key: {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            msg = f"Invalid log_level: {value!r}"
            raise ValueError(msg)
        return level


def _read_config_file(path: Path) -> dict[str, Any]:
    """Return the mapping stored in a YAML config file.

    A missing file, malformed YAML or a non-mapping document yields an empty
    dictionary; the latter two are logged as warnings.
    """
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse config file %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: not a mapping", path)
        return {}
    return data


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build settings from an optional YAML file and environment overrides.

    Args:
        config_path: YAML file to read; falls back to ``NOTEBOOK_CONFIG``.

    Returns:
        Validated settings.

    Raises:
        pydantic.ValidationError: If a configured value is invalid.

    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV)

    values: dict[str, Any] = {}
    if config_path:
        values.update(_read_config_file(Path(config_path)))

    if ROOT_ENV in os.environ:
        values["root"] = os.environ[ROOT_ENV]
    if LOG_LEVEL_ENV in os.environ:
        values["log_level"] = os.environ[LOG_LEVEL_ENV]
    values.setdefault("root", get_root_path())

    return Settings.model_validate(values)

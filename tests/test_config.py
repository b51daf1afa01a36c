"""Tests for configuration loading."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from notebook_state.config import load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("NOTEBOOK_ROOT", "NOTEBOOK_CONFIG", "NOTEBOOK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings()

    assert settings.root == str(Path.cwd() / ".notebook")
    assert settings.storage_key == "notebook_v1_state"
    assert settings.log_level == "INFO"


def test_yaml_file_and_env_overrides(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    config = tmp_path / "notebook.yaml"
    config.write_text(
        "root: memory://from-file\nstorage_key: custom\nlog_level: debug\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("NOTEBOOK_CONFIG", str(config))

    settings = load_settings()
    assert settings.root == "memory://from-file"
    assert settings.storage_key == "custom"
    assert settings.log_level == "DEBUG"

    monkeypatch.setenv("NOTEBOOK_ROOT", "memory://from-env")
    monkeypatch.setenv("NOTEBOOK_LOG_LEVEL", "warning")
    settings = load_settings()
    assert settings.root == "memory://from-env"
    assert settings.log_level == "WARNING"


def test_malformed_yaml_is_ignored(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    config = tmp_path / "broken.yaml"
    config.write_text("root: [unclosed\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        settings = load_settings(config)

    assert settings.storage_key == "notebook_v1_state"
    assert "Failed to parse config file" in caplog.text


def test_non_mapping_yaml_is_ignored(tmp_path: Path) -> None:
    config = tmp_path / "list.yaml"
    config.write_text("- a\n- b\n", encoding="utf-8")

    assert load_settings(config).log_level == "INFO"


def test_missing_file_is_ignored(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.yaml").storage_key == "notebook_v1_state"


@pytest.mark.parametrize(
    "content",
    ["storage_key: a/b\n", "log_level: LOUD\n"],
)
def test_invalid_values_raise(tmp_path: Path, content: str) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(ValidationError):
        load_settings(config)

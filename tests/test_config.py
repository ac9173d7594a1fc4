"""Tests for repository configuration."""

import json
import logging

import pytest

from minivcs.config import (
    ConfigValidationError,
    Settings,
    create_config_manager,
    get_default_config,
)
from minivcs.config.schema import deep_merge, validate_config
from minivcs.utils.logger import configure_structlog, resolve_level


def test_deep_merge_basic():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    updates = {"b": {"c": 10, "e": 5}}

    result = deep_merge(base, updates)

    assert result == {"a": 1, "b": {"c": 10, "d": 3, "e": 5}}
    assert base["b"]["c"] == 2  # inputs untouched


def test_defaults_validate():
    config = validate_config(get_default_config())

    assert config["default_branch"] == "master"
    assert config["ignore_file"] == ".minivcsignore"
    assert config["log_level"] == "warning"


def test_validation_errors_are_readable():
    bad = {**get_default_config(), "default_branch": "has space", "log_level": "loud"}

    with pytest.raises(ConfigValidationError) as exc_info:
        validate_config(bad)

    errors = exc_info.value.errors
    assert any("has space" in e for e in errors)
    assert any("log_level" in e for e in errors)


def test_missing_file_created_when_requested(temp_workdir):
    manager = create_config_manager(
        temp_workdir, defaults=get_default_config(), create_if_missing=True
    )

    assert (temp_workdir / "config.json").exists()
    assert manager.get("initial_message") == "initial commit"


def test_invalid_json_falls_back_to_defaults(temp_workdir):
    (temp_workdir / "config.json").write_text("{not json")

    manager = create_config_manager(temp_workdir, defaults=get_default_config())

    assert manager.get_all() == get_default_config()


def test_user_values_override_defaults(temp_workdir):
    (temp_workdir / "config.json").write_text(json.dumps({"log_level": "debug"}))

    manager = create_config_manager(temp_workdir, defaults=get_default_config())

    assert manager.get("log_level") == "debug"
    assert manager.get("default_branch") == "master"


def test_settings_read_from_manager(temp_workdir):
    (temp_workdir / "config.json").write_text(json.dumps({"default_branch": "main"}))
    settings = Settings(create_config_manager(temp_workdir, defaults=get_default_config()))

    assert settings.default_branch == "main"
    assert settings.log_colors is True


def test_settings_env_overrides_log_level(temp_workdir, monkeypatch):
    (temp_workdir / "config.json").write_text(json.dumps({"log_level": "error"}))
    settings = Settings(create_config_manager(temp_workdir, defaults=get_default_config()))

    monkeypatch.setenv("MINIVCS_LOG_LEVEL", "DEBUG")

    assert settings.log_level == "debug"


def test_settings_without_manager_use_env(monkeypatch):
    monkeypatch.setenv("MINIVCS_DEFAULT_BRANCH", "trunk")
    monkeypatch.setenv("MINIVCS_LOG_COLORS", "no")

    settings = Settings()

    assert settings.default_branch == "trunk"
    assert settings.log_colors is False
    assert settings.initial_message == "initial commit"


def test_resolve_level():
    assert resolve_level("info") == logging.INFO
    assert resolve_level("INFO") == logging.INFO
    assert resolve_level(None) == logging.WARNING
    assert resolve_level("bogus", default=logging.ERROR) == logging.ERROR


def test_configure_structlog_sets_level():
    try:
        configure_structlog(log_format="json", log_level="debug")
        assert logging.getLogger("minivcs").level == logging.DEBUG
    finally:
        configure_structlog()
    assert logging.getLogger("minivcs").level == logging.WARNING


def test_non_object_config_falls_back_to_defaults(temp_workdir):
    (temp_workdir / "config.json").write_text("[1, 2]")

    manager = create_config_manager(temp_workdir, defaults=get_default_config())

    assert manager.get("default_branch") == "master"


def test_invalid_value_in_file_raises(temp_workdir):
    (temp_workdir / "config.json").write_text(json.dumps({"log_format": "xml"}))

    with pytest.raises(ConfigValidationError):
        create_config_manager(temp_workdir, defaults=get_default_config())

# tests/devenv/test_config_loader.py
# -*- coding: utf-8 -*-
"""
Tests for settings precedence: defaults < env < YAML < CLI.
"""

from pathlib import Path

import pytest

from devenv.config_loader import _deep_update, load_app_settings, read_yaml_config


def test_deep_update_merges_nested_and_ignores_none():
    source = {"compose": {"app_service": "app", "db_service": "db"}, "log_prefix": "[X]"}

    result = _deep_update(
        source, {"compose": {"db_service": "postgres"}, "log_prefix": None, "new": None}
    )

    assert result == {
        "compose": {"app_service": "app", "db_service": "postgres"},
        "log_prefix": "[X]",
        "new": None,
    }


def test_defaults(project_root, mock_logger):
    settings = load_app_settings({"project_root": str(project_root)}, current_logger=mock_logger)

    assert settings.project_root == Path(project_root)
    assert settings.compose.command == ["docker", "compose"]
    assert settings.db.username == "zhost_user"
    assert settings.db.database == "zhost"
    assert settings.readiness.interval == 2.0
    assert settings.readiness.max_attempts is None
    assert settings.marker_path == Path(project_root) / ".setup-complete"


def test_project_root_defaults_to_working_directory(monkeypatch, project_root, mock_logger):
    (project_root / "flowdesk.yaml").write_text("log_prefix: '[CWD]'\n")
    monkeypatch.chdir(project_root)

    settings = load_app_settings({}, current_logger=mock_logger)

    assert settings.project_root == Path(project_root)
    assert settings.log_prefix == "[CWD]"


def test_yaml_in_project_root_is_picked_up(project_root, mock_logger):
    (project_root / "flowdesk.yaml").write_text(
        "compose:\n  command: podman compose\nreadiness:\n  max_attempts: 30\n"
    )

    settings = load_app_settings({"project_root": str(project_root)}, current_logger=mock_logger)

    assert settings.compose.command == ["podman", "compose"]
    assert settings.compose.app_service == "app"
    assert settings.readiness.max_attempts == 30


def test_env_is_overridden_by_yaml_and_cli(monkeypatch, project_root, tmp_path, mock_logger):
    monkeypatch.setenv("FLOWDESK_LOG_PREFIX", "[ENV]")
    monkeypatch.setenv("DB_USERNAME", "env_user")
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("log_prefix: '[YAML]'\nbackend_url: http://localhost:9000\n")

    settings = load_app_settings(
        {"project_root": str(project_root), "backend_url": "http://api.test"},
        config_file_path=config_file,
        current_logger=mock_logger,
    )

    assert settings.db.username == "env_user"
    assert settings.log_prefix == "[YAML]"
    assert settings.backend_url == "http://api.test"


def test_invalid_yaml_is_ignored(project_root, mock_logger):
    path = project_root / "flowdesk.yaml"
    path.write_text("compose: [unclosed\n")

    assert read_yaml_config(path, mock_logger) == {}
    mock_logger.warning.assert_called_once()


def test_non_mapping_yaml_is_ignored(project_root, mock_logger):
    path = project_root / "flowdesk.yaml"
    path.write_text("- just\n- a list\n")

    assert read_yaml_config(path, mock_logger) == {}


def test_validation_error_exits(project_root, mock_logger):
    (project_root / "flowdesk.yaml").write_text("readiness:\n  mode: telepathy\n")

    with pytest.raises(SystemExit):
        load_app_settings({"project_root": str(project_root)}, current_logger=mock_logger)

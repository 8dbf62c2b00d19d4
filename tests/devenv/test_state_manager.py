# tests/devenv/test_state_manager.py
# -*- coding: utf-8 -*-
"""
Tests for the setup marker state.
"""

from devenv import config as static_config
from devenv.state_manager import (
    SetupState,
    is_configured,
    read_marker_details,
    read_setup_state,
    transition_setup_state,
)


def test_fresh_checkout_is_not_configured(app_settings):
    assert read_setup_state(app_settings) is SetupState.NOT_CONFIGURED
    assert is_configured(app_settings) is False


def test_hand_made_marker_counts_as_configured(app_settings):
    app_settings.marker_path.touch()

    assert is_configured(app_settings) is True
    assert read_marker_details(app_settings) == {}


def test_transition_to_configured_writes_marker(app_settings, mock_logger):
    transition = transition_setup_state(
        SetupState.CONFIGURED, "all steps done", app_settings, mock_logger
    )

    assert transition.from_state is SetupState.NOT_CONFIGURED
    assert transition.to_state is SetupState.CONFIGURED
    assert transition.changed is True
    assert app_settings.marker_path.is_file()

    details = read_marker_details(app_settings)
    assert details["reason"] == "all steps done"
    assert details["tool version"] == static_config.SCRIPT_VERSION
    assert "setup completed on" in details


def test_transition_leaves_no_temp_files(app_settings, mock_logger):
    transition_setup_state(SetupState.CONFIGURED, "done", app_settings, mock_logger)

    leftovers = list(app_settings.project_root.glob(".setup_marker_*"))
    assert leftovers == []


def test_transition_to_same_state_is_noop(app_settings, mock_logger):
    app_settings.marker_path.write_text("hand made\n")

    transition = transition_setup_state(
        SetupState.CONFIGURED, "again", app_settings, mock_logger
    )

    assert transition.changed is False
    assert app_settings.marker_path.read_text() == "hand made\n"


def test_transition_to_not_configured_removes_marker(app_settings, mock_logger):
    app_settings.marker_path.touch()

    transition_setup_state(
        SetupState.NOT_CONFIGURED, "clean", app_settings, mock_logger
    )

    assert not app_settings.marker_path.exists()
    mock_logger.info.assert_called_with(
        "Setup state: configured -> not_configured (clean)", exc_info=False
    )

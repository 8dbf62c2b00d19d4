# devenv/guards.py
# -*- coding: utf-8 -*-
"""
Checks that gate commands, and the confirmed full reset.

check_prerequisites() runs before setup; check_configured() runs before
every command that needs a bootstrapped environment; clean() undoes setup
after the user types "yes".
"""

import logging
from typing import Callable, Optional

from common.command_utils import command_exists, get_symbols, log_step
from common.file_utils import remove_paths
from devenv import config as static_config
from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings
from devenv.errors import (
    ConfirmationDeclinedError,
    NotConfiguredError,
    PrerequisiteError,
)
from devenv.state_manager import (
    SetupState,
    is_configured,
    transition_setup_state,
)

module_logger = logging.getLogger(__name__)

CONFIRMATION_LITERAL = "yes"

ConfirmFunc = Callable[[str], str]


def check_prerequisites(
    app_settings: AppSettings,
    driver: ComposeDriver,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Raise PrerequisiteError naming the first missing host tool, or when
    the compose subsystem does not answer a version query.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    log_step(
        "--- Checking system dependencies... ---",
        "info",
        logger_to_use,
        app_settings,
    )

    for tool in app_settings.required_tools:
        if not command_exists(tool):
            raise PrerequisiteError(tool)

    compose_cmd = " ".join(app_settings.compose.command)
    try:
        result = driver.version()
    except FileNotFoundError as e:
        raise PrerequisiteError(
            compose_cmd,
            f"'{compose_cmd}' could not be started: {e}.",
        ) from e
    if result.returncode != 0:
        raise PrerequisiteError(
            compose_cmd,
            f"'{compose_cmd}' is not working. Ensure Docker and Docker Compose V2 are installed and running.",
        )

    log_step(
        f"{symbols.get('success', '✅')} All system dependencies are in place.",
        "success",
        logger_to_use,
        app_settings,
    )


def check_configured(app_settings: AppSettings) -> None:
    if not is_configured(app_settings):
        raise NotConfiguredError()


def prompt_confirmation(prompt: str) -> str:
    """input() that treats a closed stdin as an empty answer."""
    try:
        return input(prompt)
    except EOFError:
        return ""


def clean(
    app_settings: AppSettings,
    driver: ComposeDriver,
    confirm: ConfirmFunc = prompt_confirmation,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Tear down containers and volumes, delete installed dependencies and
    the setup marker. Nothing happens unless `confirm` returns exactly
    "yes".
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    log_step(
        f"🚨 WARNING! This command will completely remove all project data (Docker volumes), "
        f"dependencies, and reset the installation state.",
        "warning",
        logger_to_use,
        app_settings,
    )
    answer = confirm(f"To confirm, type '{CONFIRMATION_LITERAL}': ")
    if answer != CONFIRMATION_LITERAL:
        raise ConfirmationDeclinedError()

    log_step(
        "--- Stopping containers and removing volumes... ---",
        "info",
        logger_to_use,
        app_settings,
    )
    driver.down(volumes=True)

    log_step(
        "--- Removing local dependencies... ---",
        "info",
        logger_to_use,
        app_settings,
    )
    remove_paths(
        [app_settings.path(d) for d in static_config.DEPENDENCY_DIRS],
        app_settings,
        logger_to_use,
    )

    log_step(
        "--- Removing setup marker... ---", "info", logger_to_use, app_settings
    )
    transition_setup_state(
        SetupState.NOT_CONFIGURED,
        "clean requested by user",
        app_settings,
        logger_to_use,
    )
    log_step(
        f"{symbols.get('success', '✅')} Cleanup complete. Run 'flowdesk setup' for a fresh installation.",
        "success",
        logger_to_use,
        app_settings,
    )

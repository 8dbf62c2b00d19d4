# devenv/bootstrap_steps.py
# -*- coding: utf-8 -*-
"""
The concrete steps of the one-time environment bootstrap, in order.

Each action is safe to re-run: file and directory steps only create what is
missing, and the key step is skipped when the .env file already holds a key.
"""

import logging
import time
from typing import Callable, List, Optional

from common.command_utils import get_symbols, log_step
from common.file_utils import (
    ensure_directories,
    ensure_file_from_template,
    file_contains_pattern,
)
from devenv import config as static_config
from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings
from devenv.readiness import wait_for_database
from devenv.state_manager import SetupState, transition_setup_state
from devenv.step_executor import BootstrapStep

ENV_FILE_TAG = "ENV_FILE"
DIRECTORIES_TAG = "DIRECTORIES"
BUILD_IMAGES_TAG = "BUILD_IMAGES"
BACKEND_DEPS_TAG = "BACKEND_DEPS"
FRONTEND_DEPS_TAG = "FRONTEND_DEPS"
START_CONTAINERS_TAG = "START_CONTAINERS"
WAIT_DATABASE_TAG = "WAIT_DATABASE"
FIX_PERMISSIONS_TAG = "FIX_PERMISSIONS"
APP_KEY_TAG = "APP_KEY"
MIGRATIONS_TAG = "MIGRATIONS"
SETUP_MARKER_TAG = "SETUP_MARKER"


def ensure_env_file(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    ensure_file_from_template(
        app_settings.path(static_config.ENV_FILE),
        app_settings.path(static_config.ENV_TEMPLATE_FILE),
        app_settings,
        current_logger,
    )


def ensure_laravel_directories(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    symbols = get_symbols(app_settings)
    ensure_directories(
        [app_settings.path(d) for d in static_config.LARAVEL_WRITABLE_DIRS],
        app_settings,
        current_logger,
    )
    log_step(
        f"{symbols.get('success', '✅')} Directory structure for 'storage' and 'bootstrap/cache' created.",
        "success",
        current_logger,
        app_settings,
    )


def has_app_key(app_settings: AppSettings) -> bool:
    return file_contains_pattern(
        app_settings.path(static_config.ENV_FILE),
        static_config.APP_KEY_PATTERN,
    )


def install_backend_dependencies(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    log_step(
        "Installing PHP dependencies (Composer)...",
        "info",
        current_logger,
        driver.app_settings,
    )
    driver.run(
        driver.app_settings.compose.tools_service,
        [
            "composer",
            "install",
            "-d",
            f"./{static_config.BACKEND_DIR}",
            "--no-interaction",
            "--prefer-dist",
        ],
    )


def install_frontend_dependencies(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    log_step(
        "Installing Node.js dependencies (NPM Workspaces)...",
        "info",
        current_logger,
        driver.app_settings,
    )
    driver.run(
        driver.app_settings.compose.tools_service,
        ["npm", "install", "--ignore-scripts", "--no-funding"],
    )


def build_setup_steps(
    driver: ComposeDriver,
    sleep: Callable[[float], None] = time.sleep,
) -> List[BootstrapStep]:
    """
    The ordered bootstrap sequence. The marker step is always last so the
    marker exists only after every earlier step succeeded.
    """
    compose = driver.app_settings.compose

    def _fix_permissions(app_settings, current_logger):
        driver.exec(
            compose.app_service,
            ["chown", "-R", compose.app_owner, *static_config.CONTAINER_WRITABLE_PATHS],
            user="root",
            tty=False,
        )
        log_step(
            f"{get_symbols(app_settings).get('success', '✅')} Owner of 'storage' and 'bootstrap/cache' changed to '{compose.app_owner}'.",
            "success",
            current_logger,
            app_settings,
        )

    def _generate_key(app_settings, current_logger):
        log_step(
            f"{get_symbols(app_settings).get('key', '🔑')} Generating a new application key...",
            "info",
            current_logger,
            app_settings,
        )
        driver.exec(
            compose.app_service, ["php", "artisan", "key:generate"], tty=False
        )

    def _wait_for_database(app_settings, current_logger):
        wait_for_database(driver, app_settings, current_logger, sleep=sleep)
        log_step(
            f"{get_symbols(app_settings).get('success', '✅')} Database is ready to accept connections.",
            "success",
            current_logger,
            app_settings,
        )

    return [
        BootstrapStep(
            ENV_FILE_TAG,
            "Creating .env file for the backend",
            ensure_env_file,
        ),
        BootstrapStep(
            DIRECTORIES_TAG,
            "Creating Laravel storage and cache directories",
            ensure_laravel_directories,
        ),
        BootstrapStep(
            BUILD_IMAGES_TAG,
            "Building Docker images",
            lambda s, log: driver.build(),
        ),
        BootstrapStep(
            BACKEND_DEPS_TAG,
            "Installing backend dependencies",
            lambda s, log: install_backend_dependencies(driver, log),
        ),
        BootstrapStep(
            FRONTEND_DEPS_TAG,
            "Installing frontend dependencies",
            lambda s, log: install_frontend_dependencies(driver, log),
        ),
        BootstrapStep(
            START_CONTAINERS_TAG,
            "Starting containers",
            lambda s, log: driver.up(),
        ),
        BootstrapStep(
            WAIT_DATABASE_TAG,
            "Waiting for the database to be ready",
            _wait_for_database,
        ),
        BootstrapStep(
            FIX_PERMISSIONS_TAG,
            "Adjusting file permissions inside the container",
            _fix_permissions,
        ),
        BootstrapStep(
            APP_KEY_TAG,
            "Generating Laravel application key",
            _generate_key,
            is_satisfied=has_app_key,
        ),
        BootstrapStep(
            MIGRATIONS_TAG,
            "Running database migrations",
            lambda s, log: driver.exec(
                compose.app_service,
                ["php", "artisan", "migrate", "--force"],
                tty=False,
            ),
        ),
        BootstrapStep(
            SETUP_MARKER_TAG,
            "Creating successful setup marker",
            lambda s, log: transition_setup_state(
                SetupState.CONFIGURED, "all bootstrap steps succeeded", s, log
            ),
        ),
    ]

# devenv/local_ci.py
# -*- coding: utf-8 -*-
"""
Local simulation of the CI pipeline plus a check that the pre-commit hook
(lint-staged) fixes a badly formatted file.

Only git runs on the host so the hook sees the real repository; every
linter runs in the tools container.
"""

import logging
from typing import List, Optional

from common.command_utils import get_symbols, log_step, run_command
from common.file_utils import remove_paths
from devenv import config as static_config
from devenv.bootstrap_steps import install_backend_dependencies
from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings
from devenv.errors import HookVerificationError
from devenv.step_executor import BootstrapStep, StepRunReport, run_steps

module_logger = logging.getLogger(__name__)

CLEANUP_TAG = "CLEANUP"
DEPENDENCIES_TAG = "DEPENDENCIES"
CI_CHECKS_TAG = "CI_CHECKS"
HOOK_TEST_TAG = "HOOK_TEST"

PHP_QUALITY_SCRIPT = (
    "./backend/vendor/bin/pint --test && "
    "./backend/vendor/bin/phpstan analyse -c ./backend/phpstan.neon --memory-limit=2G"
)


def _success(message: str, app_settings: AppSettings, current_logger) -> None:
    log_step(
        f"{get_symbols(app_settings).get('success', '✅')} {message}",
        "success",
        current_logger,
        app_settings,
    )


def _git(
    args: List[str],
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
    check: bool = True,
):
    return run_command(
        ["git", *args],
        app_settings,
        check=check,
        current_logger=current_logger,
        cwd=str(app_settings.project_root),
    )


def cleanup_environment(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    app_settings = driver.app_settings
    log_step(
        "Stopping and removing Docker containers...",
        "info",
        current_logger,
        app_settings,
    )
    if driver.down(check=False).returncode != 0:
        log_step(
            "Docker environment was already stopped.",
            "info",
            current_logger,
            app_settings,
        )
    _success("Docker environment cleaned up.", app_settings, current_logger)

    log_step(
        "Removing local dependencies (node_modules, vendor)...",
        "info",
        current_logger,
        app_settings,
    )
    remove_paths(
        [app_settings.path(d) for d in static_config.DEPENDENCY_DIRS],
        app_settings,
        current_logger,
    )
    _success("Local dependencies removed.", app_settings, current_logger)


def install_dependencies(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    app_settings = driver.app_settings
    tools = app_settings.compose.tools_service

    log_step(
        "Rebuilding Docker images, including 'tools'...",
        "info",
        current_logger,
        app_settings,
    )
    driver.build()
    _success("Docker images built successfully.", app_settings, current_logger)

    log_step(
        "Installing Node.js dependencies (inside Docker)...",
        "info",
        current_logger,
        app_settings,
    )
    driver.run(tools, ["npm", "install"])
    _success(
        "Node.js dependencies installed successfully.",
        app_settings,
        current_logger,
    )

    install_backend_dependencies(driver, current_logger)
    _success(
        "PHP dependencies installed successfully.", app_settings, current_logger
    )


def run_ci_checks(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    """Pint + PHPStan, Prettier, then ESLint. The first failure raises."""
    app_settings = driver.app_settings
    tools = app_settings.compose.tools_service
    checks = [
        (
            "Checking PHP code quality (Pint & PHPStan)...",
            ["sh", "-c", PHP_QUALITY_SCRIPT],
            "PHP code meets quality standards.",
        ),
        (
            "Checking formatting (Prettier)...",
            ["npx", "prettier", "--check", "."],
            "Code formatting meets Prettier standards.",
        ),
        (
            "Checking Frontend code quality (ESLint)...",
            ["npm", "run", "lint", "-w", static_config.FRONTEND_DIR],
            "Frontend code meets ESLint standards.",
        ),
    ]
    for start_message, command, done_message in checks:
        log_step(start_message, "info", current_logger, app_settings)
        driver.run(tools, command, user="root")
        _success(done_message, app_settings, current_logger)


def verify_pre_commit_hook(
    driver: ComposeDriver, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Append a blank line to the target file, stage it and run lint-staged.
    The hook works if lint-staged exits 0 and the file ends up unchanged.
    The file is restored from HEAD on every exit path.

    Raises:
        HookVerificationError: Target file missing, file left modified, or
            lint-staged failed.
    """
    app_settings = driver.app_settings
    relative_target = static_config.HOOK_TEST_TARGET_FILE
    target = app_settings.path(relative_target)
    if not target.is_file():
        raise HookVerificationError(f"Test file '{relative_target}' not found.")

    restore_args = ["restore", "--staged", "--worktree", "--", relative_target]
    _git(restore_args, app_settings, current_logger)
    try:
        log_step(
            f"Introducing incorrect formatting into '{relative_target}'...",
            "info",
            current_logger,
            app_settings,
        )
        with open(target, "a", encoding="utf-8") as f:
            f.write("\n")
        _git(["add", "--", relative_target], app_settings, current_logger)

        log_step(
            "Running lint-staged directly to simulate the hook...",
            "info",
            current_logger,
            app_settings,
        )
        lint_result = driver.run(
            app_settings.compose.tools_service,
            ["sh", "-c", "npx lint-staged"],
            check=False,
        )

        diff_result = _git(
            ["diff", "--quiet", "--", relative_target],
            app_settings,
            current_logger,
            check=False,
        )
        if diff_result.returncode != 0:
            raise HookVerificationError(
                "File remained modified after running lint-staged. The hook is NOT working."
            )
        if lint_result.returncode != 0:
            raise HookVerificationError(
                "lint-staged exited with an error. Check the configuration."
            )
        _success(
            "lint-staged ran, and the file was fixed (no changes). The hook is working!",
            app_settings,
            current_logger,
        )
    finally:
        _git(restore_args, app_settings, current_logger, check=False)


def build_local_ci_steps(driver: ComposeDriver) -> List[BootstrapStep]:
    return [
        BootstrapStep(
            CLEANUP_TAG,
            "Step 1: Full Environment Cleanup",
            lambda s, log: cleanup_environment(driver, log),
        ),
        BootstrapStep(
            DEPENDENCIES_TAG,
            "Step 2: Installing Dependencies",
            lambda s, log: install_dependencies(driver, log),
        ),
        BootstrapStep(
            CI_CHECKS_TAG,
            "Step 3: Simulating CI Pipeline Execution (all commands in Docker)",
            lambda s, log: run_ci_checks(driver, log),
        ),
        BootstrapStep(
            HOOK_TEST_TAG,
            "Step 4: Testing pre-commit hook (on the host)",
            lambda s, log: verify_pre_commit_hook(driver, log),
        ),
    ]


def run_local_ci(
    app_settings: AppSettings,
    driver: Optional[ComposeDriver] = None,
    current_logger: Optional[logging.Logger] = None,
) -> StepRunReport:
    """
    Run the whole local test sequence, stopping at the first failure
    (StepExecutionError).
    """
    logger_to_use = current_logger if current_logger else module_logger
    driver = driver or ComposeDriver(app_settings, logger_to_use)

    report = run_steps(build_local_ci_steps(driver), app_settings, logger_to_use)

    log_step("--- Final Report ---", "info", logger_to_use, app_settings)
    _success("All local tests passed successfully!", app_settings, logger_to_use)
    log_step(
        "The environment is fully configured and ready for work.",
        "info",
        logger_to_use,
        app_settings,
    )
    return report

# devenv/orchestrator.py
# -*- coding: utf-8 -*-
"""
Bootstrap orchestrator: brings a fresh checkout to a running environment.
"""

import enum
import logging
from typing import Callable, List, Optional

from filelock import FileLock, Timeout

from common.command_utils import get_symbols, log_step
from devenv.bootstrap_steps import build_setup_steps
from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings
from devenv.errors import SetupLockedError
from devenv.guards import check_prerequisites
from devenv.state_manager import is_configured
from devenv.step_executor import BootstrapStep, StepRunReport, run_steps

module_logger = logging.getLogger(__name__)


class SetupResult(enum.Enum):
    ALREADY_CONFIGURED = "already_configured"
    COMPLETED = "completed"


class BootstrapOrchestrator:
    """
    Runs the ordered bootstrap steps once, guarded by the setup marker.

    `steps` and `prerequisite_check` can be replaced, which is how tests
    run the sequence without Docker.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        driver: Optional[ComposeDriver] = None,
        steps: Optional[List[BootstrapStep]] = None,
        prerequisite_check: Optional[Callable[[], None]] = None,
        orchestrator_logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = orchestrator_logger or module_logger
        self.driver = driver or ComposeDriver(app_settings, self.logger)
        self.steps = steps if steps is not None else build_setup_steps(self.driver)
        self.prerequisite_check = prerequisite_check or (
            lambda: check_prerequisites(app_settings, self.driver, self.logger)
        )
        self.last_report: Optional[StepRunReport] = None

    def _log_urls(self) -> None:
        log_step(
            f"Backend API is available at: {self.app_settings.backend_url}",
            "info",
            self.logger,
            self.app_settings,
        )
        log_step(
            f"Frontend App is available at: {self.app_settings.frontend_url}",
            "info",
            self.logger,
            self.app_settings,
        )

    def _already_configured(self) -> SetupResult:
        symbols = get_symbols(self.app_settings)
        log_step(
            f"{symbols.get('success', '✅')} Project is already set up and ready to go.",
            "success",
            self.logger,
            self.app_settings,
        )
        self._log_urls()
        return SetupResult.ALREADY_CONFIGURED

    def setup(self) -> SetupResult:
        """
        Returns ALREADY_CONFIGURED without side effects when the marker
        exists. Otherwise runs every step and returns COMPLETED.

        Raises:
            PrerequisiteError: A host tool is missing; nothing was changed.
            StepExecutionError: A step failed; later steps did not run and
                the marker was not written.
            SetupLockedError: Another setup run is in progress.
        """
        if is_configured(self.app_settings):
            return self._already_configured()

        symbols = get_symbols(self.app_settings)
        log_step(
            f"{symbols.get('rocket', '🚀')} Starting initial project setup...",
            "info",
            self.logger,
            self.app_settings,
        )
        self.prerequisite_check()

        lock = FileLock(
            str(self.app_settings.lock_path),
            timeout=self.app_settings.lock_timeout,
        )
        try:
            lock.acquire()
        except Timeout as e:
            raise SetupLockedError(
                f"Another setup is already running (lock: {self.app_settings.lock_path})."
            ) from e

        try:
            # Another run may have finished while we waited for the lock.
            if is_configured(self.app_settings):
                return self._already_configured()
            self.last_report = run_steps(
                self.steps, self.app_settings, self.logger
            )
        finally:
            lock.release()

        log_step(
            f"{symbols.get('party', '🎉')} Project successfully set up and started! {symbols.get('party', '🎉')}",
            "success",
            self.logger,
            self.app_settings,
        )
        self._log_urls()
        return SetupResult.COMPLETED

# devenv/step_executor.py
# -*- coding: utf-8 -*-
"""
Provides functionality to execute bootstrap steps.

A step is a named action plus an optional "already satisfied" check. The
executor logs each step, skips satisfied ones, and turns a raised exception
or a False return into a failure. run_steps() executes an ordered list and
stops at the first failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from common.command_utils import get_symbols, log_step
from devenv.config_models import AppSettings
from devenv.errors import StepExecutionError

module_logger = logging.getLogger(__name__)

StepAction = Callable[[AppSettings, Optional[logging.Logger]], Any]
StepCheck = Callable[[AppSettings], bool]


@dataclass(frozen=True)
class BootstrapStep:
    """
    tag: unique identifier, e.g. "ENV_FILE".
    description: human-readable name used in logs.
    action: called as action(app_settings, logger). Returning False marks
        the step failed; any other return value is success.
    is_satisfied: optional predicate; when it returns True the action is
        not called.
    """

    tag: str
    description: str
    action: StepAction
    is_satisfied: Optional[StepCheck] = None


@dataclass
class StepRunReport:
    executed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failed is None


def _execute_step(
    step: BootstrapStep,
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
    position: Optional[str] = None,
) -> Tuple[bool, Optional[Exception]]:
    """
    Run one step and log the outcome. Returns (succeeded, raised_exception).
    """
    logger_to_use = (
        current_logger_instance if current_logger_instance else module_logger
    )
    symbols = get_symbols(app_settings)
    counter = f"{position} " if position else ""

    log_step(
        f"--- {counter}{step.description}... ---",
        "info",
        logger_to_use,
        app_settings,
    )

    try:
        step_result = step.action(app_settings, logger_to_use)
    except Exception as e:
        log_step(
            f"{symbols.get('error', '❌')} FAILED: {step.description} ({step.tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        log_step(
            f"   Error details: {e}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )
        return False, e

    if step_result is False:
        log_step(
            f"{symbols.get('error', '❌')} Step function returned False: {step.description} ({step.tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        return False, None

    log_step(
        f"Completed step {step.tag}.", "debug", logger_to_use, app_settings
    )
    return True, None


def execute_step(
    step: BootstrapStep,
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
    position: Optional[str] = None,
) -> bool:
    """
    Execute a single bootstrap step.

    Args:
        step: The step descriptor.
        app_settings: The application settings object.
        current_logger_instance: The logger instance to use.
        position: Optional "[3/11]" style counter for the header line.

    Returns:
        True if the step ran successfully. False if the action raised or
        returned False. Exceptions are logged, not propagated.
    """
    succeeded, _ = _execute_step(
        step, app_settings, current_logger_instance, position
    )
    return succeeded


def run_steps(
    steps: Sequence[BootstrapStep],
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> StepRunReport:
    """
    Execute `steps` in order, halting at the first failure.

    Satisfied steps are skipped. Raises StepExecutionError for the failed
    step, carrying the exception the step raised (if any) as
    `.original_error` and the report of what ran so far as `.report`.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    report = StepRunReport()
    total = len(steps)

    for index, step in enumerate(steps, start=1):
        position = f"[{index}/{total}]"
        if step.is_satisfied is not None and step.is_satisfied(app_settings):
            log_step(
                f"{symbols.get('info', 'ℹ️')} {position} {step.description}: already satisfied, skipping.",
                "info",
                logger_to_use,
                app_settings,
            )
            report.skipped.append(step.tag)
            continue

        succeeded, error = _execute_step(
            step, app_settings, logger_to_use, position
        )
        if not succeeded:
            report.failed = step.tag
            raise StepExecutionError(
                step.tag, step.description, original_error=error, report=report
            )

        report.executed.append(step.tag)

    return report

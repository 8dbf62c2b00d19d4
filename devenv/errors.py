# devenv/errors.py
# -*- coding: utf-8 -*-
"""
Exceptions raised by the developer environment tool.

Every error that should stop a command derives from DevEnvError; the CLI
turns these into a marked error message and exit status 1.
"""

from typing import Any, Optional


class DevEnvError(Exception):
    """Base class for all expected failures."""

    exit_code = 1


class PrerequisiteError(DevEnvError):
    """A required host tool or runtime capability is missing."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(
            message or f"Utility '{tool}' not found. Please install it."
        )


class NotConfiguredError(DevEnvError):
    """The environment has not been bootstrapped yet."""

    def __init__(self, message: str = "Project has not been set up yet."):
        super().__init__(message)


class StepExecutionError(DevEnvError):
    """A bootstrap step failed; later steps were not attempted."""

    def __init__(
        self,
        step_tag: str,
        description: str,
        original_error: Optional[BaseException] = None,
        report: Optional[Any] = None,
    ):
        self.step_tag = step_tag
        self.description = description
        self.original_error = original_error
        self.report = report
        message = f"Step '{description}' ({step_tag}) failed"
        if original_error is not None:
            message += f": {original_error}"
        super().__init__(message)


class ConfirmationDeclinedError(DevEnvError):
    """The user did not type the required confirmation literal."""

    def __init__(self, message: str = "Canceled."):
        super().__init__(message)


class ReadinessTimeoutError(DevEnvError):
    """The readiness probe did not succeed within the configured attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Service did not become ready after {attempts} attempt(s)."
        )


class SetupLockedError(DevEnvError):
    """Another setup run holds the setup lock."""


class HookVerificationError(DevEnvError):
    """lint-staged did not leave the hook test file clean."""

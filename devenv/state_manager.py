# devenv/state_manager.py
# -*- coding: utf-8 -*-
"""
Manages the setup marker that records whether the environment is configured.

The marker's presence is the whole persisted state. Its body is a short
header (timestamp, tool version, reason) kept only for people reading it.
"""

import datetime
import enum
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from typing import Dict, Optional

from common.command_utils import get_symbols, log_step
from devenv import config as static_config
from devenv.config_models import AppSettings

module_logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^# ([A-Za-z ]+):\s*(.*)$")


class SetupState(enum.Enum):
    NOT_CONFIGURED = "not_configured"
    CONFIGURED = "configured"


@dataclass(frozen=True)
class StateTransition:
    from_state: SetupState
    to_state: SetupState
    reason: str
    timestamp: datetime.datetime = field(
        default_factory=datetime.datetime.now
    )

    @property
    def changed(self) -> bool:
        return self.from_state is not self.to_state


def read_setup_state(app_settings: AppSettings) -> SetupState:
    if app_settings.marker_path.is_file():
        return SetupState.CONFIGURED
    return SetupState.NOT_CONFIGURED


def is_configured(app_settings: AppSettings) -> bool:
    return read_setup_state(app_settings) is SetupState.CONFIGURED


def read_marker_details(app_settings: AppSettings) -> Dict[str, str]:
    """
    Parse the "# Key: value" header lines of the marker. Empty when the
    marker is absent or was created by hand (e.g. `touch`).
    """
    marker = app_settings.marker_path
    if not marker.is_file():
        return {}
    details: Dict[str, str] = {}
    for line in marker.read_text(encoding="utf-8", errors="replace").splitlines():
        match = _HEADER_RE.match(line)
        if match:
            details[match.group(1).strip().lower()] = match.group(2).strip()
    return details


def _write_marker(app_settings: AppSettings, reason: str) -> None:
    marker = app_settings.marker_path
    marker.parent.mkdir(parents=True, exist_ok=True)
    content = (
        f"# Setup completed on: {datetime.datetime.now().isoformat()}\n"
        f"# Tool version: {static_config.SCRIPT_VERSION}\n"
        f"# Reason: {reason}\n"
    )
    fd, temp_path = tempfile.mkstemp(
        prefix=".setup_marker_", dir=str(marker.parent), text=True
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as temp_f:
            temp_f.write(content)
        os.replace(temp_path, marker)
    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)


def transition_setup_state(
    target: SetupState,
    reason: str,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> StateTransition:
    """
    Move the persisted state to `target`.

    CONFIGURED writes the marker (atomically, via a temp file in the same
    directory); NOT_CONFIGURED deletes it. Transitions to the current state
    are allowed and leave the marker untouched.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    current = read_setup_state(app_settings)
    transition = StateTransition(current, target, reason)

    if not transition.changed:
        log_step(
            f"{symbols.get('info', 'ℹ️')} Setup state already '{target.value}' ({reason}).",
            "debug",
            logger_to_use,
            app_settings,
        )
        return transition

    if target is SetupState.CONFIGURED:
        _write_marker(app_settings, reason)
    else:
        app_settings.marker_path.unlink(missing_ok=True)

    log_step(
        f"Setup state: {current.value} -> {target.value} ({reason})",
        "info",
        logger_to_use,
        app_settings,
    )
    return transition

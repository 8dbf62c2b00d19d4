# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system helpers with "create if missing" semantics, plus removal of
paths that may be owned by root.
"""

import logging
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from devenv.config_models import AppSettings

from .command_utils import get_symbols, log_step, run_elevated_command

module_logger = logging.getLogger(__name__)


def ensure_file_from_template(
    target: Path,
    template: Path,
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Copy `template` to `target` unless `target` already exists.

    Returns:
        bool: True if the file was created, False if it already existed.

    Raises:
        FileNotFoundError: Neither the target nor the template exists.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    if target.exists():
        log_step(
            f"{symbols.get('info', 'ℹ️')} File '{target}' already exists, skipping.",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    if not template.is_file():
        raise FileNotFoundError(
            f"Cannot create '{target}': template '{template}' not found."
        )

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(template, target)
    log_step(
        f"{symbols.get('success', '✅')} File '{target}' created from '{template.name}'.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def ensure_directories(
    directories: Iterable[Path],
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> List[Path]:
    """
    mkdir -p every directory. Returns the ones that did not exist before.
    """
    logger_to_use = current_logger if current_logger else module_logger
    created: List[Path] = []
    for directory in directories:
        if not directory.is_dir():
            created.append(directory)
        directory.mkdir(parents=True, exist_ok=True)
        log_step(
            f"Ensured directory {directory}", "debug", logger_to_use, app_settings
        )
    return created


def file_contains_pattern(path: Path, pattern: str) -> bool:
    """True if any line of `path` matches the regex `pattern`."""
    if not path.is_file():
        return False
    content = path.read_text(encoding="utf-8", errors="replace")
    return re.search(pattern, content, re.MULTILINE) is not None


def remove_paths(
    paths: Iterable[Path],
    app_settings: Optional[AppSettings],
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    `rm -rf` the given paths with elevated privileges. Dependency
    directories are written by containers and may belong to root.
    """
    logger_to_use = current_logger if current_logger else module_logger
    existing = [str(p) for p in paths if p.exists() or p.is_symlink()]
    if not existing:
        log_step(
            "No dependency directories to remove.",
            "info",
            logger_to_use,
            app_settings,
        )
        return
    run_elevated_command(
        ["rm", "-rf", *existing],
        app_settings,
        current_logger=logger_to_use,
    )

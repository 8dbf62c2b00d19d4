# devenv/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the developer environment tool.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file and command-line options, applying this order of
precedence:
1. Pydantic Model Defaults
2. Environment Variables (FLOWDESK_*, DB_*)
3. YAML Configuration File (flowdesk.yaml at the project root, or --config)
4. Command-Line Options
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from devenv import config as static_config

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively update `source` with `overrides`. Nested dictionaries are
    merged key by key; None values never replace an existing value.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def read_yaml_config(
    yaml_config_path: Path, current_logger: Optional[logging.Logger] = None
) -> Dict[str, Any]:
    """
    Read a YAML mapping. A missing, unreadable or non-mapping file yields
    an empty dict and a log message.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.debug(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI options."
        )
        return {}

    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data and isinstance(yaml_data, dict):
        logger_to_use.debug(f"Loaded configuration from {yaml_config_path}")
        return yaml_data
    if yaml_data is not None:
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
    return {}


def load_app_settings(
    cli_overrides: Optional[Dict[str, Any]] = None,
    config_file_path: Optional[Union[str, Path]] = None,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Build the effective AppSettings.

    Args:
        cli_overrides: Values from command-line options, keyed by AppSettings
            field name. None values are ignored.
        config_file_path: Explicit YAML file. When omitted, flowdesk.yaml in
            the resolved project root is used if it exists.
        current_logger: Optional logger to use instead of the module logger.

    Raises:
        SystemExit: The merged values do not validate.
    """
    logger_to_use = current_logger if current_logger else module_logger
    cli_overrides = cli_overrides or {}

    # BaseSettings reads the environment here: defaults < env.
    current_values_dict = AppSettings().model_dump(exclude_defaults=False)

    project_root = Path(
        cli_overrides.get("project_root") or current_values_dict["project_root"]
    )
    if config_file_path:
        yaml_config_path = Path(config_file_path)
        if not yaml_config_path.is_file():
            logger_to_use.warning(
                f"Configuration file '{yaml_config_path}' does not exist."
            )
    else:
        yaml_config_path = project_root / static_config.DEFAULT_CONFIG_FILE

    current_values_dict = _deep_update(
        current_values_dict, read_yaml_config(yaml_config_path, logger_to_use)
    )
    current_values_dict = _deep_update(current_values_dict, dict(cli_overrides))

    try:
        final_settings = AppSettings(**current_values_dict)
    except Exception as e:  # Catch Pydantic validation errors etc.
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.debug("Successfully loaded and validated application settings")
    return final_settings

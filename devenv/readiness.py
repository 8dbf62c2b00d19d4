# devenv/readiness.py
# -*- coding: utf-8 -*-
"""
Readiness probing: block until a dependent service accepts connections.
"""

import logging
import time
from typing import Callable, Optional

import psycopg

from common.command_utils import get_symbols, log_step
from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings
from devenv.errors import ReadinessTimeoutError

module_logger = logging.getLogger(__name__)

ProbeFunc = Callable[[], bool]


def wait_ready(
    probe_fn: ProbeFunc,
    interval: float = 2.0,
    max_attempts: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
    waiting_message: str = "Waiting for the service to start...",
) -> int:
    """
    Call `probe_fn` until it returns True.

    An exception from the probe counts as "not ready yet". Between failed
    attempts a progress line is logged and `sleep(interval)` is called.

    Args:
        probe_fn: Zero-argument predicate.
        interval: Seconds between attempts.
        max_attempts: None retries until the process is interrupted;
            otherwise ReadinessTimeoutError is raised after that many
            failed probes.
        sleep: Injected for tests.

    Returns:
        int: Number of probe invocations, including the successful one.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    attempts = 0

    while True:
        attempts += 1
        try:
            ready = bool(probe_fn())
        except Exception as e:
            log_step(
                f"Readiness probe attempt {attempts} raised: {e}",
                "debug",
                logger_to_use,
                app_settings,
            )
            ready = False

        if ready:
            return attempts

        if max_attempts is not None and attempts >= max_attempts:
            raise ReadinessTimeoutError(attempts)

        log_step(
            f"{symbols.get('hourglass', '⏳')} {waiting_message}",
            "info",
            logger_to_use,
            app_settings,
        )
        sleep(interval)


def compose_pg_isready_probe(
    driver: ComposeDriver, app_settings: AppSettings
) -> ProbeFunc:
    """`pg_isready` inside the db service; ready iff it exits 0."""
    db = app_settings.db

    def probe() -> bool:
        result = driver.exec(
            app_settings.compose.db_service,
            ["pg_isready", "-U", db.username, "-d", db.database, "-q"],
            as_host_user=False,
            tty=False,
            check=False,
            capture_output=True,
        )
        return result.returncode == 0

    return probe


def psycopg_connect_probe(app_settings: AppSettings) -> ProbeFunc:
    """Open (and close) a connection from the host with psycopg."""
    db = app_settings.db
    conn_kwargs = {
        "dbname": db.database,
        "user": db.username,
        "password": db.password,
        "host": db.host,
        "port": db.port,
        "connect_timeout": app_settings.readiness.connect_timeout,
    }
    conn_kwargs = {k: v for k, v in conn_kwargs.items() if v is not None}

    def probe() -> bool:
        try:
            with psycopg.connect(**conn_kwargs):
                return True
        except psycopg.OperationalError:
            return False

    return probe


def build_database_probe(
    driver: ComposeDriver, app_settings: AppSettings
) -> ProbeFunc:
    if app_settings.readiness.mode == "direct":
        return psycopg_connect_probe(app_settings)
    return compose_pg_isready_probe(driver, app_settings)


def wait_for_database(
    driver: ComposeDriver,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Block until PostgreSQL accepts connections. Returns probe count."""
    return wait_ready(
        build_database_probe(driver, app_settings),
        interval=app_settings.readiness.interval,
        max_attempts=app_settings.readiness.max_attempts,
        sleep=sleep,
        app_settings=app_settings,
        current_logger=current_logger,
        waiting_message="Waiting for PostgreSQL to start...",
    )

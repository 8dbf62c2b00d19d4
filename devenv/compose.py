# devenv/compose.py
# -*- coding: utf-8 -*-
"""
Thin driver around the Docker Compose CLI.

Every container interaction of the tool goes through ComposeDriver so tests
can replace it with a fake and never spawn a process.
"""

import logging
import os
import subprocess
from typing import Dict, List, Optional, Sequence

from common.command_utils import run_command
from devenv.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def host_user_ids() -> Dict[str, str]:
    """UID/GID of the invoking user, exported for docker-compose.yml."""
    return {"UID": str(os.getuid()), "GID": str(os.getgid())}


class ComposeDriver:
    """Builds, starts, stops and executes commands in compose services."""

    def __init__(
        self,
        app_settings: AppSettings,
        driver_logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = driver_logger or module_logger
        self.ids = host_user_ids()

    @property
    def user_spec(self) -> str:
        return f"{self.ids['UID']}:{self.ids['GID']}"

    def _compose(
        self,
        args: Sequence[str],
        check: bool = True,
        capture_output: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        command = [*self.app_settings.compose.command, *args]
        return run_command(
            command,
            self.app_settings,
            check=check,
            capture_output=capture_output,
            current_logger=self.logger,
            cwd=str(self.app_settings.project_root),
            env=env,
        )

    def version(self) -> subprocess.CompletedProcess:
        return self._compose(["version"], check=False, capture_output=True)

    def build(self) -> subprocess.CompletedProcess:
        return self._compose(["build"], env=self.ids)

    def up(self) -> subprocess.CompletedProcess:
        return self._compose(["up", "-d"], env=self.ids)

    def down(
        self, volumes: bool = False, check: bool = True
    ) -> subprocess.CompletedProcess:
        args = ["down"]
        if volumes:
            args.append("-v")
        args.append("--remove-orphans")
        return self._compose(args, check=check)

    def exec(
        self,
        service: str,
        command: Sequence[str],
        user: Optional[str] = None,
        as_host_user: bool = True,
        tty: bool = True,
        check: bool = True,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run `command` in the running `service`.

        `user` wins when given. Otherwise the host UID:GID is used so files
        created in bind mounts stay owned by the caller, unless
        `as_host_user` is False, which keeps the image's default user.
        """
        args: List[str] = ["exec"]
        if not tty:
            args.append("-T")
        if user:
            args.append(f"--user={user}")
        elif as_host_user:
            args.append(f"--user={self.user_spec}")
        args += [service, *command]
        return self._compose(args, check=check, capture_output=capture_output)

    def run(
        self,
        service: str,
        command: Sequence[str],
        user: Optional[str] = None,
        interactive: bool = False,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run `command` in a throw-away container of `service`."""
        args: List[str] = ["run", "--rm"]
        args.append("-it" if interactive else "-T")
        args.append(f"--user={user or self.user_spec}")
        args += [service, *command]
        return self._compose(args, check=check)

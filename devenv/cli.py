# devenv/cli.py
# -*- coding: utf-8 -*-
"""
Command line interface for the FlowDesk developer environment.

`flowdesk setup` bootstraps a fresh checkout; every other command either
manages the running stack or forwards arguments into a container.
"""

import functools
import logging
import os
import subprocess
from typing import List, Optional

import click
import yaml

from common.command_utils import get_symbols
from common.core_utils import setup_logging
from devenv import config as static_config
from devenv.bootstrap_steps import (
    install_backend_dependencies,
    install_frontend_dependencies,
)
from devenv.compose import ComposeDriver
from devenv.config_loader import load_app_settings
from devenv.config_models import AppSettings
from devenv.errors import DevEnvError, NotConfiguredError
from devenv.guards import check_configured, clean
from devenv.local_ci import run_local_ci
from devenv.orchestrator import BootstrapOrchestrator
from devenv.state_manager import read_marker_details, read_setup_state

logger = logging.getLogger("flowdesk")

PASSTHROUGH_CONTEXT = {"ignore_unknown_options": True}


class CliContext:
    """Settings and compose driver shared by all commands of one invocation."""

    def __init__(self, app_settings: AppSettings):
        self.app_settings = app_settings
        self._driver: Optional[ComposeDriver] = None

    @property
    def driver(self) -> ComposeDriver:
        if self._driver is None:
            self._driver = ComposeDriver(self.app_settings, logger)
        return self._driver


pass_cli_context = click.make_pass_decorator(CliContext)


def handle_errors(func):
    """
    Turn expected failures into a marked message and an exit status.
    A failing container command exits with that command's status.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        cli_context = click.get_current_context().find_object(CliContext)
        symbols = get_symbols(cli_context.app_settings if cli_context else None)
        try:
            return func(*args, **kwargs)
        except NotConfiguredError as e:
            click.secho(f"{symbols.get('warning', '⚠️')}  {e}", fg="yellow", err=True)
            click.echo(
                f"{symbols.get('point', '👉')} Please run 'flowdesk setup' for initial setup.",
                err=True,
            )
            raise click.exceptions.Exit(e.exit_code)
        except DevEnvError as e:
            click.secho(f"{symbols.get('error', '❌')} Error: {e}", fg="red", err=True)
            raise click.exceptions.Exit(e.exit_code)
        except subprocess.CalledProcessError as e:
            raise click.exceptions.Exit(e.returncode or 1)
        except FileNotFoundError as e:
            click.secho(f"{symbols.get('error', '❌')} Error: {e}", fg="red", err=True)
            raise click.exceptions.Exit(1)

    return wrapper


def guarded(func):
    """Require a completed setup before running the command."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        cli_context = click.get_current_context().find_object(CliContext)
        check_configured(cli_context.app_settings)
        return func(*args, **kwargs)

    return wrapper


def _exit_with(result: subprocess.CompletedProcess) -> None:
    if result.returncode != 0:
        raise click.exceptions.Exit(result.returncode)


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"YAML configuration file (default: <project-root>/{static_config.DEFAULT_CONFIG_FILE}).",
)
@click.option(
    "--project-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Root of the FlowDesk checkout.",
)
@click.option(
    "--log-level",
    type=click.Choice(
        ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
    ),
    default=lambda: os.environ.get("LOGLEVEL", "INFO").upper(),
    show_default="INFO or $LOGLEVEL",
    help="Logging verbosity.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also append log output to this file.",
)
@click.version_option(static_config.SCRIPT_VERSION, prog_name="flowdesk")
@click.pass_context
def cli(ctx, config_file, project_root, log_level, log_file):
    """
    FlowDesk developer environment.

    Run 'flowdesk setup' once after cloning; it builds the images, installs
    dependencies, starts the stack and migrates the database.
    """
    overrides = {"project_root": project_root}
    app_settings = load_app_settings(overrides, config_file, logger)
    setup_logging(
        log_level=log_level,
        log_file=log_file,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )
    ctx.obj = CliContext(app_settings)


# --- Core developer commands ---


@cli.command()
@pass_cli_context
@handle_errors
def setup(obj: CliContext):
    """(Run once) Initialize the project if not already set up."""
    BootstrapOrchestrator(obj.app_settings, obj.driver, orchestrator_logger=logger).setup()


@cli.command()
@pass_cli_context
@handle_errors
@guarded
def up(obj: CliContext):
    """Start containers in the background."""
    obj.driver.up()


@cli.command()
@pass_cli_context
@handle_errors
@guarded
def down(obj: CliContext):
    """Stop and remove containers."""
    obj.driver.down()


@cli.command()
@pass_cli_context
@handle_errors
@guarded
def build(obj: CliContext):
    """Rebuild Docker images."""
    obj.driver.build()


@cli.command(name="clean")
@pass_cli_context
@handle_errors
def clean_command(obj: CliContext):
    """(DANGEROUS!) Remove ALL data and dependencies and reset the setup state."""
    clean(obj.app_settings, obj.driver, current_logger=logger)


@cli.command()
@pass_cli_context
def status(obj: CliContext):
    """Show whether the project has been set up."""
    state = read_setup_state(obj.app_settings)
    click.echo(f"Setup state: {state.value}")
    click.echo(f"Marker file: {obj.app_settings.marker_path}")
    for key, value in read_marker_details(obj.app_settings).items():
        click.echo(f"  {key}: {value}")


@cli.command(name="view-config")
@pass_cli_context
def view_config(obj: CliContext):
    """Print the effective configuration as YAML."""
    data = obj.app_settings.model_dump(mode="json")
    if data.get("db", {}).get("password"):
        data["db"]["password"] = "********"
    click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))


@cli.command(name="composer-install")
@pass_cli_context
@handle_errors
@guarded
def composer_install(obj: CliContext):
    """Install PHP dependencies (Composer)."""
    install_backend_dependencies(obj.driver, logger)


@cli.command(name="npm-install")
@pass_cli_context
@handle_errors
@guarded
def npm_install(obj: CliContext):
    """Install Node.js dependencies (NPM workspaces)."""
    install_frontend_dependencies(obj.driver, logger)


@cli.command(name="local-test")
@pass_cli_context
@handle_errors
@guarded
def local_test(obj: CliContext):
    """Full local environment test: clean, install, CI checks, pre-commit hook."""
    run_local_ci(obj.app_settings, obj.driver, logger)


# --- Backend utilities ---


@cli.command(name="backend-shell")
@pass_cli_context
@handle_errors
@guarded
def backend_shell(obj: CliContext):
    """Open a shell in the app (backend) container."""
    _exit_with(
        obj.driver.exec(obj.app_settings.compose.app_service, ["sh"], check=False)
    )


@cli.command(name="backend-artisan", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def backend_artisan(obj: CliContext, args: List[str]):
    """Run an Artisan command, e.g. 'flowdesk backend-artisan route:list'."""
    _exit_with(
        obj.driver.exec(
            obj.app_settings.compose.app_service,
            ["php", "artisan", *args],
            check=False,
        )
    )


@cli.command(name="backend-composer", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def backend_composer(obj: CliContext, args: List[str]):
    """Run a Composer command against ./backend in the tools container."""
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service,
            ["composer", "-d", f"./{static_config.BACKEND_DIR}", *args],
            check=False,
        )
    )


@cli.command(name="backend-test")
@pass_cli_context
@handle_errors
@guarded
def backend_test(obj: CliContext):
    """Run the Laravel test suite."""
    _exit_with(
        obj.driver.exec(
            obj.app_settings.compose.app_service,
            ["php", "artisan", "test"],
            check=False,
        )
    )


# --- Frontend utilities ---


@cli.command(name="frontend-shell")
@pass_cli_context
@handle_errors
@guarded
def frontend_shell(obj: CliContext):
    """Open a shell in the node (frontend) container."""
    _exit_with(
        obj.driver.exec(obj.app_settings.compose.node_service, ["sh"], check=False)
    )


@cli.command(name="frontend-npm", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def frontend_npm(obj: CliContext, args: List[str]):
    """Run npm in the node container, e.g. 'flowdesk frontend-npm install axios'."""
    _exit_with(
        obj.driver.exec(
            obj.app_settings.compose.node_service, ["npm", *args], check=False
        )
    )


# --- Project root utilities (tools container) ---


@cli.command(name="root-shell")
@pass_cli_context
@handle_errors
@guarded
def root_shell(obj: CliContext):
    """Open an interactive shell in a tools container."""
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service,
            ["sh"],
            interactive=True,
            check=False,
        )
    )


@cli.command(name="root-npm", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def root_npm(obj: CliContext, args: List[str]):
    """Run npm in the project root."""
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service, ["npm", *args], check=False
        )
    )


@cli.command(name="root-npx", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def root_npx(obj: CliContext, args: List[str]):
    """Run npx in the project root."""
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service, ["npx", *args], check=False
        )
    )


@cli.command(name="root-exec", context_settings=PASSTHROUGH_CONTEXT)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_cli_context
@handle_errors
@guarded
def root_exec(obj: CliContext, args: List[str]):
    """Run any shell command line in a tools container."""
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service,
            ["sh", "-c", " ".join(args)],
            check=False,
        )
    )


@cli.command(name="lint-staged")
@pass_cli_context
@handle_errors
@guarded
def lint_staged(obj: CliContext):
    """Run lint-staged, as the pre-commit hook does."""
    click.echo("--- Running lint-staged... ---")
    _exit_with(
        obj.driver.run(
            obj.app_settings.compose.tools_service,
            ["sh", "-c", "npx lint-staged"],
            check=False,
        )
    )


if __name__ == "__main__":
    cli()

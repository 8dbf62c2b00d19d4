# tests/devenv/test_cli.py
# -*- coding: utf-8 -*-
"""
Tests for the flowdesk command line.
"""

import subprocess

import pytest
from click.testing import CliRunner

from devenv.cli import cli
from devenv.errors import StepExecutionError
from devenv.orchestrator import SetupResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(mocker):
    return mocker.patch("devenv.cli.setup_logging")


@pytest.fixture
def driver(mocker, fake_driver):
    mocker.patch("devenv.cli.ComposeDriver", return_value=fake_driver)
    return fake_driver


@pytest.fixture
def invoke(runner, project_root, driver):
    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--project-root", str(project_root), *args], **kwargs)

    return _invoke


@pytest.fixture
def configured(app_settings):
    app_settings.marker_path.touch()


def test_setup_runs_orchestrator(mocker, invoke):
    orchestrator_cls = mocker.patch("devenv.cli.BootstrapOrchestrator")
    orchestrator_cls.return_value.setup.return_value = SetupResult.COMPLETED

    result = invoke("setup")

    assert result.exit_code == 0
    orchestrator_cls.return_value.setup.assert_called_once_with()


def test_setup_failure_exits_1(mocker, invoke):
    orchestrator_cls = mocker.patch("devenv.cli.BootstrapOrchestrator")
    orchestrator_cls.return_value.setup.side_effect = StepExecutionError(
        "MIGRATIONS", "Running database migrations"
    )

    result = invoke("setup")

    assert result.exit_code == 1
    assert "❌ Error: Step 'Running database migrations' (MIGRATIONS) failed" in result.output


@pytest.mark.parametrize(
    "command",
    [
        ["up"],
        ["down"],
        ["build"],
        ["composer-install"],
        ["npm-install"],
        ["backend-shell"],
        ["backend-artisan", "route:list"],
        ["backend-test"],
        ["frontend-npm", "install"],
        ["root-exec", "ls"],
        ["lint-staged"],
    ],
)
def test_guarded_commands_require_setup(invoke, driver, command):
    result = invoke(*command)

    assert result.exit_code == 1
    assert "Project has not been set up yet." in result.output
    assert "Please run 'flowdesk setup' for initial setup." in result.output
    assert driver.mock_calls == []


def test_up_down_build(invoke, driver, configured):
    assert invoke("up").exit_code == 0
    assert invoke("down").exit_code == 0
    assert invoke("build").exit_code == 0

    driver.up.assert_called_once_with()
    driver.down.assert_called_once_with()
    driver.build.assert_called_once_with()


def test_up_failure_propagates_exit_code(invoke, driver, configured):
    driver.up.side_effect = subprocess.CalledProcessError(17, ["docker", "compose", "up", "-d"])

    assert invoke("up").exit_code == 17


def test_backend_artisan_passes_options_through(invoke, driver, configured):
    result = invoke("backend-artisan", "route:list", "--json")

    assert result.exit_code == 0
    driver.exec.assert_called_once_with(
        "app", ["php", "artisan", "route:list", "--json"], check=False
    )


def test_passthrough_exit_code(invoke, driver, configured):
    driver.exec.return_value = subprocess.CompletedProcess(args=[], returncode=3)

    assert invoke("backend-test").exit_code == 3


def test_backend_composer(invoke, driver, configured):
    invoke("backend-composer", "require", "laravel/sanctum")

    driver.run.assert_called_once_with(
        "tools", ["composer", "-d", "./backend", "require", "laravel/sanctum"], check=False
    )


def test_frontend_commands(invoke, driver, configured):
    invoke("frontend-shell")
    invoke("frontend-npm", "install", "axios")

    assert [c.args for c in driver.exec.call_args_list] == [
        ("node", ["sh"]),
        ("node", ["npm", "install", "axios"]),
    ]


def test_root_commands(invoke, driver, configured):
    invoke("root-shell")
    invoke("root-npm", "install", "husky")
    invoke("root-npx", "husky", "init")
    invoke("root-exec", "npx", "lint-staged")

    calls = driver.run.call_args_list
    assert calls[0].args == ("tools", ["sh"])
    assert calls[0].kwargs["interactive"] is True
    assert calls[1].args == ("tools", ["npm", "install", "husky"])
    assert calls[2].args == ("tools", ["npx", "husky", "init"])
    assert calls[3].args == ("tools", ["sh", "-c", "npx lint-staged"])


def test_clean_declined(mocker, invoke, driver, app_settings, configured):
    remove_paths = mocker.patch("devenv.guards.remove_paths")

    result = invoke("clean", input="no\n")

    assert result.exit_code == 1
    assert "Canceled." in result.output
    driver.down.assert_not_called()
    remove_paths.assert_not_called()
    assert app_settings.marker_path.exists()


def test_clean_confirmed(mocker, invoke, driver, app_settings, configured):
    mocker.patch("devenv.guards.remove_paths")

    result = invoke("clean", input="yes\n")

    assert result.exit_code == 0
    driver.down.assert_called_once_with(volumes=True)
    assert not app_settings.marker_path.exists()


def test_status(invoke, app_settings):
    result = invoke("status")
    assert "Setup state: not_configured" in result.output

    app_settings.marker_path.touch()
    result = invoke("status")
    assert "Setup state: configured" in result.output
    assert str(app_settings.marker_path) in result.output


def test_view_config_masks_password(monkeypatch, invoke):
    monkeypatch.setenv("DB_PASSWORD", "s3cret")

    result = invoke("view-config")

    assert result.exit_code == 0
    assert "s3cret" not in result.output
    assert "username: zhost_user" in result.output


def test_local_test_requires_setup(mocker, invoke, driver):
    run_local_ci = mocker.patch("devenv.cli.run_local_ci")

    result = invoke("local-test")

    assert result.exit_code == 1
    assert "Please run 'flowdesk setup' for initial setup." in result.output
    run_local_ci.assert_not_called()
    assert driver.mock_calls == []


def test_local_test_runs_when_configured(mocker, invoke, driver, configured):
    run_local_ci = mocker.patch("devenv.cli.run_local_ci")

    result = invoke("local-test")

    assert result.exit_code == 0
    run_local_ci.assert_called_once()


def test_log_options_reach_logging_setup(invoke, no_logging_setup, tmp_path):
    log_file = tmp_path / "flowdesk.log"

    invoke("--log-level", "debug", "--log-file", str(log_file), "status")

    kwargs = no_logging_setup.call_args.kwargs
    assert kwargs["log_level"] == "DEBUG"
    assert kwargs["log_file"] == str(log_file)


def test_project_root_defaults_to_working_directory(monkeypatch, runner, driver, project_root):
    monkeypatch.chdir(project_root)

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0
    assert str(project_root / ".setup-complete") in result.output

# tests/conftest.py
import logging
import os
import subprocess
from unittest.mock import MagicMock

import pytest

from devenv.compose import ComposeDriver
from devenv.config_models import AppSettings


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep host DB_*, FLOWDESK_* and LOGLEVEL variables out of the settings."""
    for name in list(os.environ):
        if name.startswith(("DB_", "FLOWDESK_")) or name == "LOGLEVEL":
            monkeypatch.delenv(name)


@pytest.fixture
def project_root(tmp_path):
    """A minimal FlowDesk checkout: backend/.env.example and the hook target."""
    backend = tmp_path / "backend"
    backend.mkdir()
    (backend / ".env.example").write_text("APP_NAME=FlowDesk\nAPP_KEY=\n")
    page = tmp_path / "frontend" / "src" / "app" / "page.tsx"
    page.parent.mkdir(parents=True)
    page.write_text("export default function Page() {}\n")
    return tmp_path


@pytest.fixture
def app_settings(project_root):
    return AppSettings(project_root=project_root, readiness={"interval": 0})


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def fake_driver(app_settings):
    """ComposeDriver double whose commands all succeed."""
    driver = MagicMock(spec=ComposeDriver)
    driver.app_settings = app_settings
    driver.user_spec = "1000:1000"
    ok = subprocess.CompletedProcess(args=[], returncode=0)
    for name in ("version", "build", "up", "down", "exec", "run"):
        getattr(driver, name).return_value = ok
    return driver

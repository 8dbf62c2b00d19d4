import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from common.core_utils import SymbolFormatter, resolve_log_level, setup_logging


@pytest.fixture
def mock_root_logger(mocker):
    """Fixture to mock the root logger."""
    mock_logger = MagicMock()
    mocker.patch("logging.getLogger", return_value=mock_logger)
    mock_logger.handlers = []
    return mock_logger


def _record(level, msg):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_with_file_and_console(mocker, mock_root_logger, tmp_path):
    """Test setup_logging when both log_file and log_to_console are provided."""
    mock_file_handler = mocker.patch("logging.FileHandler")
    mock_stream_handler = mocker.patch("logging.StreamHandler")
    mock_formatter = mocker.patch("common.core_utils.SymbolFormatter")

    log_file_path = tmp_path / "logs" / "flowdesk.log"

    setup_logging(log_file=str(log_file_path), log_to_console=True)

    mock_file_handler.assert_called_once_with(Path(log_file_path), mode="a")
    mock_stream_handler.assert_called_once_with(sys.stdout)
    assert mock_formatter.call_count == 1
    mock_root_logger.addHandler.assert_any_call(mock_file_handler.return_value)
    mock_root_logger.addHandler.assert_any_call(mock_stream_handler.return_value)
    assert log_file_path.parent.is_dir()


def test_setup_logging_without_handlers_falls_back_to_stdout(mocker, mock_root_logger):
    mock_stream_handler = mocker.patch("logging.StreamHandler")
    mocker.patch("common.core_utils.SymbolFormatter")

    setup_logging(log_to_console=False, log_file=None)

    mock_stream_handler.assert_called_once_with(sys.stdout)
    mock_root_logger.addHandler.assert_any_call(mock_stream_handler.return_value)


def test_setup_logging_with_prefix_placeholder(mocker, mock_root_logger):
    mock_formatter = mocker.patch("common.core_utils.SymbolFormatter")

    custom_format = "{log_prefix}%(levelname)s - %(message)s"

    setup_logging(log_format_str=custom_format, log_prefix="[FLOWDESK]")

    mock_formatter.assert_called_once_with(
        fmt="[FLOWDESK] %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        symbols=None,
    )


def test_setup_logging_accepts_level_names(mock_root_logger):
    setup_logging(log_level="debug")

    mock_root_logger.setLevel.assert_called_once_with(logging.DEBUG)


def test_setup_logging_replaces_existing_handlers(mocker, mock_root_logger):
    stale = MagicMock()
    mock_root_logger.handlers = [stale]

    setup_logging()

    mock_root_logger.removeHandler.assert_called_once_with(stale)


def test_setup_logging_warning_on_file_handler_failure(capsys, mocker, mock_root_logger):
    mocker.patch("logging.FileHandler", side_effect=OSError("read-only"))

    setup_logging(log_file="/nonexistent/flowdesk.log")

    captured = capsys.readouterr()
    assert "Warning: Could not create file handler for log file" in captured.err


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, logging.INFO),
        ("", logging.INFO),
        ("warning", logging.WARNING),
        ("DEBUG", logging.DEBUG),
        (logging.ERROR, logging.ERROR),
        ("nonsense", logging.INFO),
    ],
)
def test_resolve_log_level(value, expected):
    assert resolve_log_level(value) == expected


def test_symbol_formatter():
    """Test that the SymbolFormatter adds the correct symbols."""
    formatter = SymbolFormatter(fmt="%(symbol)s %(message)s")

    assert formatter.format(_record(logging.DEBUG, "d")) == "🐛 d"
    assert formatter.format(_record(logging.INFO, "i")) == " i"
    assert formatter.format(_record(logging.WARNING, "w")) == "⚠️ w"
    assert formatter.format(_record(logging.ERROR, "e")) == "❌ e"
    assert formatter.format(_record(logging.CRITICAL, "c")) == "🔥 c"


def test_symbol_formatter_custom_symbols():
    formatter = SymbolFormatter(fmt="%(symbol)s%(message)s", symbols={"error": "E:"})

    assert formatter.format(_record(logging.ERROR, "boom")) == "E:boom"

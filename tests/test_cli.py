"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import logging
import logging.handlers
import signal
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from json_tail import cli
from json_tail.config import Config

_real_setup_logging = cli._setup_logging


@pytest.fixture
def entries_file(tmp_path: Path) -> Path:
    path = tmp_path / "entries.json"
    path.write_text(json.dumps(["a"]), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def no_log_setup():
    with patch("json_tail.cli._setup_logging") as mock_setup:
        yield mock_setup


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self, entries_file: Path) -> None:
        args = cli._parse_args([str(entries_file)])

        assert args.filename == entries_file
        assert args.interval is None
        assert args.lines is None
        assert args.debug is None

    def test_short_and_long_interval(self, entries_file: Path) -> None:
        assert cli._parse_args([str(entries_file), "-i", "2.5"]).interval == 2.5
        assert cli._parse_args([str(entries_file), "--interval", "0.5"]).interval == 0.5

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "nan", "inf", "-inf", "1e999"])
    def test_rejects_bad_interval(self, entries_file: Path, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli._parse_args([str(entries_file), "-i", value])
        assert exc_info.value.code == 2

    def test_requires_filename(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli._parse_args([])
        assert exc_info.value.code == 2


class TestBuildConfig:
    """Tests for merging config file and flags."""

    def test_flags_override_config_file(self, tmp_path: Path, entries_file: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"interval_seconds": 5, "initial_entries": 2}), encoding="utf-8"
        )
        args = cli._parse_args([str(entries_file), "--config", str(config_path), "-i", "0.5"])

        cfg = cli._build_config(args)

        assert cfg.interval_seconds == 0.5
        assert cfg.initial_entries == 2

    def test_without_config_file(self, entries_file: Path) -> None:
        args = cli._parse_args([str(entries_file), "-n", "4", "--debug"])

        cfg = cli._build_config(args)

        assert cfg.interval_seconds == 1.0
        assert cfg.initial_entries == 4
        assert cfg.debug is True


class TestMain:
    """Tests for main()."""

    def test_missing_file_exits_1(self, tmp_path: Path) -> None:
        assert cli.main([str(tmp_path / "missing.json")]) == 1

    def test_directory_exits_1(self, tmp_path: Path) -> None:
        assert cli.main([str(tmp_path)]) == 1

    def test_invalid_config_exits_1(self, tmp_path: Path, entries_file: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text("{broken", encoding="utf-8")

        assert cli.main([str(entries_file), "--config", str(config_path)]) == 1

    def test_non_positive_interval_is_usage_error(self, entries_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(entries_file), "--interval", "0"])
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_non_finite_interval_is_usage_error(self, entries_file: Path, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main([str(entries_file), "--interval", value])
        assert exc_info.value.code == 2

    def test_runs_app(self, entries_file: Path, no_log_setup: MagicMock) -> None:
        with patch("json_tail.cli.JsonTailApp") as mock_app_cls:
            mock_app_cls.return_value.run.return_value = 0

            exit_code = cli.main([str(entries_file), "-i", "2"])

        assert exit_code == 0
        path, config = mock_app_cls.call_args.args
        assert path == entries_file.absolute()
        assert isinstance(config, Config)
        assert config.interval_seconds == 2.0
        no_log_setup.assert_called_once()
        assert cli._app_instance is None

    def test_restores_signal_handlers(self, entries_file: Path) -> None:
        previous = signal.getsignal(signal.SIGINT)
        with patch("json_tail.cli.JsonTailApp") as mock_app_cls:
            mock_app_cls.return_value.run.return_value = 0
            cli.main([str(entries_file)])

        assert signal.getsignal(signal.SIGINT) is previous

    def test_unexpected_error_exits_1(self, entries_file: Path) -> None:
        with patch("json_tail.cli.JsonTailApp") as mock_app_cls:
            mock_app_cls.return_value.run.side_effect = RuntimeError("boom")

            assert cli.main([str(entries_file)]) == 1


class TestSignalHandler:
    """Tests for shutdown signal handling."""

    def test_interrupts_running_app(self, monkeypatch: pytest.MonkeyPatch) -> None:
        app = MagicMock()
        monkeypatch.setattr(cli, "_app_instance", app)

        cli._signal_handler(signal.SIGINT, None)

        app.interrupt.assert_called_once()

    def test_exits_without_app(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cli, "_app_instance", None)

        with pytest.raises(SystemExit) as exc_info:
            cli._signal_handler(signal.SIGINT, None)
        assert exc_info.value.code == 130


class TestJSONFormatter:
    """Tests for structured log formatting."""

    def test_includes_extra_context(self) -> None:
        record = logging.LogRecord(
            name="json_tail.poller",
            level=logging.WARNING,
            pathname=__file__,
            lineno=10,
            msg="Error reading file: %s",
            args=("gone",),
            exc_info=None,
        )
        record.extra_context = {"path": "/tmp/entries.json"}

        data = json.loads(cli.JSONFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["event"] == "Error reading file: gone"
        assert data["context"]["path"] == "/tmp/entries.json"
        assert data["timestamp"].endswith("+00:00")

    def test_adds_logger_name_and_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                name="json_tail.cli",
                level=logging.ERROR,
                pathname=__file__,
                lineno=20,
                msg="crashed",
                args=(),
                exc_info=sys.exc_info(),
            )

        data = json.loads(cli.JSONFormatter().format(record))

        assert data["logger"] == "json_tail.cli"
        assert "RuntimeError: boom" in data["exception"]
        assert data["context"]["thread"] == record.threadName


class TestSetupLogging:
    """Tests for the rotating log file."""

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        yield root
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if handler not in saved_handlers:
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    def test_writes_json_lines_to_file(self, tmp_path: Path, root_logger: logging.Logger) -> None:
        log_file = tmp_path / "logs" / "json-tail.log"

        _real_setup_logging(log_file, debug=False)
        logging.getLogger("json_tail.test").info(
            "hello", extra={"extra_context": {"count": 3}}
        )
        for handler in root_logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        data = json.loads(lines[-1])
        assert data["event"] == "hello"
        assert data["context"]["count"] == 3
        assert root_logger.level == logging.INFO

    def test_replaces_existing_handlers(
        self, tmp_path: Path, root_logger: logging.Logger
    ) -> None:
        root_logger.addHandler(logging.NullHandler())

        _real_setup_logging(tmp_path / "json-tail.log", debug=True)

        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0], logging.handlers.RotatingFileHandler)
        assert root_logger.level == logging.DEBUG

"""Tests for logging configuration."""

import logging

import pytest

from messmate.config import reset_settings
from messmate.services.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers, level = root.handlers.copy(), root.level
    yield root
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    reset_settings()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_creates_log_directory(self, tmp_path) -> None:
        log_file = tmp_path / "nested" / "rollover.log"

        configure_logging(str(log_file))

        assert log_file.parent.exists()

    def test_stdout_and_file_handlers(self, tmp_path, restore_root_logger) -> None:
        configure_logging(str(tmp_path / "server.log"))

        kinds = sorted(type(h).__name__ for h in restore_root_logger.handlers)
        assert kinds == ["FileHandler", "StreamHandler"]

    def test_stdout_only_without_file(self, restore_root_logger) -> None:
        configure_logging(None)

        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0], logging.StreamHandler)

    def test_level_comes_from_settings(self, monkeypatch, restore_root_logger) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        reset_settings()

        assert configure_logging(None) == logging.DEBUG
        assert restore_root_logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in restore_root_logger.handlers)

    def test_explicit_level_overrides_settings(self, monkeypatch, restore_root_logger) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        reset_settings()

        configure_logging(None, level="error")

        assert restore_root_logger.level == logging.ERROR

    def test_unknown_override_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(None, level="chatty")

    def test_writes_formatted_lines_to_file(self, tmp_path) -> None:
        """File lines carry timestamp, logger name and level."""
        log_file = tmp_path / "server.log"
        configure_logging(str(log_file), level="INFO")

        logging.getLogger("messmate.services.rollover_service").info(
            "rollover.batch: target=%s", "2025-02"
        )

        contents = log_file.read_text()
        assert "rollover.batch: target=2025-02" in contents
        assert "messmate.services.rollover_service - INFO" in contents
        assert contents.startswith("[20")

    def test_repeated_setup_replaces_handlers(self, tmp_path, restore_root_logger) -> None:
        log_file = tmp_path / "server.log"
        stray = logging.StreamHandler()
        restore_root_logger.addHandler(stray)

        configure_logging(str(log_file))
        configure_logging(str(log_file))

        assert len(restore_root_logger.handlers) == 2
        assert stray not in restore_root_logger.handlers

"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from hostprov.core.observability.logging_config import _parse_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_console_only(self):
        setup_logging(level="WARNING")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_console_format_is_timestamped(self):
        setup_logging(level="INFO")
        fmt = logging.getLogger().handlers[0].formatter._fmt
        assert fmt.startswith("[%(asctime)s]")

    def test_file_handler_with_own_level(self, tmp_path: Path):
        log_file = tmp_path / "hostprov.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="DEBUG")

        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert root.level == logging.DEBUG

        logging.getLogger("hostprov.test").debug("written to file only")
        for handler in root.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()

    def test_debug_console_shows_origin(self):
        setup_logging(level="DEBUG")
        fmt = logging.getLogger().handlers[0].formatter._fmt
        assert "%(name)s:%(lineno)d" in fmt

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger().handlers) == 1


class TestParseLevel:
    @pytest.mark.parametrize(
        "name, expected",
        [("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("bogus", logging.INFO), (None, logging.INFO)],
    )
    def test_names(self, name, expected):
        assert _parse_level(name) == expected

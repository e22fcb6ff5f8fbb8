"""Tests for logging setup."""

import logging
from unittest.mock import patch

import pytest

from clinic.utils.logging import APP_LOGGER, LogConfig, get_logger, setup_logging


@pytest.fixture
def restore_levels():
    """Restore logger levels changed by a test."""
    app_logger = logging.getLogger(APP_LOGGER)
    previous = app_logger.level
    yield
    app_logger.setLevel(previous)


class TestLogging:
    """Tests for module logger levels."""

    def test_module_logger_has_no_own_level(self):
        """Test that module loggers defer to their parents."""
        assert get_logger("clinic.services.records").level == logging.NOTSET

    def test_explicit_level(self):
        """Test that an explicit level is applied."""
        logger = get_logger("clinic.tests.explicit", level="debug")
        assert logger.level == logging.DEBUG

    @pytest.mark.parametrize(("level", "expected"), [("WARNING", logging.WARNING), ("debug", logging.DEBUG)])
    def test_configured_level_reaches_module_loggers(self, restore_levels, level, expected):
        """Test that the configured level governs loggers created before setup."""
        logger = get_logger("clinic.services.records")

        with patch("clinic.utils.logging.logging.basicConfig") as basic_config:
            setup_logging(LogConfig(level=level))

        assert basic_config.call_args.kwargs["level"] == expected
        assert logger.getEffectiveLevel() == expected

    def test_driver_loggers_quieted(self, restore_levels):
        """Test that driver loggers only report warnings."""
        with patch("clinic.utils.logging.logging.basicConfig"):
            setup_logging(LogConfig(level="DEBUG"))

        assert logging.getLogger("pymongo").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

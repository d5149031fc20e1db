import logging
import pytest

from spend_flow import logging_setup
from spend_flow.logging_setup import configure_logging, get_logger


@pytest.fixture
def package_logger(monkeypatch):
    """Package logger in its unconfigured state, restored afterwards"""
    logger = logging.getLogger("spend_flow")
    monkeypatch.setattr(logging_setup, "_configured", False)
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "propagate", True)
    monkeypatch.delenv("SPEND_FLOW_LOG_LEVEL", raising=False)
    level = logger.level
    yield logger
    logger.setLevel(level)


@pytest.mark.unit
class TestLoggingSetup:

    def test_silent_until_configured(self, package_logger):
        get_logger("spend_flow.normalization.normalizer")

        assert [type(h) for h in package_logger.handlers] == [logging.NullHandler]

    def test_configure_with_level_name(self, package_logger):
        # Act
        configure_logging("debug")

        # Assert
        assert package_logger.level == logging.DEBUG
        assert [type(h) for h in package_logger.handlers] == [logging.StreamHandler]
        assert package_logger.propagate is False

    def test_level_from_environment(self, package_logger, monkeypatch):
        monkeypatch.setenv("SPEND_FLOW_LOG_LEVEL", "INFO")

        configure_logging()

        assert package_logger.level == logging.INFO

    def test_defaults_to_warning(self, package_logger):
        configure_logging("LOUD")

        assert package_logger.level == logging.WARNING

    def test_only_first_call_counts(self, package_logger):
        configure_logging("ERROR")
        configure_logging("DEBUG")

        assert package_logger.level == logging.ERROR
        assert len(package_logger.handlers) == 1

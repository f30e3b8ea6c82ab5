import logging

from backend.app.core.logging import configure_logging


def test_configure_logging_sets_level_without_duplicate_handlers():
    logger = logging.getLogger("backend")
    configure_logging("debug")
    handlers = len(logger.handlers)
    configure_logging("warning")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == handlers >= 1

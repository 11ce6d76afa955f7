import logging

from photoindex.lib.app_logging import configure_logging


def test_configure_logging_single_handler():
    logger = logging.getLogger("photoindex")
    logger.handlers.clear()

    configure_logging("debug")
    configure_logging("warning")

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    logger.handlers.clear()
    logger.propagate = True


def test_unknown_level_falls_back_to_info():
    logger = logging.getLogger("photoindex")
    logger.handlers.clear()

    configure_logging("chatty")

    assert logger.level == logging.INFO
    logger.handlers.clear()
    logger.propagate = True

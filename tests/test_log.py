"""setup_logger：重複呼叫不重複加 handler."""
import logging

import pytest

from figma2react.log import LOGGER_NAME, setup_logger


@pytest.fixture
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers), logger.level, logger.propagate
    logger.handlers = []
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers, logger.level, logger.propagate = saved[0], saved[1], saved[2]


def test_idempotent(clean_logger):
    setup_logger(logging.INFO)
    setup_logger(logging.DEBUG)
    assert len(clean_logger.handlers) == 1
    assert clean_logger.level == logging.DEBUG
    assert clean_logger.propagate is False


def test_log_file(clean_logger, tmp_path):
    path = tmp_path / "f2r.log"
    setup_logger(logging.INFO, str(path))
    setup_logger(logging.INFO, str(path))
    assert sum(isinstance(h, logging.FileHandler) for h in clean_logger.handlers) == 1
    logging.getLogger("figma2react.pipeline").info("hello")
    for handler in clean_logger.handlers:
        handler.flush()
    assert "[INFO] figma2react.pipeline: hello" in path.read_text(encoding="utf-8")

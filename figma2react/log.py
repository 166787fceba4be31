"""figma2react logger 設定（CLI 使用；library 只用 logging.getLogger(__name__)）."""

import logging
from typing import Optional, Union

LOGGER_NAME = "figma2react"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(level: Union[int, str] = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """在 figma2react logger 上安裝 console（與可選的檔案）handler；重複呼叫只更新 level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if not any(getattr(h, "_figma2react", False) for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        sh._figma2react = True
        logger.addHandler(sh)

    if log_file and not any(isinstance(h, logging.FileHandler) and h.baseFilename.endswith(log_file)
                            for h in logger.handlers):
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(fh)

    return logger

# -*- coding: utf-8 -*-
import logging
import os
from logging.handlers import RotatingFileHandler

from .config import QuizConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(config: QuizConfig) -> logging.Logger:
    """Streamlit は毎回スクリプトを再実行するので、ハンドラを二重に付けない"""
    logger = logging.getLogger("eitango")
    logger.setLevel(logging.INFO)

    log_dir = os.fspath(config.log_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.abspath(os.path.join(log_dir, config.log_file))

    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == log_path:
            return logger

    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)
    # 他ライブラリのログもコンソールに出す
    logging.basicConfig(level=logging.INFO)
    return logger

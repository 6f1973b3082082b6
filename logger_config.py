import logging
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(name: Optional[str] = None,
                 level: int = logging.WARNING,
                 log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure a logger once. The console handler writes to stderr so
    stdout carries only the JSON report. Calling again only adjusts the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger

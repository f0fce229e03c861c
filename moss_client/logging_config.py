"""
Logging setup shared by scripts using the Moss client.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are installed once by the application through setup_logging().
"""
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE_NAME = "moss_client.log"


def setup_logging(level: str | None = None, log_dir: str | None = None) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional file handler.

    Args:
        level: Log level name; defaults to LOG_LEVEL from the environment, then INFO
        log_dir: Directory for moss_client.log; defaults to LOG_DIR, no file logging if unset

    Returns:
        The root logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_dir = log_dir or os.getenv("LOG_DIR")

    log_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Avoid duplicate handlers when called more than once
    for handler in list(root_logger.handlers):
        if getattr(handler, "_moss_client", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler._moss_client = True
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, LOG_FILE_NAME)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(log_formatter)
        file_handler._moss_client = True
        root_logger.addHandler(file_handler)
        root_logger.info(f"Logging initialized. Log file: {log_file}")

    return root_logger

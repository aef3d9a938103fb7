"""
Logging configuration for game_stat.
"""

import os
import logging
import logging.handlers
import time
from typing import Dict, Optional, Union

# Global configuration
DEFAULT_LEVEL = logging.INFO
LOGGERS: Dict[str, logging.Logger] = {}
LOGGER_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
# Relative to the current working directory
LOG_DIRECTORY = 'logs'


def configure_logging(level: Union[int, str] = DEFAULT_LEVEL,
                      log_to_file: bool = False,
                      log_directory: Optional[str] = None) -> None:
    """
    Configure the logging system.

    Args:
        level: The log level to use, as a number or a name such as "DEBUG".
        log_to_file: Also write rotating log files.
        log_directory: Where log files go. Defaults to ``logs/`` in the current
            working directory.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = DEFAULT_LEVEL

    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove all handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOGGER_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        directory = os.path.abspath(log_directory or LOG_DIRECTORY)
        os.makedirs(directory, exist_ok=True)

        log_file = os.path.join(directory, f'game_stat_{time.strftime("%Y%m%d_%H%M%S")}.log')
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # Errors only
        error_log_file = os.path.join(directory, f'error_{time.strftime("%Y%m%d_%H%M%S")}.log')
        error_file_handler = logging.handlers.RotatingFileHandler(
            error_log_file,
            maxBytes=5*1024*1024,  # 5 MB
            backupCount=5,
            encoding='utf-8'
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(formatter)
        root_logger.addHandler(error_file_handler)

    root_logger.info("Logging configured")


def setup_logging_from_config(config) -> None:
    """
    Configure logging from the ``system`` domain of a StatConfig.

    Args:
        config: A StatConfig (or anything with a dot-notation ``get``).
    """
    log_dir = config.get("system.log_dir", "logs")
    configure_logging(
        level=config.get("system.log_level", "INFO"),
        log_to_file=config.get("system.log_to_file", False),
        log_directory=log_dir,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: The name of the logger.

    Returns:
        The logger.
    """
    if name in LOGGERS:
        return LOGGERS[name]

    logger = logging.getLogger(name)
    LOGGERS[name] = logger
    return logger

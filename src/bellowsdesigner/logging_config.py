"""
Logging Configuration
Sets up the loggers shared by the bellows packages.
"""
import logging
import sys
from typing import Optional, Union

NAMESPACES = ("bellows", "bellowsdesigner", "exporters", "schemas")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept either a numeric level or a name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the package loggers listed in ``NAMESPACES``.

    Args:
        level: Logging level (e.g. logging.DEBUG, "INFO")
        log_file: Optional path to save logs to a file.
    """
    numeric_level = resolve_level(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)

    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)

    for namespace in NAMESPACES:
        logger = logging.getLogger(namespace)
        logger.setLevel(numeric_level)

        # Re-running the CLI in one process must not stack handlers.
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.addHandler(console_handler)
        if file_handler is not None:
            logger.addHandler(file_handler)

    logging.getLogger("bellowsdesigner").info("Logging initialized.")

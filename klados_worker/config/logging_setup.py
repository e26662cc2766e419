"""Process-wide logging configuration for the worker service."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def config_configure_logging(log_level: str = "INFO") -> None:
    """Install one stream handler on the package logger.

    Args:
        log_level: Level name applied to the `klados_worker` logger tree.

    Returns:
        None: Configures logging as side effect.

    Raises:
        ValueError: Raised when log_level is not a known level name.
    """

    level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unsupported log_level={log_level}")

    package_logger = logging.getLogger("klados_worker")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        package_logger.addHandler(handler)

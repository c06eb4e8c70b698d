import logging
from typing import Any, Dict, Mapping, Optional

LOGGER_NAME = "Congress API Client"
SECRET_PARAMS = frozenset({"api_key"})


def logger_setup(logger_name=LOGGER_NAME, log_level=logging.INFO, propagate=False):
    """
    Return the named client logger, attaching a console handler on first use.

    The handler is only added once per logger name, so building several clients
    in one process does not duplicate output. Propagation to the root logger is
    off by default so host applications keep control of their own handlers.

    Args:
        logger_name (str): The name of the logger.
        log_level (int): The logging level (e.g., logging.INFO, logging.DEBUG).
        propagate (bool): Whether records also reach ancestor loggers.

    Returns:
        logger (logging.Logger): Configured logger instance.
    """
    logger = logging.getLogger(logger_name)

    if not logger.hasHandlers():
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s - raised_by: %(name)s',
            datefmt='%Y-%m-%d %H:%M:%S'
            )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.setLevel(log_level)
    logger.propagate = propagate

    return logger


def redact_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Copy of query params that is safe to log (secrets masked)."""
    if not params:
        return {}
    return {k: ("***" if k in SECRET_PARAMS else v) for k, v in params.items()}

from __future__ import annotations
import logging
import os

_LOG_INITIALIZED = False

LEVEL_ENV_VAR = "PMA_LOG_LEVEL"

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def init_logging(level: str | int = None, force: bool = False) -> None:
    """Configure root logging once.

    ``level`` wins over the ``PMA_LOG_LEVEL`` environment variable. Pass
    ``force=True`` to reconfigure after a first call (used by the command line
    once ``--log-level`` is known).
    """
    global _LOG_INITIALIZED
    if _LOG_INITIALIZED and not force:
        return
    if level is None:
        level_env = os.getenv(LEVEL_ENV_VAR, "INFO").upper()
        level = LEVEL_MAP.get(level_env, logging.INFO)
    elif isinstance(level, str):
        level = LEVEL_MAP.get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        force=force,
    )
    _LOG_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    if not _LOG_INITIALIZED:
        init_logging()
    return logging.getLogger(name)

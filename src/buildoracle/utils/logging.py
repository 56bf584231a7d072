"""Run log for oracle-driven test sessions.

The run log is a rotating file attached to the ``buildoracle`` logger only,
so verdicts and pump cycles are kept apart from the host test runner's own
output. Records still propagate, which keeps pytest's ``caplog`` working.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from ..services.settings import EnvironmentSettings, get_active_settings

__all__ = ["RUN_LOG_NAME", "get_log_path", "setup_logging", "teardown_logging"]

RUN_LOG_NAME = "oracle-run.log"
_PACKAGE_LOGGER = "buildoracle"
_HANDLER_NAME = "buildoracle-run-log"
_DEFAULT_LOG_DIR = Path.home() / ".buildoracle" / "logs"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "qasync")

_LOG_PATH: Path | None = None
_PREVIOUS_LEVEL: int | None = None


def setup_logging(
    log_dir: Path | str | None = None,
    *,
    settings: EnvironmentSettings | None = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """Attach the run log to the ``buildoracle`` logger and return its path.

    The level is ``DEBUG`` when the environment has ``verbose_compile_debug``
    set and ``INFO`` otherwise. Calling again replaces the previous run log.
    """

    global _LOG_PATH, _PREVIOUS_LEVEL
    active = settings or get_active_settings()
    level = logging.DEBUG if active.verbose_compile_debug else logging.INFO

    teardown_logging()
    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / RUN_LOG_NAME

    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    _PREVIOUS_LEVEL = package_logger.level
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _LOG_PATH = log_path
    package_logger.debug("Run log attached at %s", log_path)
    return log_path


def teardown_logging() -> None:
    """Detach and close the run log, restoring the package logger level."""

    global _LOG_PATH, _PREVIOUS_LEVEL
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
            handler.close()
    if _PREVIOUS_LEVEL is not None:
        package_logger.setLevel(_PREVIOUS_LEVEL)
    _LOG_PATH = None
    _PREVIOUS_LEVEL = None


def get_log_path() -> Path | None:
    """Return the active run log, if one is attached."""

    return _LOG_PATH


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("BUILDORACLE_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()

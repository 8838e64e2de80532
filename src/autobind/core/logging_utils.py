"""Central logging utilities.

All modules obtain their logger through :func:`get_logger` so the root
configuration is applied exactly once, whichever entry point (API server,
tests, scripts) imports the package first.

Payment credentials must never reach a log record. Services log the payment
method, brand and last four digits only.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
    "reset_logging",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER_NAME: Final = "autobind"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe: configuration will only
    be applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def reset_logging() -> None:
    """Allow the next configure_logging() call to apply again (for tests)."""
    global _is_configured
    _is_configured = False


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    logger = logging.getLogger(name or _ROOT_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    return logger

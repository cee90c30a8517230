"""Logging helpers shared across the code base.

Provides root logger configuration driven by the environment plus small
helpers for structured DEBUG traces (``extra_context``) and timing.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONFIGURED_HANDLER: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    The level comes from the explicit argument, then the
    ``DGPREVIEW_LOG_LEVEL`` environment variable, then WARNING. Calling
    this more than once replaces the handler installed previously.
    """
    global _CONFIGURED_HANDLER  # pylint: disable=global-statement

    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "WARNING").upper()
    level_value = getattr(logging, level_name, logging.WARNING)

    root = logging.getLogger()
    if _CONFIGURED_HANDLER is not None:
        root.removeHandler(_CONFIGURED_HANDLER)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level_value)
    _CONFIGURED_HANDLER = handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    None values are dropped so traces stay compact.
    """
    return {key: value for key, value in fields.items() if value is not None}


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.monotonic()

    def elapsed(self) -> float:
        """Seconds elapsed so far (or in total once the block exited)."""
        end = self._end if self._end is not None else time.monotonic()
        return end - self._start

    def duration_ms(self) -> int:
        return int(self.elapsed() * 1000)

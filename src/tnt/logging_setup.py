"""Logging configuration for the tnt command."""
from __future__ import annotations
import logging
import os
import sys
from typing import Optional

_console_handler: Optional[logging.Handler] = None


class _ConsoleNoiseFilter(logging.Filter):
    """Pass tnt's own records; other libraries only at ERROR and above."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == 'tnt' or record.name.startswith('tnt.'):
            return True
        return record.levelno >= logging.ERROR


def debug_requested(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def setup_logging(*, verbose: bool = False) -> None:
    """Attach a single stderr handler to the root logger.

    WARNING by default; DEBUG when verbose is set or TNT_DEBUG is truthy.
    Safe to call more than once.
    """
    global _console_handler
    level = logging.DEBUG if verbose or debug_requested(os.getenv('TNT_DEBUG')) else logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)
    # Replace only our own handler so repeated calls do not duplicate output.
    if _console_handler is not None:
        root.removeHandler(_console_handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler.addFilter(_ConsoleNoiseFilter())
    root.addHandler(handler)
    _console_handler = handler
    logging.captureWarnings(True)

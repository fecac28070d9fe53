"""Logging helpers shared by the CLI and the core."""

from __future__ import annotations

import logging

_ROOT_LOGGER = "apisniff"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``apisniff`` logger."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


def configure_logging(*, verbose: bool = False) -> None:
    """Attach a stderr handler to the ``apisniff`` logger once."""
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    root.propagate = False


__all__ = ["configure_logging", "get_logger"]

"""Single-line key=value logging for the Mission Control CMA service."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

DEFAULT_NAMESPACE = "mission_control"
DEFAULT_LEVEL = "INFO"


def kv(event: str, **fields: Any) -> str:
    """Render ``event`` followed by ``key=value`` pairs in argument order.

    Values containing whitespace or ``=`` are repr-quoted so a record still
    splits cleanly on spaces.
    """

    parts = [event]
    for key, value in fields.items():
        text = str(value)
        if not text or any(ch.isspace() for ch in text) or "=" in text:
            text = repr(text)
        parts.append(f"{key}={text}")
    return " ".join(parts)


class KeyValueFormatter(logging.Formatter):
    """``ts=... level=... logger=... <message>``; the message is usually built with :func:`kv`."""

    def __init__(self) -> None:
        super().__init__(
            fmt="ts=%(asctime)s level=%(levelname)s logger=%(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", DEFAULT_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(namespace: str = DEFAULT_NAMESPACE, level: Optional[str] = None) -> logging.Logger:
    """Return the namespaced logger, attaching the key=value handler once.

    The level is taken from ``level`` or, failing that, ``LOG_LEVEL`` at call
    time, so calling this again after changing the environment takes effect.
    """

    logger = logging.getLogger(namespace)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(KeyValueFormatter())
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(level.upper() if level else _level_from_env())
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    if child:
        return base.getChild(child)
    return base

"""Logging setup for the ``restuser`` logger hierarchy.

Library modules only call ``logging.getLogger(__name__)``; the host (or the
``restuser-smoke`` entry point) decides levels through :func:`configure_logging`.
Only the ``restuser`` logger is levelled, so the host's own root configuration
is left alone.

Environment overrides:
  - RESTUSER_LOG_LEVEL: explicit level name or number
  - RESTUSER_DEBUG: truthy -> DEBUG
  - RESTUSER_LOG_BODIES: truthy -> DEBUG logs include directory response bodies
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

PACKAGE_LOGGER = "restuser"
LEVEL_ENV = "RESTUSER_LOG_LEVEL"
DEBUG_ENV = "RESTUSER_DEBUG"
BODIES_ENV = "RESTUSER_LOG_BODIES"

_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
_TRUTHY = {"1", "true", "yes", "on"}


def parse_level(value: Union[int, str, None], fallback: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a level; anything else is ``fallback``."""
    if value is None:
        return fallback
    if isinstance(value, int):
        return value
    text = value.strip()
    if not text:
        return fallback
    try:
        return int(text)
    except ValueError:
        pass
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUTHY


def response_bodies_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Whether DEBUG logging may include raw directory response bodies."""
    return _flag(os.environ if environ is None else environ, BODIES_ENV)


def configure_logging(
    default_level: Union[int, str] = logging.INFO,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Level the ``restuser`` hierarchy and return the effective level.

    A stderr handler is installed on the root logger only when nothing is
    configured yet. urllib3 pool messages follow along at DEBUG and are
    otherwise held at WARNING.
    """
    env = os.environ if environ is None else environ
    level = parse_level(default_level)
    if env.get(LEVEL_ENV, "").strip():
        level = parse_level(env[LEVEL_ENV], level)
    elif _flag(env, DEBUG_ENV):
        level = logging.DEBUG

    if not logging.getLogger().handlers:
        logging.basicConfig(format=_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    logging.getLogger("urllib3").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
    return level


__all__ = [
    "PACKAGE_LOGGER",
    "configure_logging",
    "parse_level",
    "response_bodies_enabled",
]

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from store_ratings.core.config import get_settings

_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    return level


def setup_logging(level: int | str | None = None, *, json_logs: bool | None = None) -> None:
    """Configure structlog once for the process.

    JSON lines are emitted everywhere except the ``local`` environment, where a
    human readable console renderer is used unless ``json_logs`` says otherwise.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    resolved = _resolve_level(level)
    if json_logs is None:
        json_logs = settings.environment != "local"

    logging.basicConfig(level=resolved, format="%(message)s", stream=sys.stdout)

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
        structlog.processors.dict_tracebacks,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True

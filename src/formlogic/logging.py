"""Structlog setup for the form engine.

Engine modules log through `get_logger(__name__)` and pass their context as
``extra={"field": ..., "expression": ...}``. The processors below lift that
mapping into top-level keys so that a failing condition renders the same way
whether it comes from the evaluator, a calculation or spec loading.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from formlogic.settings import Settings, get_settings

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor

EXPRESSION_PREVIEW_LENGTH = 120

_configured = False


def _rename_event_key(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Expose the event text under ``message``."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _lift_extra(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Merge the ``extra`` mapping into the event; explicit keys win."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, Mapping):
        for key, value in extra.items():
            event_dict.setdefault(str(key), value)
    elif extra is not None:
        event_dict["extra"] = extra
    return event_dict


def _shorten_expression(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Cut long ``expression`` values so one bad rule cannot flood the log.

    Args:
        logger: The logger instance (unused).
        method_name: The logging method name (unused).
        event_dict: Event being rendered.

    Returns:
        The event with ``expression`` at most `EXPRESSION_PREVIEW_LENGTH` characters.
    """
    expression = event_dict.get("expression")
    if isinstance(expression, str) and len(expression) > EXPRESSION_PREVIEW_LENGTH:
        event_dict["expression"] = expression[: EXPRESSION_PREVIEW_LENGTH - 3] + "..."
    return event_dict


def _processors(*, json_output: bool) -> list[Processor]:
    renderer: Processor = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    return [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        _lift_extra,
        _shorten_expression,
        _rename_event_key,
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(*, settings: Settings | None = None, force: bool = False) -> None:
    """Route engine logs to stderr (and the optional log file).

    Args:
        settings (Settings | None): Settings to read ``LOG_*`` values from.
        force (bool): Reconfigure even if logging was already set up.
    """
    global _configured  # noqa: PLW0603

    if _configured and not force:
        return

    config = settings or get_settings()
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))
    logging.basicConfig(level=log_level, format="%(message)s", handlers=handlers, force=force)

    structlog.configure(
        processors=_processors(json_output=config.log_json),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = "formlogic") -> Any:
    """Return a module logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)

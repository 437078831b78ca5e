"""
Structured logging configuration using structlog.

Logs go to stderr so that CLI output written to stdout (JSON documents,
exported HTML) stays machine-readable.
"""

import logging
import sys

import structlog

from .config import settings

# Event keys that may carry whole documents or block markup
MARKUP_KEYS = ("html", "html_content", "snippet", "text")
MAX_MARKUP_CHARS = 200


def truncate_markup(logger, method_name: str, event_dict: dict) -> dict:
    """Shorten markup-bearing values so a log line never holds a full document."""
    for key in MARKUP_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_MARKUP_CHARS:
            event_dict[key] = f"{value[:MAX_MARKUP_CHARS]}... [{len(value)} chars]"
    return event_dict


def setup_logging(log_level: str = None, log_json: bool = None) -> None:
    """
    Configure structlog for the API server and the CLI.

    Processor chain: contextvars (request id), level, markup truncation,
    exception info, ISO timestamp, then JSON or console rendering.

    Args:
        log_level: Override for settings.log_level
        log_json: Override for settings.log_json
    """
    level = (log_level or settings.log_level).upper()
    render_json = settings.log_json if log_json is None else log_json
    renderer = (
        structlog.processors.JSONRenderer()
        if render_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            truncate_markup,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

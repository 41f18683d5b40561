"""Logging configuration using structlog.

Provides zerolog-style output with aligned 3-letter level names:
    12:30:45 INF provider selected provider=openai
    12:30:46 DBG ocr complete engine=tesseract blocks=4
    12:30:47 WRN adapter overwritten id=deepl
    12:30:48 ERR candidate failed id=local-llm error=timeout

Output goes to stderr so command results printed on stdout stay clean.
"""

import logging
import sys
from datetime import datetime

import structlog

# 3-letter level names for alignment (like zerolog)
LEVEL_NAMES = {
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "error": "ERR",
    "critical": "CRT",
}


def _level_to_3letter(logger, method_name, event_dict):
    """Convert log level to 3-letter abbreviation."""
    level = event_dict.get("level", method_name)
    event_dict["level"] = LEVEL_NAMES.get(level, level.upper()[:3])
    return event_dict


def _format_timestamp(logger, method_name, event_dict):
    """Add timestamp in HH:MM:SS format."""
    event_dict["timestamp"] = datetime.now().strftime("%H:%M:%S")
    return event_dict


def _render_kv_pairs(logger, method_name, event_dict):
    """Render event dict as 'timestamp LEVEL [component] message key=value ...'."""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "???")
    event = event_dict.pop("event", "")
    component = event_dict.pop("component", None)
    exception = event_dict.pop("exception", None)

    kv_parts = []
    for key, value in event_dict.items():
        if key.startswith("_"):
            continue
        if isinstance(value, str) and " " in value:
            kv_parts.append(f'{key}="{value}"')
        else:
            kv_parts.append(f"{key}={value}")

    head = f"{timestamp} {level}"
    if component:
        head = f"{head} [{component}]"
    line = f"{head} {event}"
    if kv_parts:
        line = f"{line} {' '.join(kv_parts)}"
    if exception:
        line = f"{line}\n{exception}"
    return line


def configure(level: str = "INFO", debug: bool = False, stream=None) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        debug: If True, sets level to DEBUG.
        stream: File object to write to. Defaults to stderr.
    """
    if debug:
        level = "DEBUG"

    processors = [
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        _format_timestamp,
        _level_to_3letter,
        _render_kv_pairs,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional component name, rendered as ``[name]``.

    Returns:
        A structlog BoundLogger instance.
    """
    # Initial values keep the proxy lazy so configure() still applies
    if name:
        return structlog.get_logger(component=name)
    return structlog.get_logger()

"""
Structured JSON logging: timestamp, event_type, program_id and decode outcome.

structlog with ISO timestamps, log level, and consistent keys for
aggregation. All modules should use get_logger() and pass event_type as the
first argument plus keyword fields (program_id, outcome, error, ...).

Uses only Python stdlib logging and structlog; no solana_ixparse imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# JSON output for host services (LOG_FORMAT=json); human-readable for local
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _render_binary(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Render bytes fields (instruction data, discriminators) as hex."""
    for key, value in event_dict.items():
        if isinstance(value, (bytes, bytearray)):
            event_dict[key] = bytes(value).hex()
    return event_dict


def configure_structlog() -> None:
    """Configure structlog once at import: JSON, timestamp, level, event_type."""
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
        _render_binary,
    ]
    if LOG_FORMAT == "json":
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

    Log with event_type (first arg) and keyword fields:
        logger = get_logger(__name__)
        logger.warning("instruction_decoder_fault", program_id=pid, error=str(e))
    Output (JSON): {"event_type": "instruction_decoder_fault", "program_id": "...", "error": "...",
    "timestamp": "...", "level": "warning", "logger": "module.name"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_program(program_id: Any, name: str = "solana_ixparse") -> structlog.BoundLogger:
    """Return logger `name` with program_id (base58 text) bound to all subsequent log calls."""
    return get_logger(name).bind(program_id=str(program_id))

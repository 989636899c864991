"""Structured event helpers for store, state and content activity."""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Optional


DEFAULT_EVENT_LOGGER = logging.getLogger("bible_reader.events")

STORE_EVENT = "STORE_OP"
STATE_EVENT = "STATE_CHANGE"
CONTENT_EVENT = "CONTENT_LOAD"


def sanitize_value(value: Any) -> Any:
    """Return a compact, log-friendly representation for *value*."""

    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return sanitize_value(value.value)
    if isinstance(value, (bool, int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    return text[:120] + ("…" if len(text) > 120 else "")


def normalize_payload(values: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop empty entries from *values* and sanitize the rest."""

    if not values:
        return {}
    normalized: Dict[str, Any] = {}
    for key, raw_value in values.items():
        if not key:
            continue
        value = sanitize_value(raw_value)
        if value is None or value == "":
            continue
        normalized[str(key)] = value
    return normalized


def emit_structured_event(
    event_type: str,
    message: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    duration_ms: Optional[float] = None,
    level: int = logging.DEBUG,
    logger: logging.Logger | logging.LoggerAdapter = DEFAULT_EVENT_LOGGER,
) -> None:
    """Log ``[event_type] message (key=value, ...)`` with structured ``extra`` fields."""

    base_message = str(message).strip()
    details = normalize_payload(payload)
    details_text = ", ".join(f"{key}={value}" for key, value in details.items())
    display_message = f"[{event_type}] {base_message}" if event_type else base_message
    log_message = f"{display_message} ({details_text})" if details_text else display_message
    extra: Dict[str, Any] = {
        "debug_event": base_message,
        "debug_event_type": event_type or "",
    }
    if details:
        extra["debug_payload"] = details
    if duration_ms is not None:
        extra["debug_duration_ms"] = float(duration_ms)
    logger.log(level, log_message, extra=extra)


def emit_store_event(
    action: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    duration_ms: Optional[float] = None,
    level: int = logging.DEBUG,
    logger: logging.Logger | logging.LoggerAdapter = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit a preference store event."""

    emit_structured_event(
        STORE_EVENT,
        action,
        payload=payload,
        duration_ms=duration_ms,
        level=level,
        logger=logger,
    )


def emit_state_event(
    field: str,
    message: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    level: int = logging.DEBUG,
    logger: logging.Logger | logging.LoggerAdapter = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit a controller state transition event."""

    emit_structured_event(
        STATE_EVENT,
        message or field,
        payload={"field": field, **(payload or {})},
        level=level,
        logger=logger,
    )


def emit_content_event(
    name: str,
    status: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    duration_ms: Optional[float] = None,
    level: int = logging.INFO,
    logger: logging.Logger | logging.LoggerAdapter = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit a content resource lifecycle event."""

    emit_structured_event(
        CONTENT_EVENT,
        f"{name} {status}",
        payload=payload,
        duration_ms=duration_ms,
        level=level,
        logger=logger,
    )


__all__ = [
    "CONTENT_EVENT",
    "DEFAULT_EVENT_LOGGER",
    "STATE_EVENT",
    "STORE_EVENT",
    "emit_content_event",
    "emit_state_event",
    "emit_store_event",
    "emit_structured_event",
    "normalize_payload",
    "sanitize_value",
]

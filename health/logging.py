"""
health.logging
AUTHOR: carter-vin

Event lines for the health service

Each event is one compact JSON object on stdout carrying:
- event_type (fixed vocabulary, each with a severity)
- severity: info | warning | error
- utc_now, service_version
- caller fields (long `message` values are capped)
"""

from __future__ import annotations

import json
from typing import Any

from health.model import utc_now_iso

# Event vocabulary -> severity
EVENT_SEVERITY = {
    "server_start": "info",
    "server_shutdown": "info",
    "health_check_completed": "info",
    "health_check_failed": "error",
    "service_check_failed": "warning",
    "slow_response": "warning",
}

VALID_EVENT_TYPES = frozenset(EVENT_SEVERITY)

MESSAGE_LIMIT = 200


def _cap(value: str, limit: int = MESSAGE_LIMIT) -> str:
    overflow = len(value) - limit
    if overflow <= 0:
        return value
    return f"{value[:limit]}...[truncated {overflow} chars]"


def build_event(event_type: str, *, service_version: str, **fields: Any) -> dict[str, Any]:
    """
    Assemble the event payload; raises ValueError for unknown event types
    """
    severity = EVENT_SEVERITY.get(event_type)
    if severity is None:
        raise ValueError(f"invalid event_type: {event_type}")

    message = fields.get("message")
    if isinstance(message, str):
        fields["message"] = _cap(message)

    return {
        **fields,
        "event_type": event_type,
        "severity": severity,
        "service_version": service_version,
        "utc_now": utc_now_iso(),
    }


def emit_event(event_type: str, *, service_version: str, **fields: Any) -> None:
    """
    Print one event line to stdout
    """
    line = json.dumps(
        build_event(event_type, service_version=service_version, **fields),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    print(line, flush=True)

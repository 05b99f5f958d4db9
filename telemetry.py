"""Activity events emitted through the standard logging tree."""
from __future__ import annotations

import logging
from typing import Sequence

_ACTIVITY_LOGGER = logging.getLogger("activity")


def emit_log_event(
    *,
    type: str,
    action: str,
    result: str,
    params: Sequence[str | None] | None = None,
    user_email: str | None = None,
) -> dict:
    """Log one activity event and return the record that was logged."""

    record = {
        "type": type,
        "action": action,
        "result": result,
        "user_id": user_email,
        "params": [p for p in (params or []) if p is not None],
    }
    level = logging.INFO if result == "success" else logging.WARNING
    _ACTIVITY_LOGGER.log(
        level,
        "%s %s %s user=%s params=%s",
        type,
        action,
        result,
        user_email or "-",
        record["params"],
        extra={"activity": record},
    )
    return record


__all__ = ["emit_log_event"]

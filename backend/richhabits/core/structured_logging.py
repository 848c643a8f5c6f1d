"""Small structured logging helper.

Log lines are JSON strings so they can be shipped to any collector without
extra dependencies.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

from richhabits.core.request_context import get_acting_user, get_request_id


def configure_logging(level: str | None = None) -> None:
    """Install a plain stream handler on the root logger.

    The message itself is already JSON, so the formatter only passes it through.
    """

    root = logging.getLogger()
    resolved = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    root.setLevel(resolved)
    if not any(getattr(h, "_richhabits", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._richhabits = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with request correlation fields."""

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id
    acting_user_id = get_acting_user()
    if acting_user_id and "acting_user_id" not in fields:
        payload["acting_user_id"] = str(acting_user_id)

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))

"""Lightweight structured logging for invocation, tool, and agent events."""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

_FALSEY = {"0", "false", "no", "n", "off"}


def events_enabled() -> bool:
    """Return False when AICLIENT_LOG_EVENTS is set to a falsey value."""
    return str(os.environ.get("AICLIENT_LOG_EVENTS", "1")).strip().lower() not in _FALSEY


def log_event(event: str, payload: Dict[str, Any] | None = None, *, stream: TextIO | None = None) -> None:
    """Emit a structured JSON log line (stdout unless ``stream`` is given).

    Args:
        event (str): Event name, e.g. ``llm_invoke``.
        payload (Dict[str, Any] | None): Extra fields merged into the line.
        stream (TextIO | None): Destination; defaults to ``sys.stdout``.
    """
    if not events_enabled():
        return
    data = {
        "event": event,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
    if payload:
        data.update(payload)
    print(json.dumps(data, ensure_ascii=False, default=str), file=stream or sys.stdout)

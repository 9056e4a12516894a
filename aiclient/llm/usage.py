"""Token usage normalization and accumulation."""

from __future__ import annotations

import threading
from typing import Any, Iterable, Optional, Sequence

from aiclient.llm.types import Usage


def _first_count(usage: Any, keys: Sequence[str]) -> Optional[int]:
    """Return the first non-null integer count found under ``keys``."""
    for key in keys:
        if isinstance(usage, dict):
            value = usage.get(key)
        else:
            value = getattr(usage, key, None)
        if value is None:
            continue
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            continue
    return None


def usage_counts(
    usage: Any,
    *,
    input_keys: Sequence[str] = ("input_tokens", "prompt_tokens"),
    output_keys: Sequence[str] = ("output_tokens", "completion_tokens"),
    total_keys: Sequence[str] = ("total_tokens",),
) -> Usage:
    """Normalize a provider usage payload (object or dict) into ``Usage``.

    Missing fields count as zero. The total is taken from the payload when it
    reports one and computed as input + output otherwise.
    """
    if usage is None:
        return Usage()
    input_tokens = _first_count(usage, input_keys) or 0
    output_tokens = _first_count(usage, output_keys) or 0
    total_tokens = _first_count(usage, total_keys)
    if total_tokens is None:
        total_tokens = input_tokens + output_tokens
    return Usage(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total_tokens)


def sum_usage(items: Iterable[Usage]) -> Usage:
    total = Usage()
    for item in items:
        total = total + item
    return total


class UsageCounter:
    """Running total of token counts across calls."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._usage = Usage()
        self._calls = 0

    def add(self, usage: Optional[Usage]) -> None:
        if usage is None:
            return
        with self._lock:
            self._usage = self._usage + usage
            self._calls += 1

    @property
    def calls(self) -> int:
        return self._calls

    def get_usage(self) -> Usage:
        return self._usage

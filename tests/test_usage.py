"""Tests for token usage normalization and accumulation."""

from __future__ import annotations

from types import SimpleNamespace

from aiclient.llm.types import Usage
from aiclient.llm.usage import UsageCounter, sum_usage, usage_counts


def test_usage_counts_prefers_reported_total() -> None:
    usage = usage_counts({"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 10})
    assert usage == Usage(input_tokens=3, output_tokens=4, total_tokens=10)


def test_usage_counts_computes_total_when_absent() -> None:
    usage = usage_counts(SimpleNamespace(input_tokens=3, output_tokens=4))
    assert usage == Usage(3, 4, 7)


def test_usage_counts_treats_missing_fields_as_zero() -> None:
    assert usage_counts(None) == Usage()
    assert usage_counts({}) == Usage()
    assert usage_counts({"output_tokens": None, "input_tokens": "5"}) == Usage(5, 0, 5)


def test_usage_counts_custom_field_names() -> None:
    meta = SimpleNamespace(prompt_token_count=2, candidates_token_count=1, total_token_count=None)
    usage = usage_counts(
        meta,
        input_keys=("prompt_token_count",),
        output_keys=("candidates_token_count",),
        total_keys=("total_token_count",),
    )
    assert usage == Usage(2, 1, 3)


def test_usage_counter_is_additive() -> None:
    parts = [Usage(1, 2, 3), Usage(10, 20, 30), Usage(0, 0, 0)]
    counter = UsageCounter()
    for part in parts:
        counter.add(part)
    counter.add(None)

    assert counter.get_usage() == Usage(11, 22, 33)
    assert counter.get_usage() == sum_usage(parts)
    assert counter.calls == 3
    assert (parts[0] + parts[1]) + parts[2] == parts[0] + (parts[1] + parts[2])


def test_usage_counts_keeps_reported_zero_total() -> None:
    usage = usage_counts({"input_tokens": 3, "output_tokens": 4, "total_tokens": 0})
    assert usage == Usage(3, 4, 0)

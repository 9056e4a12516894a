"""CLI smoke tests that never reach a real provider."""

from __future__ import annotations

import pytest

from aiclient.cli.entrypoints import build_parser, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("AICLIENT_CONFIG", "AICLIENT_PROVIDERS", "AICLIENT_MODEL", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)


def test_models_prints_router_table(capsys) -> None:
    assert main(["models"]) == 0

    out = capsys.readouterr().out
    assert "gpt-4o\topenai\n" in out
    assert "claude-3-5-sonnet-latest\tanthropic  (provider not enabled)" in out


def test_invoke_without_credentials_fails_cleanly(capsys) -> None:
    assert main(["invoke", "hi"]) == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().err


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])

"""CLI entrypoints for one-shot invocation, streaming, and router inspection."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from aiclient.core.config import load_settings
from aiclient.llm.errors import LLMProviderError
from aiclient.llm.router import build_model_map
from aiclient.llm.runtime import build_ai_client
from aiclient.llm.types import InvocationRequest, Message


def _request(args: argparse.Namespace, settings: dict) -> InvocationRequest:
    return InvocationRequest(
        model=args.model or settings["default_model"],
        messages=[Message(role="user", content=args.prompt)],
        system_prompt=args.system or "",
        temperature=args.temperature,
    )


def cmd_invoke(args: argparse.Namespace) -> int:
    """Send one prompt and print the content followed by a usage line.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        int: Process return code.
    """
    settings = load_settings(Path(args.config) if args.config else None)
    try:
        client = build_ai_client(settings)
        response = client.invoke(_request(args, settings))
    except LLMProviderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(response.content)
    print(json.dumps(response.usage.to_dict()), file=sys.stderr)
    return 0


def cmd_stream(args: argparse.Namespace) -> int:
    """Stream one prompt, printing chunks as they arrive."""
    settings = load_settings(Path(args.config) if args.config else None)
    try:
        client = build_ai_client(settings)
        for chunk in client.stream(_request(args, settings)):
            sys.stdout.write(chunk.content)
            sys.stdout.flush()
    except LLMProviderError as exc:
        print(f"\nerror: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write("\n")
    return 0


def cmd_models(args: argparse.Namespace) -> int:
    """Print the effective router table as ``model<TAB>provider`` lines."""
    settings = load_settings(Path(args.config) if args.config else None)
    try:
        table = build_model_map(settings.get("model_map"))
    except LLMProviderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    enabled = set(settings["providers"])
    for model, provider in sorted(table.items()):
        marker = "" if provider.value in enabled else "  (provider not enabled)"
        print(f"{model}\t{provider.value}{marker}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aiclient", description="Provider-agnostic model invocation")
    parser.add_argument("--config", type=str, default=None, help="Path to a TOML config file.")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("invoke", cmd_invoke, "Send one prompt and print the reply"),
        ("stream", cmd_stream, "Stream the reply to one prompt"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("prompt", type=str)
        p.add_argument("--model", type=str, default=None)
        p.add_argument("--system", type=str, default=None)
        p.add_argument("--temperature", type=float, default=None)
        p.set_defaults(func=func)

    m = sub.add_parser("models", help="Show the model -> provider router table")
    m.set_defaults(func=cmd_models)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for aiclient.

    Returns:
        int: Process return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

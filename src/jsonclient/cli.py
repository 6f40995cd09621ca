"""
jsonclient CLI entrypoint.

Handy for poking at JSON endpoints from a shell:

    jsonclient get https://example.test/items
    jsonclient post https://example.test/items --data '{"name": "x"}'
    jsonclient post https://example.test/items --data @payload.json --authorization "Bearer xyz"

The response is printed as JSON on stdout. Failed round trips print the status and raw body
to stderr and exit non-zero.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import httpx

from jsonclient.config.settings import get_settings
from jsonclient.core.errors import JsonClientError, ResponseError
from jsonclient.core.http import JsonClient, build_client
from jsonclient.core.logging import configure_logging

EXIT_RESPONSE_ERROR = 1
EXIT_CLIENT_ERROR = 2


def _load_data_arg(value: str) -> Any:
    """Parse `--data`: inline JSON, or `@path` to read JSON from a file."""
    if value.startswith("@"):
        text = Path(value[1:]).expanduser().read_text(encoding="utf-8")
    else:
        text = value
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid --data JSON: {exc}") from exc


def _client_from_args(args: argparse.Namespace) -> JsonClient:
    client = build_client(get_settings())
    authorization = getattr(args, "authorization", None)
    if authorization is not None:
        client.authorization_header = authorization
    indent = getattr(args, "indent", None)
    if indent is not None:
        client.indent = indent
    return client


def _cmd_get(args: argparse.Namespace) -> Any:
    client = _client_from_args(args)
    try:
        return client.fetch_json(args.url)
    finally:
        client.transport.close()


def _cmd_post(args: argparse.Namespace) -> Any:
    payload = _load_data_arg(args.data) if args.data is not None else None
    client = _client_from_args(args)
    try:
        return client.send_json(args.url, payload)
    finally:
        client.transport.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the jsonclient CLI."""
    parser = argparse.ArgumentParser(prog="jsonclient")
    parser.add_argument("--log-level", type=str, default=None, help="Overrides JSONCLIENT_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="GET a URL and print the JSON response.")
    get.add_argument("url")
    get.set_defaults(func=_cmd_get)

    post = sub.add_parser("post", help="POST a JSON payload and print the JSON response.")
    post.add_argument("url")
    post.add_argument("--data", type=str, default=None, help="Inline JSON, or @path to a JSON file.")
    post.add_argument("--authorization", type=str, default=None, help="Authorization header value.")
    post.add_argument("--indent", type=str, default=None, help="Indentation for the outgoing payload.")
    post.set_defaults(func=_cmd_post)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m jsonclient.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        result = args.func(args)
    except ResponseError as exc:
        print(f"error: HTTP {exc.status_code}: {exc.cause}", file=sys.stderr)
        if exc.body:
            print(exc.body, file=sys.stderr)
        return EXIT_RESPONSE_ERROR
    except (JsonClientError, httpx.HTTPError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CLIENT_ERROR

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

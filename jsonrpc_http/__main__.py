"""Command-line JSON-RPC caller.

Run directly::

    python -m jsonrpc_http http://127.0.0.1:8100/rpc addNumbers 1 2
    python -m jsonrpc_http http://127.0.0.1:8100/rpc createPerson '{"name": "Alex"}'
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

import httpx
from dotenv import load_dotenv

from jsonrpc_http.client import RPCClient
from jsonrpc_http.config import ClientOptions, parse_basic_auth
from jsonrpc_http.errors import ClientError, HTTPError
from jsonrpc_http.jsonrpc import json_default

load_dotenv(os.path.join(Path.cwd(), ".env"))

EXIT_OK = 0
EXIT_RPC_ERROR = 1
EXIT_CLIENT_ERROR = 2


def parse_param(raw: str) -> Any:
    """Parse one command-line param as JSON, falling back to a plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"header must be NAME:VALUE, got {raw!r}")
    return name.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonrpc-http", description="Call a JSON-RPC 2.0 method over HTTP"
    )
    parser.add_argument("endpoint", help="URL the request is POSTed to")
    parser.add_argument("method", help="Remote method name")
    parser.add_argument(
        "params",
        nargs="*",
        type=parse_param,
        help="Positional params, each parsed as JSON (plain strings allowed)",
    )
    parser.add_argument(
        "--notify", action="store_true", help="Send a notification, expect no response"
    )
    parser.add_argument("--id", type=int, default=None, help="Request id to use")
    parser.add_argument(
        "-H",
        "--header",
        dest="headers",
        action="append",
        type=parse_header,
        default=[],
        help="Extra header NAME:VALUE (repeatable)",
    )
    parser.add_argument(
        "--basic-auth",
        type=str,
        default=os.getenv("JSONRPC_BASIC_AUTH"),
        help="Basic auth credentials USER:PASS",
    )
    parser.add_argument(
        "--allow-unknown-fields",
        action="store_true",
        help="Accept response envelopes with non-standard fields",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    return parser


def main(argv: Sequence[str] | None = None, http_client: httpx.Client | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("jsonrpc-http")

    overrides: dict[str, Any] = {"custom_headers": dict(args.headers)}
    if args.basic_auth:
        overrides["basic_auth"] = parse_basic_auth(args.basic_auth)
    if args.allow_unknown_fields:
        overrides["allow_unknown_fields"] = True
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.id is not None:
        overrides["default_request_id"] = args.id
    if http_client is not None:
        overrides["http_client"] = http_client

    with RPCClient(args.endpoint, ClientOptions.from_env(**overrides)) as client:
        try:
            if args.notify:
                client.notify(args.method, *args.params)
                return EXIT_OK
            resp = client.call(args.method, *args.params)
        except HTTPError as exc:
            logger.error("%s", exc)
            if exc.response is not None:
                print(json.dumps(exc.response.to_dict(), indent=2, default=json_default))
            return EXIT_CLIENT_ERROR
        except ClientError as exc:
            logger.error("%s", exc)
            return EXIT_CLIENT_ERROR

    print(json.dumps(resp.to_dict(), indent=2, default=json_default))
    return EXIT_RPC_ERROR if resp.error is not None else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

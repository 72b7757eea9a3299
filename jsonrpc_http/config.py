"""Client options.

Everything here is optional; ``RPCClient(endpoint)`` works with the
defaults.  ``ClientOptions.from_env`` reads the ``JSONRPC_*`` variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

# Defaults
DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_MAX_RETRIES = 1  # attempts per call, 1 = no retry
DEFAULT_REQUEST_ID = 0

_TRUE = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ClientOptions:
    """Construction-time settings for ``RPCClient`` / ``AsyncRPCClient``.

    ``http_client`` is an ``httpx.Client`` (or ``httpx.AsyncClient`` for the
    async facade); when omitted the facade creates and owns one.
    """

    http_client: Any = None
    custom_headers: dict[str, str] = field(default_factory=dict)
    allow_unknown_fields: bool = False
    default_request_id: int = DEFAULT_REQUEST_ID
    auto_increment: bool = True
    basic_auth: tuple[str, str] | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "ClientOptions":
        """Build options from ``JSONRPC_*`` environment variables.

        Keyword *overrides* win over the environment.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if "JSONRPC_TIMEOUT" in env:
            kwargs["timeout"] = float(env["JSONRPC_TIMEOUT"])
        if "JSONRPC_MAX_RETRIES" in env:
            kwargs["max_retries"] = int(env["JSONRPC_MAX_RETRIES"])
        if "JSONRPC_DEFAULT_REQUEST_ID" in env:
            kwargs["default_request_id"] = int(env["JSONRPC_DEFAULT_REQUEST_ID"])
        if "JSONRPC_ALLOW_UNKNOWN_FIELDS" in env:
            kwargs["allow_unknown_fields"] = (
                env["JSONRPC_ALLOW_UNKNOWN_FIELDS"].strip().lower() in _TRUE
            )
        if env.get("JSONRPC_BASIC_AUTH"):
            kwargs["basic_auth"] = parse_basic_auth(env["JSONRPC_BASIC_AUTH"])

        kwargs.update(overrides)
        return cls(**kwargs)


def parse_basic_auth(value: str) -> tuple[str, str]:
    """Split ``user:password``; the password may itself contain colons."""
    user, sep, password = value.partition(":")
    if not sep:
        raise ValueError("basic auth must be given as user:password")
    return user, password

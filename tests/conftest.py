"""Shared fixtures.

``FakeServer`` is a Starlette app with a single ``/rpc`` POST endpoint
that records every request and answers with whatever the test told it
to.  The sync client reaches it through ``starlette.testclient``, the
async client through ``httpx.ASGITransport``; no process is started.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route
from starlette.testclient import TestClient

from jsonrpc_http import AsyncRPCClient, RPCClient

ENDPOINT = "http://testserver/rpc"


@dataclass
class RecordedRequest:
    method: str
    body: str
    headers: dict[str, str]

    def json(self) -> Any:
        return json.loads(self.body)


class FakeServer:
    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self.status_code = 200
        self.body = '{"jsonrpc":"2.0","result":null,"id":0}'
        self.handler: Callable[[Any], Any] | None = None
        self.app = Starlette(
            debug=False,
            routes=[Route("/rpc", self.rpc_endpoint, methods=["POST"])],
        )

    # -- Test controls -------------------------------------------------
    def reply(self, body: str, status_code: int = 200) -> None:
        self.handler = None
        self.body = body
        self.status_code = status_code

    def reply_json(self, payload: Any, status_code: int = 200) -> None:
        self.reply(json.dumps(payload), status_code)

    def respond_with(self, handler: Callable[[Any], Any]) -> None:
        """Compute each reply from the decoded request payload."""
        self.handler = handler
        self.status_code = 200

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    # -- Endpoint ------------------------------------------------------
    async def rpc_endpoint(self, request: Request) -> Response:
        raw = await request.body()
        self.requests.append(
            RecordedRequest(request.method, raw.decode("utf-8"), dict(request.headers))
        )
        body = self.body
        if self.handler is not None:
            body = json.dumps(self.handler(json.loads(raw)))
        return Response(body, status_code=self.status_code, media_type="application/json")


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http(server):
    """Sync httpx client (starlette TestClient) wired to the fake server."""
    with TestClient(server.app) as test_client:
        yield test_client


@pytest.fixture
def client(http):
    rpc = RPCClient(ENDPOINT, http_client=http)
    yield rpc
    rpc.close()


@pytest.fixture
async def async_client(server):
    """AsyncRPCClient wired to the in-process Starlette app."""
    transport = httpx.ASGITransport(app=server.app)  # type: ignore[arg-type]
    http_client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    rpc = AsyncRPCClient(ENDPOINT, http_client=http_client)
    yield rpc
    await http_client.aclose()


def echo_ids(payload: Any) -> Any:
    """Answer every request in *payload* with its own id as the result."""
    if isinstance(payload, list):
        return [
            {"jsonrpc": "2.0", "result": item["id"], "id": item["id"]}
            for item in payload
            if "id" in item
        ]
    return {"jsonrpc": "2.0", "result": payload.get("id"), "id": payload.get("id")}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"

"""JSON-RPC 2.0 over HTTP clients.

* ``call(method, *args)``       → ``JsonRpcResponse``
* ``call_raw(request)``         → ``JsonRpcResponse`` (request sent as built)
* ``call_for(method, *args)``   → result, ``RpcError`` on a protocol error
* ``notify(method, *args)``     → ``None``, no response expected
* ``call_batch(requests)``      → ``BatchResponses`` (ids assigned here)
* ``call_batch_raw(requests)``  → ``BatchResponses`` (ids left alone)

``RPCClient`` blocks on ``httpx.Client``; ``AsyncRPCClient`` has the same
surface on ``httpx.AsyncClient``.  One instance can be shared between
threads (or tasks): the id counter and the header map are locked.

Usage::

    with RPCClient("http://127.0.0.1:8100/rpc") as client:
        client.call("addNumbers", 1, 2).get_int()
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Callable, Iterable, Mapping

import httpx

from jsonrpc_http.batch import BatchResponses
from jsonrpc_http.config import ClientOptions
from jsonrpc_http.errors import EmptyBatchError, InvalidBatchElementError, RpcError
from jsonrpc_http.ids import IdAllocator
from jsonrpc_http.jsonrpc import (
    JSONRPC_VERSION,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
)
from jsonrpc_http.params import params as normalize_params
from jsonrpc_http.transport import (
    async_retrier,
    build_headers,
    check_status,
    decode_batch,
    decode_response,
    encode_body,
    retrier,
    translate_transport_errors,
)

log = logging.getLogger(__name__)

BatchElement = JsonRpcRequest | JsonRpcNotification

_BATCH_LABEL = "rpc batch call"


class _ClientBase:
    """Configuration and envelope building shared by both facades."""

    def __init__(
        self,
        endpoint: str,
        options: ClientOptions | None = None,
        **overrides: Any,
    ) -> None:
        if options is None:
            options = ClientOptions(**overrides)
        elif overrides:
            options = dataclasses.replace(options, **overrides)

        self.endpoint = endpoint
        self.allow_unknown_fields = options.allow_unknown_fields
        self.timeout = options.timeout
        self.max_retries = options.max_retries

        self._lock = threading.Lock()
        self._custom_headers: dict[str, str] = dict(options.custom_headers)
        self._basic_auth = options.basic_auth
        self._ids = IdAllocator(options.default_request_id, options.auto_increment)
        self._http: Any = options.http_client
        self._owns_http = False

    # -- Headers / auth ------------------------------------------------

    @property
    def headers(self) -> dict[str, str]:
        """A copy of the custom headers sent with every request."""
        with self._lock:
            return dict(self._custom_headers)

    def set_header(self, name: str, value: str) -> None:
        with self._lock:
            self._custom_headers[name] = value

    def set_headers(self, headers: Mapping[str, str]) -> None:
        """Add *headers*, overwriting existing ones with the same name."""
        with self._lock:
            self._custom_headers.update(headers)

    def remove_header(self, name: str) -> None:
        with self._lock:
            self._custom_headers.pop(name, None)

    def set_basic_auth(self, username: str, password: str) -> None:
        with self._lock:
            self._basic_auth = (username, password)

    def clear_basic_auth(self) -> None:
        with self._lock:
            self._basic_auth = None

    def _request_headers(self) -> httpx.Headers:
        with self._lock:
            return build_headers(self._custom_headers, self._basic_auth)

    # -- Request ids ---------------------------------------------------

    @property
    def next_id(self) -> int:
        return self._ids.next_id

    @property
    def auto_increment(self) -> bool:
        return self._ids.auto_increment

    def set_next_id(self, next_id: int) -> None:
        self._ids.set_next(next_id)

    def set_auto_increment(self, enabled: bool) -> None:
        self._ids.set_auto_increment(enabled)

    def update_request_id(self, request: JsonRpcRequest) -> int:
        """Assign *request* a fresh id, e.g. before sending it again."""
        return self._ids.reallocate(request)

    # -- Envelope building ---------------------------------------------

    def _new_request(self, method: str, args: tuple[Any, ...]) -> JsonRpcRequest:
        return JsonRpcRequest(
            method=method,
            params=normalize_params(*args),
            id=self._ids.allocate(),
        )

    @staticmethod
    def _check_request(request: Any) -> None:
        if not isinstance(request, JsonRpcRequest):
            raise TypeError(
                f"expected JsonRpcRequest, got {type(request).__name__}; "
                "use notify() for notifications"
            )

    @staticmethod
    def _check_batch(requests: Iterable[Any]) -> list[BatchElement]:
        items = list(requests)
        if not items:
            raise EmptyBatchError("empty request list")
        for pos, item in enumerate(items):
            if not isinstance(item, (JsonRpcRequest, JsonRpcNotification)):
                raise InvalidBatchElementError(
                    f"batch element {pos} is {type(item).__name__}, "
                    "expected JsonRpcRequest or JsonRpcNotification"
                )
        return items

    def _assign_batch_ids(self, items: list[BatchElement]) -> None:
        base = self._ids.allocate_block(len(items))
        for pos, item in enumerate(items):
            item.jsonrpc = JSONRPC_VERSION
            if isinstance(item, JsonRpcRequest):
                item.id = base + pos

    @staticmethod
    def _expects_reply(items: list[BatchElement]) -> bool:
        return any(isinstance(item, JsonRpcRequest) for item in items)


class RPCClient(_ClientBase):
    """Blocking JSON-RPC 2.0 client.

    Parameters
    ----------
    endpoint : str
        URL every request is POSTed to, e.g. ``http://127.0.0.1:8100/rpc``.
    options : ClientOptions, optional
        Construction settings; keyword arguments override single fields.
    """

    def __init__(
        self,
        endpoint: str,
        options: ClientOptions | None = None,
        **overrides: Any,
    ) -> None:
        super().__init__(endpoint, options, **overrides)
        if self._http is None:
            self._http = httpx.Client(timeout=httpx.Timeout(self.timeout))
            self._owns_http = True

    # -- Lifecycle -----------------------------------------------------

    def set_http_client(self, http_client: httpx.Client) -> None:
        """Swap the underlying httpx client; used from the next call on.

        A client this facade created itself is closed straight away, so do
        not swap while calls are in flight on other threads.
        """
        with self._lock:
            old, owned = self._http, self._owns_http
            self._http, self._owns_http = http_client, False
        if owned:
            old.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "RPCClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- Internal ------------------------------------------------------

    def _post(self, body: bytes, label: str) -> httpx.Response:
        headers = self._request_headers()
        with translate_transport_errors(label, self.endpoint):
            for attempt in retrier(self.max_retries):
                with attempt:
                    resp = self._http.post(self.endpoint, content=body, headers=headers)
        return resp

    # -- Single calls --------------------------------------------------

    def call(self, method: str, *args: Any) -> JsonRpcResponse:
        """Call *method* with normalised *args* and return the response.

        A JSON-RPC error from the server is returned on ``response.error``,
        not raised.
        """
        return self.call_raw(self._new_request(method, args))

    def call_raw(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Send *request* exactly as built: no params normalisation, no new id."""
        self._check_request(request)
        label = f"rpc call {request.method}()"
        log.debug("rpc → %s(id=%s)", request.method, request.id)

        http_response = self._post(encode_body(request), label)
        resp = decode_response(http_response, label, self.allow_unknown_fields)

        log.debug(
            "rpc ← %s(id=%s) status=%d", request.method, resp.id, http_response.status_code
        )
        return resp

    def call_for(
        self, method: str, *args: Any, into: Callable[..., Any] | None = None
    ) -> Any:
        """Call *method* and return its result, converted with *into*.

        Raises ``RpcError`` if the server returned a JSON-RPC error.
        """
        resp = self.call(method, *args)
        if resp.error is not None:
            raise RpcError(resp.error)
        return resp.get_object(into)

    def notify(self, method: str, *args: Any) -> None:
        """Send a notification; the response body is ignored."""
        notification = JsonRpcNotification(method=method, params=normalize_params(*args))
        label = f"rpc notification {method}()"
        log.debug("rpc → %s(notification)", method)
        check_status(self._post(encode_body(notification), label), label)

    # -- Batches -------------------------------------------------------

    def call_batch(self, requests: Iterable[BatchElement]) -> BatchResponses:
        """Send *requests* in one HTTP call.

        Request elements get consecutive ids (offset by their position) and
        ``jsonrpc`` is forced to ``"2.0"``; the objects are updated in place
        so they can be passed to ``BatchResponses.response_for`` afterwards.
        """
        items = self._check_batch(requests)
        self._assign_batch_ids(items)
        return self._do_batch(items)

    def call_batch_raw(self, requests: Iterable[BatchElement]) -> BatchResponses:
        """Like ``call_batch`` but sends ids and versions untouched."""
        return self._do_batch(self._check_batch(requests))

    def _do_batch(self, items: list[BatchElement]) -> BatchResponses:
        log.debug("rpc → batch of %d", len(items))
        http_response = self._post(encode_body(items), _BATCH_LABEL)
        if not self._expects_reply(items):
            check_status(http_response, _BATCH_LABEL)
            return BatchResponses()

        responses = decode_batch(http_response, _BATCH_LABEL, self.allow_unknown_fields)
        log.info(
            "rpc ← batch of %d: %d responses, errors=%s",
            len(items),
            len(responses),
            responses.has_error(),
        )
        return responses


class AsyncRPCClient(_ClientBase):
    """Async JSON-RPC 2.0 client with the same surface as ``RPCClient``.

    Cancellation is native: cancelling the calling task (e.g. with
    ``anyio.fail_after``) aborts the HTTP request.  The id it was given is
    not reused.
    """

    def __init__(
        self,
        endpoint: str,
        options: ClientOptions | None = None,
        **overrides: Any,
    ) -> None:
        super().__init__(endpoint, options, **overrides)
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            self._owns_http = True

    # -- Lifecycle -----------------------------------------------------

    async def set_http_client(self, http_client: httpx.AsyncClient) -> None:
        """Swap the underlying httpx client; await in-flight calls first."""
        with self._lock:
            old, owned = self._http, self._owns_http
            self._http, self._owns_http = http_client, False
        if owned:
            await old.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncRPCClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # -- Internal ------------------------------------------------------

    async def _post(self, body: bytes, label: str) -> httpx.Response:
        headers = self._request_headers()
        with translate_transport_errors(label, self.endpoint):
            async for attempt in async_retrier(self.max_retries):
                with attempt:
                    resp = await self._http.post(self.endpoint, content=body, headers=headers)
        return resp

    # -- Single calls --------------------------------------------------

    async def call(self, method: str, *args: Any) -> JsonRpcResponse:
        return await self.call_raw(self._new_request(method, args))

    async def call_raw(self, request: JsonRpcRequest) -> JsonRpcResponse:
        self._check_request(request)
        label = f"rpc call {request.method}()"
        log.debug("rpc → %s(id=%s)", request.method, request.id)

        http_response = await self._post(encode_body(request), label)
        resp = decode_response(http_response, label, self.allow_unknown_fields)

        log.debug(
            "rpc ← %s(id=%s) status=%d", request.method, resp.id, http_response.status_code
        )
        return resp

    async def call_for(
        self, method: str, *args: Any, into: Callable[..., Any] | None = None
    ) -> Any:
        resp = await self.call(method, *args)
        if resp.error is not None:
            raise RpcError(resp.error)
        return resp.get_object(into)

    async def notify(self, method: str, *args: Any) -> None:
        notification = JsonRpcNotification(method=method, params=normalize_params(*args))
        label = f"rpc notification {method}()"
        log.debug("rpc → %s(notification)", method)
        check_status(await self._post(encode_body(notification), label), label)

    # -- Batches -------------------------------------------------------

    async def call_batch(self, requests: Iterable[BatchElement]) -> BatchResponses:
        items = self._check_batch(requests)
        self._assign_batch_ids(items)
        return await self._do_batch(items)

    async def call_batch_raw(self, requests: Iterable[BatchElement]) -> BatchResponses:
        return await self._do_batch(self._check_batch(requests))

    async def _do_batch(self, items: list[BatchElement]) -> BatchResponses:
        log.debug("rpc → batch of %d", len(items))
        http_response = await self._post(encode_body(items), _BATCH_LABEL)
        if not self._expects_reply(items):
            check_status(http_response, _BATCH_LABEL)
            return BatchResponses()

        responses = decode_batch(http_response, _BATCH_LABEL, self.allow_unknown_fields)
        log.info(
            "rpc ← batch of %d: %d responses, errors=%s",
            len(items),
            len(responses),
            responses.has_error(),
        )
        return responses

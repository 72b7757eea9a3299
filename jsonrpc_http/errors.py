"""Client-side exception hierarchy.

Everything raised by this package derives from ``ClientError``.  A
JSON-RPC error object returned by the server is *not* an exception: it
sits on ``JsonRpcResponse.error`` and only ``call_for`` turns it into
``RpcError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jsonrpc_http.batch import BatchResponses
    from jsonrpc_http.jsonrpc import JsonRpcError, JsonRpcResponse


class ClientError(Exception):
    """Base class for every error raised by the client."""


class TransportError(ClientError):
    """The HTTP exchange itself failed (connect, DNS, TLS, ...).

    No envelope is available.  The underlying httpx exception is chained
    as ``__cause__``.
    """


class RequestTimeout(TransportError):
    """The HTTP exchange timed out."""


class HTTPError(ClientError):
    """The server answered with a status code >= 400.

    ``response`` (single call) or ``responses`` (batch) hold the decoded
    envelope(s) when the body could be decoded, so a protocol-level error
    can still be inspected.  ``body`` always holds the raw bytes.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: bytes = b"",
        response: JsonRpcResponse | None = None,
        responses: BatchResponses | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.response = response
        self.responses = responses
        super().__init__(message)


class DecodeError(ClientError):
    """The response body is not a conformant JSON-RPC envelope."""

    def __init__(self, message: str, body: bytes = b"") -> None:
        self.body = body
        super().__init__(message)


class EmptyBodyError(DecodeError):
    """The response body was empty where an envelope was expected."""


class RpcError(ClientError):
    """Raised by ``call_for`` when the server returns a JSON-RPC error."""

    def __init__(self, error: JsonRpcError) -> None:
        self.error = error
        super().__init__(str(error))

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def data(self) -> Any:
        return self.error.data


class ResultTypeError(ClientError, TypeError):
    """A typed accessor could not interpret the result value."""


class BatchNotFoundError(ClientError, LookupError):
    """No response in a batch carries the requested id."""

    def __init__(self, request_id: int) -> None:
        self.request_id = request_id
        super().__init__(f"no response with id {request_id} in batch")


class InvalidBatchElementError(ClientError, TypeError):
    """A batch element is neither a request nor a notification."""


class EmptyBatchError(ClientError, ValueError):
    """A batch call was given no requests."""

"""Batch response correlation.

Servers may answer a batch in any order, so responses are matched back to
their requests by ``id`` rather than by position.
"""

from __future__ import annotations

from typing import Any, Iterable

from jsonrpc_http.errors import BatchNotFoundError, DecodeError
from jsonrpc_http.jsonrpc import JsonRpcRequest, JsonRpcResponse


class BatchResponses(list):
    """The responses of one batch call, in the order the server sent them."""

    @classmethod
    def from_list(cls, raw: Any, allow_unknown_fields: bool = False) -> "BatchResponses":
        if not isinstance(raw, list):
            raise DecodeError("batch response must be a JSON array")
        return cls(JsonRpcResponse.from_dict(item, allow_unknown_fields) for item in raw)

    def get_by_id(self, request_id: int) -> JsonRpcResponse | None:
        for resp in self:
            if resp.id == request_id:
                return resp
        return None

    def response_for(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Return the response belonging to *request*.

        Raises ``BatchNotFoundError`` if the server sent none.
        """
        if request is None:
            raise TypeError("request must not be None")
        request_id = getattr(request, "id", None)
        if request_id is None:
            raise TypeError(f"{type(request).__name__} has no id to correlate on")
        resp = self.get_by_id(request_id)
        if resp is None:
            raise BatchNotFoundError(request_id)
        return resp

    def as_map(self) -> dict[int | None, JsonRpcResponse]:
        # duplicate ids: the last one wins
        return {resp.id: resp for resp in self}

    def has_error(self) -> bool:
        return any(resp.error is not None for resp in self)

    @property
    def errors(self) -> list[JsonRpcResponse]:
        return [resp for resp in self if resp.error is not None]


def correlate(
    requests: Iterable[Any], responses: BatchResponses
) -> list[tuple[JsonRpcRequest, JsonRpcResponse | None]]:
    """Pair every request of a batch with its response (``None`` if missing).

    Notifications are skipped since the server never answers them.
    """
    by_id = responses.as_map()
    return [
        (req, by_id.get(req.id))
        for req in requests
        if isinstance(req, JsonRpcRequest)
    ]

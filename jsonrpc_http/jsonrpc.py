"""JSON-RPC 2.0 wire-format models.

Pure data, no I/O.  The client builds ``JsonRpcRequest`` /
``JsonRpcNotification`` envelopes, serialises them with ``encode`` and
parses server replies with ``JsonRpcResponse.from_dict``.
"""

from __future__ import annotations

import dataclasses
import json
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from jsonrpc_http.errors import DecodeError, ResultTypeError
from jsonrpc_http.params import params as normalize_params

JSONRPC_VERSION = "2.0"

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

_RESPONSE_FIELDS = frozenset({"jsonrpc", "result", "error", "id"})
_ERROR_FIELDS = frozenset({"code", "message", "data"})


# ── Encoding ─────────────────────────────────────────────────────────
def json_default(obj: Any) -> Any:
    """``default`` hook for ``json.dumps``."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, Decimal):
        return float(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode(value: Any) -> bytes:
    """Serialise *value* to compact UTF-8 JSON.

    Envelopes are encoded through their ``to_dict``; dataclass instances
    nested in params become JSON objects and ``Decimal`` values are sent
    as JSON reals.
    """
    return json.dumps(value, separators=(",", ":"), default=json_default).encode("utf-8")


def _check_fields(raw: dict[str, Any], allowed: frozenset[str], what: str) -> None:
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise DecodeError(f"unknown field(s) in {what}: {', '.join(unknown)}")


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True)
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d

    @classmethod
    def from_dict(cls, raw: Any, allow_unknown_fields: bool = False) -> "JsonRpcError":
        """Parse an error object — raises ``DecodeError`` on bad input."""
        if not isinstance(raw, dict):
            raise DecodeError("'error' must be a JSON object")
        if not allow_unknown_fields:
            _check_fields(raw, _ERROR_FIELDS, "error object")
        code = raw.get("code", 0)
        if not isinstance(code, int) or isinstance(code, bool):
            raise DecodeError("'error.code' must be an integer")
        message = raw.get("message", "")
        if not isinstance(message, str):
            raise DecodeError("'error.message' must be a string")
        return cls(code=code, message=message, data=raw.get("data"))


@dataclass(slots=True)
class JsonRpcRequest:
    """Outbound JSON-RPC 2.0 request.

    ``params`` of ``None`` is left out of the serialised form.  Anything
    else is sent as-is, so build requests with ``new_request`` unless a
    non-standard params shape is wanted on purpose.
    """

    method: str
    params: Any = None
    id: int = 0
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        d["id"] = self.id
        return d


@dataclass(slots=True)
class JsonRpcNotification:
    """Outbound JSON-RPC 2.0 notification; it never carries an ``id``."""

    method: str
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        return d


@dataclass(slots=True)
class JsonRpcResponse:
    """Inbound JSON-RPC 2.0 response.

    Reals in ``result`` are kept as ``Decimal`` exactly as the server sent
    them; the typed accessors convert on request.

    ``result`` and ``error`` should be mutually exclusive, but servers
    that send neither (or both as null) are tolerated.
    """

    id: int | None = None
    result: Any = None
    error: JsonRpcError | None = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        return d

    @classmethod
    def from_dict(cls, raw: Any, allow_unknown_fields: bool = False) -> "JsonRpcResponse":
        """Parse a decoded JSON value — raises ``DecodeError`` on bad input."""
        if not isinstance(raw, dict):
            raise DecodeError("response must be a JSON object")
        if not allow_unknown_fields:
            _check_fields(raw, _RESPONSE_FIELDS, "response")
        resp_id = raw.get("id")
        if resp_id is not None and (not isinstance(resp_id, int) or isinstance(resp_id, bool)):
            raise DecodeError("'id' must be an integer")
        error = raw.get("error")
        return cls(
            id=resp_id,
            result=raw.get("result"),
            error=None if error is None else JsonRpcError.from_dict(error, allow_unknown_fields),
            jsonrpc=raw.get("jsonrpc", JSONRPC_VERSION),
        )

    # -- Typed accessors -----------------------------------------------
    def get_int(self) -> int:
        """Return the result as an ``int``; reals (even ``42.0``) and booleans are refused."""
        value = self.result
        if isinstance(value, bool) or not isinstance(value, int):
            raise ResultTypeError(f"could not parse int from {value!r}")
        return value

    def get_float(self) -> float:
        """Return the result as a ``float``; values out of float range are refused."""
        value = self.result
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ResultTypeError(f"could not parse float from {value!r}")
        try:
            number = float(value)
        except OverflowError as exc:
            raise ResultTypeError(f"could not parse float from {value!r}: out of range") from exc
        if not math.isfinite(number):
            raise ResultTypeError(f"could not parse float from {value!r}: out of range")
        return number

    def get_bool(self) -> bool:
        if not isinstance(self.result, bool):
            raise ResultTypeError(f"could not parse bool from {self.result!r}")
        return self.result

    def get_string(self) -> str:
        if not isinstance(self.result, str):
            raise ResultTypeError(f"could not parse string from {self.result!r}")
        return self.result

    def get_object(self, into: Callable[..., Any] | None = None) -> Any:
        """Return the result, optionally converted.

        With a dataclass type the result must be a JSON object and is used
        as keyword arguments.  Any other callable is applied to the result
        (``get_object(list)``, ``get_object(Decimal)``...).
        """
        if into is None:
            return self.result
        try:
            if isinstance(into, type) and dataclasses.is_dataclass(into):
                if not isinstance(self.result, dict):
                    raise ResultTypeError(
                        f"could not build {into.__name__} from {self.result!r}"
                    )
                return into(**self.result)
            return into(self.result)
        except (TypeError, ValueError) as exc:
            if isinstance(exc, ResultTypeError):
                raise
            raise ResultTypeError(f"could not convert result: {exc}") from exc


# ── Constructors ─────────────────────────────────────────────────────
def new_request(method: str, *args: Any) -> JsonRpcRequest:
    """Build a request with normalised params and the default id."""
    return JsonRpcRequest(method=method, params=normalize_params(*args))


def new_request_with_id(request_id: int, method: str, *args: Any) -> JsonRpcRequest:
    return JsonRpcRequest(method=method, params=normalize_params(*args), id=request_id)


def new_notification(method: str, *args: Any) -> JsonRpcNotification:
    return JsonRpcNotification(method=method, params=normalize_params(*args))

"""jsonrpc_http — JSON-RPC 2.0 client over HTTP."""

from jsonrpc_http.batch import BatchResponses, correlate
from jsonrpc_http.client import AsyncRPCClient, RPCClient
from jsonrpc_http.config import ClientOptions
from jsonrpc_http.errors import (
    BatchNotFoundError,
    ClientError,
    DecodeError,
    EmptyBatchError,
    EmptyBodyError,
    HTTPError,
    InvalidBatchElementError,
    RequestTimeout,
    ResultTypeError,
    RpcError,
    TransportError,
)
from jsonrpc_http.ids import IdAllocator
from jsonrpc_http.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    new_notification,
    new_request,
    new_request_with_id,
)
from jsonrpc_http.params import params

__all__ = [
    "RPCClient",
    "AsyncRPCClient",
    "ClientOptions",
    "IdAllocator",
    "BatchResponses",
    "correlate",
    "params",
    "new_request",
    "new_request_with_id",
    "new_notification",
    "JsonRpcRequest",
    "JsonRpcNotification",
    "JsonRpcResponse",
    "JsonRpcError",
    "JSONRPC_VERSION",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "ClientError",
    "TransportError",
    "RequestTimeout",
    "HTTPError",
    "DecodeError",
    "EmptyBodyError",
    "RpcError",
    "ResultTypeError",
    "BatchNotFoundError",
    "InvalidBatchElementError",
    "EmptyBatchError",
]

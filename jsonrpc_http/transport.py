"""HTTP plumbing between the client facades and httpx.

Builds request headers and bodies, turns httpx failures into
``TransportError`` and classifies HTTP responses into envelopes or
errors.  Both the sync and the async facade go through here.
"""

from __future__ import annotations

import base64
import json
from decimal import Decimal
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import httpx
from tenacity import (
    AsyncRetrying,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jsonrpc_http.batch import BatchResponses
from jsonrpc_http.errors import (
    DecodeError,
    EmptyBodyError,
    HTTPError,
    RequestTimeout,
    TransportError,
)
from jsonrpc_http.jsonrpc import JsonRpcResponse, encode

log = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"

RETRYABLE_ERRORS = (httpx.NetworkError, httpx.TimeoutException)


# ── Request side ─────────────────────────────────────────────────────


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_headers(
    custom_headers: Mapping[str, str] | None = None,
    basic_auth: tuple[str, str] | None = None,
) -> httpx.Headers:
    """Default JSON headers, then basic auth, then custom headers.

    Custom headers are applied last so they can replace any of the others.
    A custom ``Host`` header is sent as the request authority by httpx.
    """
    headers = httpx.Headers({"Content-Type": CONTENT_TYPE, "Accept": CONTENT_TYPE})
    if basic_auth is not None:
        headers["Authorization"] = basic_auth_header(*basic_auth)
    for name, value in (custom_headers or {}).items():
        headers[name] = value
    return headers


def encode_body(envelope: Any) -> bytes:
    """Serialise one envelope or a sequence of envelopes (a batch)."""
    if isinstance(envelope, (list, tuple)):
        return encode([item.to_dict() for item in envelope])
    return encode(envelope.to_dict())


def redact_url(url: str | httpx.URL) -> str:
    """Hide the password of any userinfo in *url*."""
    parsed = httpx.URL(url)
    if parsed.password:
        parsed = parsed.copy_with(username=parsed.username, password="xxxxx")
    return str(parsed)


@contextmanager
def translate_transport_errors(label: str, url: str) -> Iterator[None]:
    """Re-raise httpx transport failures as ``TransportError``."""
    try:
        yield
    except httpx.TimeoutException as exc:
        raise RequestTimeout(f"{label} on {redact_url(url)}: {exc}") from exc
    except httpx.TransportError as exc:
        raise TransportError(f"{label} on {redact_url(url)}: {exc}") from exc


def _log_retry(retry_state: Any) -> None:
    log.warning(
        "transport error, retrying (attempt %d): %s",
        retry_state.attempt_number,
        retry_state.outcome.exception(),
    )


def retrier(max_retries: int) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=0.5, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=_log_retry,
        reraise=True,
    )


def async_retrier(max_retries: int) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=0.5, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=_log_retry,
        reraise=True,
    )


# ── Response side ────────────────────────────────────────────────────


def _prefix(label: str, http_response: httpx.Response) -> str:
    return (
        f"{label} on {redact_url(http_response.request.url)} "
        f"status code: {http_response.status_code}."
    )


def _load(body: bytes) -> Any:
    if not body.strip():
        raise EmptyBodyError("response body is empty", body)
    try:
        raw = json.loads(body, parse_float=Decimal)
    except ValueError as exc:
        raise DecodeError(f"invalid JSON: {exc}", body) from exc
    if raw is None:
        raise EmptyBodyError("rpc response missing", body)
    return raw


def _decode_failed(label: str, http_response: httpx.Response, exc: DecodeError) -> Exception:
    body = http_response.content
    message = f"{_prefix(label, http_response)} could not decode body to rpc response: {exc}"
    if http_response.status_code >= 400:
        return HTTPError(message, http_response.status_code, body)
    return type(exc)(message, body)


def decode_response(
    http_response: httpx.Response,
    label: str,
    allow_unknown_fields: bool = False,
) -> JsonRpcResponse:
    """Decode a single-call HTTP response.

    Raises ``HTTPError`` for status >= 400 (with the decoded envelope
    attached when there is one) and ``DecodeError`` / ``EmptyBodyError``
    for bodies that are not a response object.
    """
    try:
        resp = JsonRpcResponse.from_dict(_load(http_response.content), allow_unknown_fields)
    except DecodeError as exc:
        raise _decode_failed(label, http_response, exc) from exc

    status = http_response.status_code
    if status >= 400:
        detail = (
            f"rpc response error: {resp.error}"
            if resp.error is not None
            else "no rpc error available"
        )
        log.warning("%s returned HTTP %d", label, status)
        raise HTTPError(
            f"{_prefix(label, http_response)} {detail}",
            status,
            http_response.content,
            response=resp,
        )
    return resp


def decode_batch(
    http_response: httpx.Response,
    label: str,
    allow_unknown_fields: bool = False,
) -> BatchResponses:
    """Decode a batch HTTP response; same classification as ``decode_response``."""
    try:
        responses = BatchResponses.from_list(_load(http_response.content), allow_unknown_fields)
        if not responses:
            raise EmptyBodyError("rpc response missing", http_response.content)
    except DecodeError as exc:
        raise _decode_failed(label, http_response, exc) from exc

    status = http_response.status_code
    if status >= 400:
        log.warning("%s returned HTTP %d", label, status)
        raise HTTPError(
            f"{_prefix(label, http_response)} check rpc responses for potential rpc error",
            status,
            http_response.content,
            responses=responses,
        )
    return responses


def check_status(http_response: httpx.Response, label: str) -> None:
    """Raise ``HTTPError`` for status >= 400 without looking at the body."""
    if http_response.status_code >= 400:
        log.warning("%s returned HTTP %d", label, http_response.status_code)
        raise HTTPError(
            f"{_prefix(label, http_response)} request rejected",
            http_response.status_code,
            http_response.content,
        )

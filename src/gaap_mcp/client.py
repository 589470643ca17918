import logging
from collections.abc import Mapping
from time import perf_counter
from typing import Any

import httpx

from gaap_mcp.canonical import serialize_request
from gaap_mcp.config import DEFAULT_MCP_URL, Credentials
from gaap_mcp.crypto import build_auth_headers, sign_request
from gaap_mcp.types import ResponseMeta, ToolRequest, ToolResponse

logger = logging.getLogger("gaap.client")

NETWORK_ERROR = "NETWORK_ERROR"


def build_tool_request(
    *,
    tool: str,
    tenant_id: str,
    params: Mapping[str, Any] | None = None,
    correlation_id: str | None = None,
    meta: Mapping[str, Any] | None = None,
) -> ToolRequest:
    request: ToolRequest = {
        "tool": tool,
        "tenant_context": {"tenant_id": tenant_id},
        "params": dict(params or {}),
    }
    if correlation_id:
        request["tenant_context"]["correlation_id"] = correlation_id
    if meta is not None:
        request["meta"] = dict(meta)
    return request


def placeholder_meta() -> ResponseMeta:
    return {
        "request_id": "unknown",
        "execution_ms": 0,
        "gaap_layer": "MCP",
        "camdl_anchored": False,
    }


def failure_response(code: str, message: str, *, recoverable: bool) -> ToolResponse:
    return {
        "success": False,
        "error": {"code": code, "message": message, "recoverable": recoverable},
        "meta": placeholder_meta(),
    }


def network_failure(exc: httpx.TransportError) -> ToolResponse:
    return failure_response(NETWORK_ERROR, str(exc) or "Unknown network error", recoverable=True)


def http_failure(response: httpx.Response) -> ToolResponse:
    status = response.status_code
    return failure_response(
        f"HTTP_{status}",
        f"HTTP error: {status} {response.reason_phrase}",
        recoverable=status >= 500,
    )


def _prepare(credentials: Credentials, request: ToolRequest) -> tuple[bytes, dict[str, str]]:
    # The bytes that are signed must be the bytes that are sent.
    body = serialize_request(request).encode("utf-8")
    signed = sign_request(credentials, body)
    return body, build_auth_headers(credentials, signed)


def _log_outcome(
    request: ToolRequest, outcome: ToolResponse, *, endpoint: str, start: float, status: int | None
) -> None:
    error: Mapping[str, Any] = outcome.get("error") or {}
    meta: Mapping[str, Any] = outcome.get("meta") or {}
    logger.info(
        "gaap_tool_invoked",
        extra={
            "event_name": "gaap_tool_invoked",
            "tool": request["tool"],
            "tenant_id": request["tenant_context"]["tenant_id"],
            "correlation_id": request["tenant_context"].get("correlation_id"),
            "request_id": meta.get("request_id"),
            "endpoint": endpoint,
            "status": status,
            "error_code": error.get("code"),
            "recoverable": error.get("recoverable"),
            "latency_ms": round((perf_counter() - start) * 1000, 2),
        },
    )


def _normalize(response: httpx.Response) -> ToolResponse:
    if not response.is_success:
        return http_failure(response)
    return response.json()


class GaapClient:
    def __init__(
        self,
        *,
        credentials: Credentials,
        endpoint_url: str = DEFAULT_MCP_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._endpoint_url = endpoint_url
        self._timeout = timeout
        self._transport = transport

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def invoke_tool(self, request: ToolRequest) -> ToolResponse:
        body, headers = _prepare(self._credentials, request)
        start = perf_counter()
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._endpoint_url, headers=headers, content=body)
                outcome = _normalize(response)
        except httpx.TransportError as exc:
            outcome = network_failure(exc)
            _log_outcome(request, outcome, endpoint=self._endpoint_url, start=start, status=None)
            return outcome

        _log_outcome(
            request, outcome, endpoint=self._endpoint_url, start=start, status=response.status_code
        )
        return outcome


class AsyncGaapClient:
    def __init__(
        self,
        *,
        credentials: Credentials,
        endpoint_url: str = DEFAULT_MCP_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._endpoint_url = endpoint_url
        self._timeout = timeout
        self._transport = transport

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    async def invoke_tool(self, request: ToolRequest) -> ToolResponse:
        body, headers = _prepare(self._credentials, request)
        start = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint_url, headers=headers, content=body)
                outcome = _normalize(response)
        except httpx.TransportError as exc:
            outcome = network_failure(exc)
            _log_outcome(request, outcome, endpoint=self._endpoint_url, start=start, status=None)
            return outcome

        _log_outcome(
            request, outcome, endpoint=self._endpoint_url, start=start, status=response.status_code
        )
        return outcome

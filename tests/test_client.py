import asyncio
import hashlib
import json
import logging
from typing import Any

import httpx
import pytest

from gaap_mcp.canonical import build_canonical_string
from gaap_mcp.client import AsyncGaapClient, GaapClient, build_tool_request
from gaap_mcp.config import DEFAULT_MCP_URL, Credentials
from gaap_mcp.crypto import verify_signature
from gaap_mcp.types import ToolRequest


def _request() -> ToolRequest:
    return build_tool_request(
        tool="gaap_khqr_generate",
        tenant_id="t1",
        params={"amount": 5, "merchant_name": "Shop", "account_id": "shop@aba"},
        correlation_id="corr-1",
        meta={"source_workflow": "tests"},
    )


def _success_body() -> dict[str, Any]:
    return {
        "success": True,
        "result": {
            "data": {"qr_string": "000201...", "md5": "abc"},
            "audit_event_id": "evt-1",
            "correlation_id": "corr-1",
        },
        "meta": {
            "request_id": "req-42",
            "execution_ms": 87,
            "gaap_layer": "L3",
            "camdl_anchored": False,
        },
    }


def _sync_client(credentials: Credentials, handler: Any, **kwargs: Any) -> GaapClient:
    return GaapClient(credentials=credentials, transport=httpx.MockTransport(handler), **kwargs)


def _assert_placeholder_meta(meta: dict[str, Any]) -> None:
    assert meta == {
        "request_id": "unknown",
        "execution_ms": 0,
        "gaap_layer": "MCP",
        "camdl_anchored": False,
    }


def test_build_tool_request_shape() -> None:
    request = build_tool_request(tool="gaap_policy_evaluate", tenant_id="t1", params={"amount": 1})
    assert request == {
        "tool": "gaap_policy_evaluate",
        "tenant_context": {"tenant_id": "t1"},
        "params": {"amount": 1},
    }

    full = _request()
    assert full["tenant_context"] == {"tenant_id": "t1", "correlation_id": "corr-1"}
    assert full["meta"] == {"source_workflow": "tests"}


def test_sync_client_signs_the_transmitted_body(credentials: Credentials) -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["method"] = request.method
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(status_code=200, json=_success_body())

    result = _sync_client(credentials, handler).invoke_tool(_request())

    assert result == _success_body()
    assert seen["url"] == DEFAULT_MCP_URL
    assert seen["method"] == "POST"

    headers = seen["headers"]
    assert headers["Content-Type"] == "application/json"
    assert headers["X-Tenant-ID"] == "t1"
    assert headers["X-API-Key"] == "key-123"

    body: bytes = seen["body"]
    assert json.loads(body) == _request()
    canonical = build_canonical_string(
        headers["X-Timestamp"], headers["X-Nonce"], hashlib.sha256(body).hexdigest()
    )
    assert verify_signature(secret="s3cr3t", canonical=canonical, signature=headers["X-Signature"])


def test_endpoint_override_keeps_fixed_signed_path(credentials: Credentials) -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(status_code=200, json=_success_body())

    client = _sync_client(credentials, handler, endpoint_url="http://gaap.test/staging/invoke")
    client.invoke_tool(_request())

    assert seen["path"] == "/staging/invoke"
    headers = seen["headers"]
    canonical = (
        f"POST|/webhook/gaap-mcp/invoke|{headers['X-Timestamp']}|{headers['X-Nonce']}|"
        f"{hashlib.sha256(seen['body']).hexdigest()}"
    )
    assert verify_signature(secret="s3cr3t", canonical=canonical, signature=headers["X-Signature"])


def test_each_call_gets_a_fresh_nonce(credentials: Credentials) -> None:
    nonces: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        nonces.append(request.headers["X-Nonce"])
        return httpx.Response(status_code=200, json=_success_body())

    client = _sync_client(credentials, handler)
    client.invoke_tool(_request())
    client.invoke_tool(_request())

    assert len(nonces) == 2
    assert nonces[0] != nonces[1]


def test_connection_failure_becomes_network_error(credentials: Credentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    result = _sync_client(credentials, handler).invoke_tool(_request())

    assert result["success"] is False
    assert "result" not in result
    assert result["error"] == {
        "code": "NETWORK_ERROR",
        "message": "Connection refused",
        "recoverable": True,
    }
    _assert_placeholder_meta(dict(result["meta"]))


def test_timeout_becomes_network_error(credentials: Credentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = _sync_client(credentials, handler).invoke_tool(_request())

    assert result["error"]["code"] == "NETWORK_ERROR"
    assert result["error"]["recoverable"] is True


def test_empty_transport_message_falls_back(credentials: Credentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("", request=request)

    result = _sync_client(credentials, handler).invoke_tool(_request())

    assert result["error"]["message"] == "Unknown network error"


@pytest.mark.parametrize(
    ("status", "reason", "recoverable"),
    [
        (400, "Bad Request", False),
        (401, "Unauthorized", False),
        (404, "Not Found", False),
        (500, "Internal Server Error", True),
        (503, "Service Unavailable", True),
    ],
)
def test_http_error_status_mapping(
    credentials: Credentials, status: int, reason: str, recoverable: bool
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=status, json={"detail": "ignored"})

    result = _sync_client(credentials, handler).invoke_tool(_request())

    assert result["success"] is False
    assert "result" not in result
    assert result["error"] == {
        "code": f"HTTP_{status}",
        "message": f"HTTP error: {status} {reason}",
        "recoverable": recoverable,
    }
    _assert_placeholder_meta(dict(result["meta"]))


def test_remote_error_passes_through_unchanged(credentials: Credentials) -> None:
    remote = {
        "success": False,
        "error": {
            "code": "VALIDATION_FAILED",
            "message": "merchant_name exceeds 25 characters",
            "recoverable": False,
            "suggested_action": "Shorten merchant_name",
        },
        "meta": {
            "request_id": "req-7",
            "execution_ms": 3,
            "gaap_layer": "L3",
            "camdl_anchored": False,
        },
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json=remote)

    assert _sync_client(credentials, handler).invoke_tool(_request()) == remote


def test_non_json_success_body_is_a_hard_fault(credentials: Credentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, text="<html>gateway</html>")

    with pytest.raises(ValueError):
        _sync_client(credentials, handler).invoke_tool(_request())


def test_invocation_is_logged_without_secrets(
    credentials: Credentials, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="gaap.client")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=503)

    _sync_client(credentials, handler).invoke_tool(_request())

    records = [r for r in caplog.records if getattr(r, "event_name", None) == "gaap_tool_invoked"]
    assert len(records) == 1
    record = records[0]
    assert getattr(record, "tool", None) == "gaap_khqr_generate"
    assert getattr(record, "correlation_id", None) == "corr-1"
    assert getattr(record, "status", None) == 503
    assert getattr(record, "error_code", None) == "HTTP_503"
    assert getattr(record, "latency_ms", None) is not None
    for value in vars(record).values():
        assert "s3cr3t" not in str(value)
        assert "key-123" not in str(value)


def test_async_client_success_and_network_error(credentials: Credentials) -> None:
    def ok_handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-Tenant-ID"] == "t1"
        return httpx.Response(status_code=200, json=_success_body())

    def failing_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)

    ok = AsyncGaapClient(credentials=credentials, transport=httpx.MockTransport(ok_handler))
    failing = AsyncGaapClient(
        credentials=credentials, transport=httpx.MockTransport(failing_handler)
    )

    async def run() -> None:
        result = await ok.invoke_tool(_request())
        assert result == _success_body()

        failure = await failing.invoke_tool(_request())
        assert failure["error"]["code"] == "NETWORK_ERROR"
        assert failure["error"]["message"] == "Name or service not known"
        assert "result" not in failure
        _assert_placeholder_meta(dict(failure["meta"]))

    asyncio.run(run())


def test_async_client_http_error(credentials: Credentials) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=400)

    client = AsyncGaapClient(credentials=credentials, transport=httpx.MockTransport(handler))

    async def run() -> None:
        result = await client.invoke_tool(_request())
        assert result["error"]["code"] == "HTTP_400"
        assert result["error"]["recoverable"] is False

    asyncio.run(run())

from typing import Any, NotRequired, TypedDict


class TenantContext(TypedDict):
    tenant_id: str
    correlation_id: NotRequired[str]


class ToolRequest(TypedDict):
    tool: str
    tenant_context: TenantContext
    params: dict[str, Any]
    meta: NotRequired[dict[str, Any]]


class ToolResult(TypedDict):
    data: dict[str, Any]
    audit_event_id: NotRequired[str]
    correlation_id: NotRequired[str]


class ToolError(TypedDict):
    code: str
    message: str
    recoverable: bool
    suggested_action: NotRequired[str]


class ResponseMeta(TypedDict):
    request_id: str
    execution_ms: float
    gaap_layer: str
    camdl_anchored: bool


class ToolResponse(TypedDict):
    success: bool
    result: NotRequired[ToolResult]
    error: NotRequired[ToolError]
    meta: ResponseMeta


class SignedRequest(TypedDict):
    timestamp: str
    nonce: str
    body_sha256: str
    canonical: str
    signature: str


class ToolDefinition(TypedDict):
    name: str
    description: str
    gaap_layer: str
    input_schema: dict[str, Any]

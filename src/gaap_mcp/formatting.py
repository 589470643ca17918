import json

from gaap_mcp.types import ToolResponse


def format_error(response: ToolResponse) -> str:
    error = response.get("error")
    if not error:
        return "Unknown error occurred"

    text = f"{error['code']}: {error['message']}"
    suggested_action = error.get("suggested_action")
    if suggested_action:
        text += f" ({suggested_action})"
    return text


def format_result(tool_name: str, response: ToolResponse, correlation_id: str) -> str:
    meta = response["meta"]
    result = response.get("result") or {}

    lines = [
        f"Tool: {tool_name}",
        f"Layer: {meta['gaap_layer']}",
        f"Execution: {meta['execution_ms']}ms",
    ]
    if meta.get("camdl_anchored"):
        lines.append("CamDL Anchored: Yes")
    if result.get("audit_event_id"):
        lines.append(f"Audit Event ID: {result['audit_event_id']}")
    lines.append(f"Correlation ID: {result.get('correlation_id') or correlation_id}")
    lines.append("Result:")
    lines.append(json.dumps(result.get("data") or result, indent=2, ensure_ascii=False))
    return "\n".join(lines)

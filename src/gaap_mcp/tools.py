"""Static catalog of the GaaP tools surfaced to MCP clients.

The remote service owns the behavior of every tool; these entries only
describe names and parameter schemas for discovery. Nothing here is sent
over the wire except the tool name.
"""

from collections.abc import Mapping
from typing import Any

from gaap_mcp.errors import UnknownToolError
from gaap_mcp.types import ToolDefinition

_CORRELATION_ID = {
    "type": "string",
    "description": "Correlation ID for tracing related events",
}
_CURRENCY = {
    "type": "string",
    "enum": ["USD", "KHR"],
    "description": "Currency code (USD or KHR). Default: USD",
}

AUDIT_LOG_EVENT: ToolDefinition = {
    "name": "gaap_audit_log_event",
    "gaap_layer": "AUDIT",
    "description": (
        "Log a compliance event with optional CamDL blockchain anchoring. "
        "Use for audit trails, state changes, and regulatory compliance."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "event_type": {
                "type": "string",
                "description": (
                    "Event type (e.g., order.created, payment.completed, identity.verified)"
                ),
            },
            "entity_type": {
                "type": "string",
                "description": "Entity type being audited (e.g., order, payment, user)",
            },
            "entity_id": {
                "type": "string",
                "description": "Unique identifier of the entity",
            },
            "previous_state": {
                "type": "object",
                "description": "State of the entity before the change (optional)",
            },
            "new_state": {
                "type": "object",
                "description": "State of the entity after the change",
            },
            "anchor_to_camdl": {
                "type": "boolean",
                "description": "Whether to anchor this event to CamDL blockchain (default: false)",
            },
            "correlation_id": _CORRELATION_ID,
            "metadata": {
                "type": "object",
                "description": "Additional metadata to store with the event",
            },
        },
        "required": ["event_type", "entity_type", "entity_id"],
    },
}

KHQR_GENERATE: ToolDefinition = {
    "name": "gaap_khqr_generate",
    "gaap_layer": "L3",
    "description": (
        "Generate a Cambodia KHQR payment QR code via Bakong. "
        "Returns QR data string and MD5 hash for payment verification."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "amount": {
                "type": "number",
                "description": "Payment amount. Use 0 for static QR (customer enters amount)",
            },
            "currency": _CURRENCY,
            "merchant_name": {
                "type": "string",
                "description": "Merchant or recipient name (max 25 characters)",
            },
            "merchant_city": {
                "type": "string",
                "description": "Merchant city. Default: Phnom Penh",
            },
            "account_id": {
                "type": "string",
                "description": (
                    "Bakong account ID in format username@bankcode (e.g., merchant@aba)"
                ),
            },
            "merchant_id": {
                "type": "string",
                "description": "Merchant ID from acquiring bank (required for merchant QR)",
            },
            "qr_type": {
                "type": "string",
                "enum": ["individual", "merchant"],
                "description": (
                    "QR type: individual (personal) or merchant (business). Default: merchant"
                ),
            },
            "bill_number": {
                "type": "string",
                "description": "Bill/invoice reference number (optional)",
            },
            "store_label": {
                "type": "string",
                "description": "Store or branch label (optional)",
            },
            "terminal_label": {
                "type": "string",
                "description": "Terminal/POS label (optional)",
            },
            "expiry_minutes": {
                "type": "number",
                "description": "QR expiry time in minutes. Default: 15",
            },
            "correlation_id": _CORRELATION_ID,
        },
        "required": ["amount", "merchant_name", "account_id"],
    },
}

KHQR_VERIFY_SETTLEMENT: ToolDefinition = {
    "name": "gaap_khqr_verify_settlement",
    "gaap_layer": "L3",
    "description": (
        "Verify KHQR payment settlement status via Bakong. Use after generating a KHQR "
        "code to check if payment has been completed. Returns settlement confirmation "
        "with transaction details."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "md5": {
                "type": "string",
                "description": "MD5 hash returned from gaap_khqr_generate",
            },
            "txn_ref": {
                "type": "string",
                "description": "Transaction reference returned from gaap_khqr_generate",
            },
            "timeout_ms": {
                "type": "number",
                "description": (
                    "Timeout in milliseconds for the verification request. Default: 5000"
                ),
            },
            "correlation_id": _CORRELATION_ID,
        },
        "required": ["md5", "txn_ref"],
    },
}

POLICY_EVALUATE: ToolDefinition = {
    "name": "gaap_policy_evaluate",
    "gaap_layer": "L2",
    "description": (
        "Evaluate CamDX policy decision based on transaction amount and identity level. "
        "Returns whether transaction is allowed, requires identity verification, or is "
        "blocked. Use before order creation to check compliance requirements."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "amount": {
                "type": "number",
                "description": "Transaction amount to evaluate",
            },
            "currency": _CURRENCY,
            "identity_level": {
                "type": "string",
                "enum": ["anonymous", "basic", "verified", "high_assurance"],
                "description": (
                    "Current identity verification level of the user. Default: anonymous"
                ),
            },
            "entity_type": {
                "type": "string",
                "description": "Type of transaction entity (e.g., order, payment, transfer)",
            },
            "entity_id": {
                "type": "string",
                "description": "Optional entity identifier for audit correlation",
            },
            "correlation_id": _CORRELATION_ID,
        },
        "required": ["amount"],
    },
}

POLICY_PUBLISH_INTENT: ToolDefinition = {
    "name": "gaap_policy_publish_intent",
    "gaap_layer": "L2",
    "description": (
        "Publish payment intent to CamDX X-Road for regulatory compliance. Required for "
        "AML/CFT monitoring. Call after order confirmation to register the transaction "
        "with Cambodia's interoperability platform."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "order_id": {
                "type": "string",
                "description": "Unique order identifier",
            },
            "merchant_id": {
                "type": "string",
                "description": "Merchant identifier (e.g., MER-2025-001)",
            },
            "amount": {
                "type": "number",
                "description": "Transaction amount",
            },
            "currency": {
                "type": "string",
                "description": "Currency code: USD or KHR. Default: USD",
            },
            "amount_band": {
                "type": "string",
                "description": (
                    "Amount band from policy evaluation: A (<=$10), B ($10-50), "
                    "C ($50-500), D (>$500)"
                ),
            },
            "identity_level": {
                "type": "string",
                "description": (
                    "Customer identity level: anonymous, basic, verified, or high_assurance"
                ),
            },
            "items": {
                "type": "array",
                "description": "Optional array of order items with name, quantity, and unit_price",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "quantity": {"type": "number"},
                        "unit_price": {"type": "number"},
                    },
                },
            },
            "customer_id": {
                "type": "string",
                "description": "Optional customer identifier for tracking",
            },
            "camdigi_key_id": {
                "type": "string",
                "description": "Optional CamDigiKey ID if customer is verified",
            },
            "correlation_id": _CORRELATION_ID,
        },
        "required": ["order_id", "merchant_id", "amount"],
    },
}

TOOL_CATALOG: dict[str, ToolDefinition] = {
    tool["name"]: tool
    for tool in (
        AUDIT_LOG_EVENT,
        KHQR_GENERATE,
        KHQR_VERIFY_SETTLEMENT,
        POLICY_EVALUATE,
        POLICY_PUBLISH_INTENT,
    )
}


def tool_names() -> list[str]:
    return list(TOOL_CATALOG)


def get_tool(name: str) -> ToolDefinition:
    try:
        return TOOL_CATALOG[name]
    except KeyError:
        raise UnknownToolError(name, tool_names()) from None


def missing_required_params(name: str, arguments: Mapping[str, Any] | None) -> list[str]:
    """Return required parameters that are absent or null, in schema order."""
    required: list[str] = get_tool(name)["input_schema"].get("required", [])
    arguments = arguments or {}
    return [param for param in required if arguments.get(param) is None]

from gaap_mcp.canonical import build_canonical_string, serialize_request
from gaap_mcp.client import AsyncGaapClient, GaapClient, build_tool_request
from gaap_mcp.config import Credentials, Settings, load_settings
from gaap_mcp.crypto import (
    generate_auth_headers,
    hmac_sha256_hex,
    sha256_hex,
    sign_request,
    verify_signature,
)
from gaap_mcp.errors import (
    GaapError,
    MissingConfigurationError,
    ToolCallError,
    UnknownToolError,
)
from gaap_mcp.tools import TOOL_CATALOG

__all__ = [
    "serialize_request",
    "build_canonical_string",
    "sha256_hex",
    "hmac_sha256_hex",
    "sign_request",
    "generate_auth_headers",
    "verify_signature",
    "Credentials",
    "Settings",
    "load_settings",
    "build_tool_request",
    "GaapClient",
    "AsyncGaapClient",
    "TOOL_CATALOG",
    "GaapError",
    "MissingConfigurationError",
    "UnknownToolError",
    "ToolCallError",
]

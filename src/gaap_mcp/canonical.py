import json
from collections.abc import Mapping
from typing import Any

SIGNED_METHOD = "POST"
# The remote verifier always expects this path, whatever URL the request is sent to.
SIGNED_PATH = "/webhook/gaap-mcp/invoke"
SEPARATOR = "|"


def serialize_request(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def build_canonical_string(timestamp: str, nonce: str, body_sha256: str) -> str:
    return SEPARATOR.join((SIGNED_METHOD, SIGNED_PATH, timestamp, nonce, body_sha256))

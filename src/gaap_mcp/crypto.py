import hashlib
import hmac
import time
import uuid

from gaap_mcp.canonical import build_canonical_string
from gaap_mcp.config import Credentials
from gaap_mcp.types import SignedRequest


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def sha256_hex(message: str | bytes) -> str:
    return hashlib.sha256(_to_bytes(message)).hexdigest()


def hmac_sha256_hex(secret: str | bytes, message: str | bytes) -> str:
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).hexdigest()


def current_timestamp_ms() -> str:
    return str(time.time_ns() // 1_000_000)


def generate_nonce() -> str:
    return str(uuid.uuid4())


def sign_request(
    credentials: Credentials,
    body: str | bytes,
    *,
    timestamp: str | None = None,
    nonce: str | None = None,
) -> SignedRequest:
    timestamp = timestamp if timestamp is not None else current_timestamp_ms()
    nonce = nonce if nonce is not None else generate_nonce()
    body_sha256 = sha256_hex(body)
    canonical = build_canonical_string(timestamp, nonce, body_sha256)

    return {
        "timestamp": timestamp,
        "nonce": nonce,
        "body_sha256": body_sha256,
        "canonical": canonical,
        "signature": hmac_sha256_hex(credentials.webhook_secret, canonical),
    }


def build_auth_headers(credentials: Credentials, signed: SignedRequest) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Tenant-ID": credentials.tenant_id,
        "X-API-Key": credentials.api_key,
        "X-Timestamp": signed["timestamp"],
        "X-Nonce": signed["nonce"],
        "X-Signature": signed["signature"],
    }


def generate_auth_headers(
    credentials: Credentials,
    body: str | bytes,
    *,
    timestamp: str | None = None,
    nonce: str | None = None,
) -> dict[str, str]:
    signed = sign_request(credentials, body, timestamp=timestamp, nonce=nonce)
    return build_auth_headers(credentials, signed)


def verify_signature(*, secret: str | bytes, canonical: str, signature: str) -> bool:
    expected = hmac_sha256_hex(secret, canonical)
    return hmac.compare_digest(expected.encode("ascii"), signature.lower().encode("utf-8"))

"""GitHub-style webhook request validation.

The sender signs the raw body with HMAC-SHA1 and sends the hex digest as
`X-Hub-Signature: sha1=<hex>`. The sender offers no other hash.
"""
import base64
import binascii
import hashlib
import hmac
from http import HTTPStatus

ACCEPTED_METHOD = "POST"
JSON_CONTENT_TYPE = "application/json"
SIGNATURE_HEADER = "x-hub-signature"
SIGNATURE_PREFIX = "sha1="


class Rejected(Exception):
    """Request refused; `status` is what the client sees, `reason` is for logs."""

    def __init__(self, status: HTTPStatus, reason: str):
        super().__init__(reason)
        self.status = status
        self.reason = reason


def canonical_headers(headers) -> dict:
    # Header names are case-insensitive; on duplicates the last one wins.
    return {k.lower(): v for k, v in (headers or {}).items()}


def compute_signature(body: bytes, secret: bytes) -> str:
    return SIGNATURE_PREFIX + hmac.new(secret, body, hashlib.sha1).hexdigest()


def parse_signature(value) -> bytes:
    """Return the alleged digest from an `X-Hub-Signature` value."""
    if not value or not value.startswith(SIGNATURE_PREFIX):
        raise Rejected(HTTPStatus.BAD_REQUEST, "missing or malformed signature header")
    try:
        # unhexlify, unlike bytes.fromhex, rejects embedded whitespace
        return binascii.unhexlify(value[len(SIGNATURE_PREFIX):])
    except ValueError:
        raise Rejected(HTTPStatus.BAD_REQUEST, "signature digest is not hex") from None


def read_body(body, base64_encoded: bool = False) -> bytes:
    """Raw body bytes; they must be UTF-8 since queue messages are text."""
    if body is None:
        body = ""
    try:
        if base64_encoded:
            raw = base64.b64decode(body, validate=True)
        elif isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = bytes(body)
    except (binascii.Error, ValueError, TypeError):
        raise Rejected(HTTPStatus.BAD_REQUEST, "undecodable body") from None
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        raise Rejected(HTTPStatus.BAD_REQUEST, "body is not utf-8") from None
    return raw


def validate(method: str, headers, body, secret: bytes, base64_encoded: bool = False) -> bytes:
    """Check one inbound webhook and return its raw body bytes.

    Checks run in a fixed order and the first failure decides the status:
    method (405), content type (415), signature header (400), body (400),
    signature match (401).
    """
    if method != ACCEPTED_METHOD:
        raise Rejected(HTTPStatus.METHOD_NOT_ALLOWED, f"method {method!r} not allowed")

    h = canonical_headers(headers)

    if h.get("content-type") != JSON_CONTENT_TYPE:
        raise Rejected(HTTPStatus.UNSUPPORTED_MEDIA_TYPE, "content type is not application/json")

    alleged = parse_signature(h.get(SIGNATURE_HEADER))
    raw = read_body(body, base64_encoded)

    expected = hmac.new(secret, raw, hashlib.sha1).digest()
    if not hmac.compare_digest(expected, alleged):
        raise Rejected(HTTPStatus.UNAUTHORIZED, "bad signature")

    return raw

import base64
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "Typeform-Signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: bytes, payload: bytes) -> str:
    digest = hmac.new(secret, payload, hashlib.sha256).digest()
    return SIGNATURE_PREFIX + base64.b64encode(digest).decode("ascii")


def verify_signature(secret: bytes, payload: Optional[bytes], signature: Optional[str]) -> bool:
    """
    Check a Typeform webhook signature.

    Returns False for a missing header, an empty body, or a mismatch. The
    comparison runs in constant time.
    """
    if not signature or not payload:
        return False

    expected = compute_signature(secret, payload)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

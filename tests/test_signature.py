import base64
import hashlib
import hmac
import json

import pytest

from receipt_bridge.webhooks.security import compute_signature, verify_signature


BODY = json.dumps({
    "form_response": {
        "form_id": "F1",
        "token": "T1",
        "answers": [
            {"type": "email", "email": "a@b.com"},
            {"type": "payment", "payment": {"success": True}},
        ],
    }
}).encode("utf-8")


def test_compute_signature_format():
    """Signature is sha256= followed by the base64 HMAC digest"""
    expected = base64.b64encode(hmac.new(b"abc", BODY, hashlib.sha256).digest()).decode()

    assert compute_signature(b"abc", BODY) == "sha256=" + expected


@pytest.mark.parametrize("secret,body", [
    (b"abc", BODY),
    (b"another secret", b"{}"),
    (b"\x00\xff binary", "unicode ✓".encode("utf-8")),
])
def test_verify_accepts_own_signature(secret, body):
    assert verify_signature(secret, body, compute_signature(secret, body)) is True


def test_verify_rejects_tampered_body():
    signature = compute_signature(b"abc", BODY)
    tampered = BODY.replace(b"a@b.com", b"x@b.com")

    assert verify_signature(b"abc", tampered, signature) is False


def test_verify_rejects_wrong_secret():
    signature = compute_signature(b"abc", BODY)

    assert verify_signature(b"abd", BODY, signature) is False


@pytest.mark.parametrize("signature", [None, ""])
def test_verify_rejects_missing_signature(signature):
    assert verify_signature(b"abc", BODY, signature) is False


@pytest.mark.parametrize("body", [None, b""])
def test_verify_rejects_missing_body(body):
    assert verify_signature(b"abc", body, compute_signature(b"abc", b"x")) is False


def test_verify_requires_algorithm_prefix():
    bare = compute_signature(b"abc", BODY)[len("sha256="):]

    assert verify_signature(b"abc", BODY, bare) is False


def test_verify_handles_non_ascii_claim():
    assert verify_signature(b"abc", BODY, "sha256=ünïcode") is False

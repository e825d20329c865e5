import json
from unittest.mock import Mock

import pytest
from faker import Faker

from receipt_bridge import create_app
from receipt_bridge.billing.stripe_gateway import (
    FORM_ID_METADATA_KEY,
    RESPONSE_TOKEN_METADATA_KEY,
    RemoteCharge,
)
from receipt_bridge.config import Settings
from receipt_bridge.webhooks.security import SIGNATURE_HEADER, compute_signature

# Initialize Faker for generating test data
fake = Faker()

WEBHOOK_SECRET = b"abc"
STRIPE_KEY = "sk_test_do_not_log_me_4242"


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "payment: mark test as payment-related"
    )


def make_charge(charge_id, form_id, response_token, receipt_email=None):
    return RemoteCharge(
        charge_id=charge_id,
        metadata={
            FORM_ID_METADATA_KEY: form_id,
            RESPONSE_TOKEN_METADATA_KEY: response_token,
        },
        receipt_email=receipt_email,
    )


def make_payload(form_id="F1", token="T1", email="a@b.com", success=True, answers=None):
    if answers is None:
        answers = [
            {"type": "email", "email": email},
            {"type": "payment", "payment": {"success": success}},
        ]
    return {
        "form_response": {
            "form_id": form_id,
            "token": token,
            "answers": answers,
        }
    }


@pytest.fixture
def settings():
    """Settings with signature verification on"""
    return Settings(
        listen_host="127.0.0.1",
        listen_port=8080,
        verify_signature=True,
        webhook_secret=WEBHOOK_SECRET,
        stripe_api_key=STRIPE_KEY,
    )


@pytest.fixture
def gateway():
    """Charge gateway double; one matching charge for F1/T1 by default"""
    gateway = Mock()
    gateway.list_recent_charges.return_value = [make_charge("ch_1", "F1", "T1")]
    gateway.update_charge.return_value = make_charge("ch_1", "F1", "T1", "a@b.com")
    return gateway


@pytest.fixture
def app(settings, gateway):
    app = create_app(settings, gateway=gateway)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def unverified_app(settings, gateway):
    """App started with VERIFY_SIGNATURE=false"""
    app = create_app(
        Settings(
            listen_host=settings.listen_host,
            listen_port=settings.listen_port,
            verify_signature=False,
            webhook_secret=settings.webhook_secret,
            stripe_api_key=settings.stripe_api_key,
        ),
        gateway=gateway,
    )
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    """Test client with a helper for signed webhook posts"""
    client = app.test_client()

    def post_webhook(self, payload, secret=WEBHOOK_SECRET, signature=None, sign=True, headers=None,
                     buffered=True):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        headers = dict(headers or {})
        if signature is not None:
            headers[SIGNATURE_HEADER] = signature
        elif sign:
            headers[SIGNATURE_HEADER] = compute_signature(secret, body)
        # buffered=True closes the response, which runs the post-ack callback;
        # with buffered=False the caller closes it
        return self.post(
            "/webhook",
            data=body,
            headers=headers,
            content_type="application/json",
            buffered=buffered,
        )

    client.post_webhook = post_webhook.__get__(client)
    return client


@pytest.fixture
def random_submission():
    """Payload with Faker-generated identifiers"""
    form_id = fake.bothify("????????")
    token = fake.uuid4()
    email = fake.email()
    return {
        "form_id": form_id,
        "token": token,
        "email": email,
        "payload": make_payload(form_id=form_id, token=token, email=email),
    }

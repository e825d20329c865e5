from dataclasses import dataclass, field
from typing import Any

from receipt_bridge.billing.stripe_gateway import StripeChargeGateway
from receipt_bridge.config import DEFAULT_CHARGE_WINDOW, Settings


@dataclass(frozen=True)
class WebhookContext:
    """Read-only collaborators shared by every webhook request."""

    webhook_secret: bytes = field(repr=False)
    verify_signature: bool
    gateway: Any
    charge_window: int = DEFAULT_CHARGE_WINDOW

    @classmethod
    def from_settings(cls, settings: Settings, gateway=None) -> "WebhookContext":
        return cls(
            webhook_secret=settings.webhook_secret,
            verify_signature=settings.verify_signature,
            gateway=gateway or StripeChargeGateway(settings.stripe_api_key),
            charge_window=settings.charge_window,
        )

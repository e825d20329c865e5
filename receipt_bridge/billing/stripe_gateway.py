from dataclasses import dataclass, field
from typing import Dict, List, Optional

import stripe

FORM_ID_METADATA_KEY = "typeform_form_id"
RESPONSE_TOKEN_METADATA_KEY = "typeform_response_id"


@dataclass(frozen=True)
class RemoteCharge:
    """The slice of a Stripe charge that reconciliation reads."""

    charge_id: str
    metadata: Dict[str, str] = field(default_factory=dict)
    receipt_email: Optional[str] = None

    @property
    def form_id(self) -> Optional[str]:
        return self.metadata.get(FORM_ID_METADATA_KEY)

    @property
    def response_token(self) -> Optional[str]:
        return self.metadata.get(RESPONSE_TOKEN_METADATA_KEY)

    @classmethod
    def from_stripe(cls, charge) -> "RemoteCharge":
        # StripeObject stopped being a dict in recent releases; to_dict() works on all
        values = charge.to_dict()
        metadata = values.get("metadata") or {}
        return cls(
            charge_id=values["id"],
            metadata=dict(metadata),
            receipt_email=values.get("receipt_email"),
        )


class StripeChargeGateway:
    """
    Thin wrapper over the Stripe charges API.

    The API key is passed per call so nothing is written to the module-level
    `stripe.api_key`. Stripe errors propagate unchanged; callers must not log
    their text since it can echo the key back.
    """

    def __init__(self, api_key: str):
        self._api_key = api_key

    def list_recent_charges(self, limit: int) -> List[RemoteCharge]:
        charges = stripe.Charge.list(limit=limit, api_key=self._api_key)
        return [RemoteCharge.from_stripe(charge) for charge in charges.data]

    def update_charge(self, charge_id: str, receipt_email: str) -> RemoteCharge:
        charge = stripe.Charge.modify(
            charge_id,
            receipt_email=receipt_email,
            api_key=self._api_key,
        )
        return RemoteCharge.from_stripe(charge)

    def __repr__(self) -> str:
        return "<StripeChargeGateway>"

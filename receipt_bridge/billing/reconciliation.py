"""
Attach a payer's email to the Stripe charge created for a Typeform response.

Stripe offers no lookup by our identifiers here, so the engine scans a small
window of the most recent charges and matches on the metadata Typeform's
payment block writes (form id and response token). The webhook normally
arrives seconds after the payment, which keeps the window small.
"""

import logging
from typing import Iterable, Optional

from receipt_bridge.billing.stripe_gateway import RemoteCharge
from receipt_bridge.config import DEFAULT_CHARGE_WINDOW
from receipt_bridge.errors import ReconciliationError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = (
    "Failed when postprocessing the request: "
    "Something went wrong when communicating with Stripe"
)


def find_matching_charge(
    charges: Iterable[RemoteCharge],
    form_id: str,
    response_token: str,
) -> Optional[RemoteCharge]:
    """Return the first charge whose metadata matches both identifiers."""
    for charge in charges:
        if charge.form_id == form_id and charge.response_token == response_token:
            return charge
    return None


def reconcile(
    gateway,
    form_id: str,
    response_token: str,
    email: str,
    limit: int = DEFAULT_CHARGE_WINDOW,
    extra: Optional[dict] = None,
) -> RemoteCharge:
    """
    Set `receipt_email` on the charge matching a form submission.

    Args:
        gateway: Object with `list_recent_charges(limit)` and
            `update_charge(charge_id, receipt_email)`.
        form_id: Typeform form id from the webhook.
        response_token: Typeform response token from the webhook.
        email: Payer email to store on the charge.
        limit: How many recent charges to scan.
        extra: Logging extras (request id) for this request.

    Returns:
        The updated charge.

    Raises:
        ReconciliationError: listing failed, nothing matched, or the update
            failed. The client error itself is never chained or logged.
    """
    try:
        charges = gateway.list_recent_charges(limit)
    except Exception:
        logger.error(GENERIC_FAILURE_MESSAGE, extra=extra)
        raise ReconciliationError("listing recent charges failed") from None

    target = find_matching_charge(charges, form_id, response_token)
    if target is None:
        logger.error(
            f"No charge matching the form response among the {limit} most recent charges",
            extra=extra,
        )
        raise ReconciliationError("no matching charge")

    try:
        updated = gateway.update_charge(target.charge_id, receipt_email=email)
    except Exception:
        logger.error(GENERIC_FAILURE_MESSAGE, extra=extra)
        raise ReconciliationError("updating the charge failed") from None

    logger.info(f"Set receipt email on charge {target.charge_id}", extra=extra)
    return updated

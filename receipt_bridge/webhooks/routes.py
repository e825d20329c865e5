import logging

from flask import Blueprint, Response, g, request

from receipt_bridge.billing.reconciliation import reconcile
from receipt_bridge.errors import AuthRejection, MalformedPayload, PaymentIncomplete, ReconciliationError
from receipt_bridge.webhooks.acknowledgement import Acknowledgement, RequestState
from receipt_bridge.webhooks.payload import FormSubmission, extract_submission
from receipt_bridge.webhooks.security import SIGNATURE_HEADER, verify_signature

logger = logging.getLogger(__name__)


def check_signature(context, raw_body: bytes, signature) -> None:
    """Raise AuthRejection unless the request carries a valid signature."""
    if not context.verify_signature:
        logger.warning("(!!!) Skipping request signature verification")
        return

    if not signature:
        raise AuthRejection("signature header is missing")

    if not raw_body:
        raise AuthRejection("request body is missing")

    if not verify_signature(context.webhook_secret, raw_body, signature):
        raise AuthRejection("request signature mismatch")


def process_submission(context, submission: FormSubmission, ack: Acknowledgement) -> RequestState:
    """
    Run the post-acknowledgement side effect for one submission.

    The caller has already received its 202. Failures here end up in the
    logs and as late statuses on `ack`, never on the wire.
    """
    if not submission.payment.succeeded:
        logger.info(
            "Processed incoming request: Payment was not completed by the form "
            "submitter -- no action needed",
            extra=ack.log_extra,
        )
        ack.advance(RequestState.SKIPPED)
        ack.respond(PaymentIncomplete.status_code)
        return ack.state

    logger.info("Updating a transaction in Stripe", extra=ack.log_extra)
    try:
        reconcile(
            context.gateway,
            submission.form_id,
            submission.response_token,
            submission.payer_email,
            limit=context.charge_window,
            extra=ack.log_extra,
        )
    except ReconciliationError:
        ack.advance(RequestState.RECONCILE_FAILED)
        ack.respond(ReconciliationError.status_code)
        return ack.state

    ack.advance(RequestState.RECONCILED)
    return ack.state


def create_webhook_blueprint(context) -> Blueprint:
    bp = Blueprint("typeform_webhook", __name__)

    @bp.route("/webhook", methods=["POST"])
    def typeform_webhook():
        # Opened by the request-id middleware, which also records the status
        ack: Acknowledgement = g.acknowledgement
        logger.info("Processing an incoming request")

        # Signature covers the exact bytes received, before JSON decoding
        raw_body = request.get_data(cache=True)
        try:
            check_signature(context, raw_body, request.headers.get(SIGNATURE_HEADER))
            ack.advance(RequestState.SIGNATURE_CHECKED)
            submission = extract_submission(request.get_json(force=True, silent=True))
        except (AuthRejection, MalformedPayload):
            ack.advance(RequestState.REJECTED)
            raise

        ack.advance(RequestState.PARSED)
        ack.advance(RequestState.ACKNOWLEDGED)

        response = Response(status=202)
        response.call_on_close(lambda: process_submission(context, submission, ack))
        return response

    return bp

import logging
import traceback

from flask import Response, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ReceiptBridgeError(Exception):
    """Base class for request-scoped failures."""

    status_code = 500


class AuthRejection(ReceiptBridgeError):
    """Signature header missing, body unavailable, or signature mismatch."""

    status_code = 403


class MalformedPayload(ReceiptBridgeError):
    """The webhook body lacks a field the handler needs."""

    status_code = 403


class PaymentIncomplete(ReceiptBridgeError):
    status_code = 403


class ReconciliationError(ReceiptBridgeError):
    """
    Listing, matching or updating a Stripe charge failed.

    Carries only a generic message; the underlying client error is dropped
    before this is raised.
    """

    status_code = 500


def register_error_handlers(app):
    """Register error handlers that answer with empty bodies."""

    @app.errorhandler(AuthRejection)
    @app.errorhandler(MalformedPayload)
    def handle_rejection(error):
        logger.error(f"Rejected incoming request: {error}")
        return Response(status=error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if e.code == 404:
            logger.info(f"Not found: {request.method} {request.path}")
        else:
            logger.warning(f"{e.name}: {request.method} {request.path}")
        return Response(status=e.code)

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.error("Unhandled exception while processing the request")
        logger.error(traceback.format_exc())
        return Response(status=500)

import logging
import uuid

from flask import g, request

from receipt_bridge.webhooks.acknowledgement import Acknowledgement

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def init_request_id_middleware(app):
    """
    Give every request a correlation ID and a response latch.

    `g.acknowledgement` is the single place the wire status is recorded:
    the status of whatever response Flask finalizes is written to it here,
    so work that runs after the response can only add late statuses.
    """

    @app.before_request
    def open_acknowledgement():
        incoming = request.headers.get(REQUEST_ID_HEADER)
        g.request_id = incoming or str(uuid.uuid4())
        g.acknowledgement = Acknowledgement(g.request_id)

    @app.after_request
    def record_response(response):
        response.headers[REQUEST_ID_HEADER] = g.get("request_id", "")

        ack = g.get("acknowledgement")
        if ack is not None and ack.respond(response.status_code):
            logger.info(f"Responding to the client: {response.status}")
        return response

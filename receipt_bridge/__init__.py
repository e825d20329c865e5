"""
Flask application factory.

Typeform posts form submissions to /webhook; paid submissions get their
payer email attached to the matching Stripe charge as the receipt address.
"""

import logging
from typing import Optional

from flask import Flask

from receipt_bridge.config import ConfigurationError, Settings, load_settings
from receipt_bridge.context import WebhookContext
from receipt_bridge.errors import register_error_handlers
from receipt_bridge.health import bp as health_bp
from receipt_bridge.logging_config import setup_logging
from receipt_bridge.middleware.request_id import init_request_id_middleware
from receipt_bridge.webhooks.routes import create_webhook_blueprint

__all__ = ["create_app", "ConfigurationError", "Settings", "load_settings"]

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, gateway=None) -> Flask:
    """
    Build the application.

    Args:
        settings: Loaded settings. Read from the environment when omitted.
        gateway: Charge gateway override; defaults to Stripe.

    Raises:
        ConfigurationError: if required configuration is missing.
    """
    if settings is None:
        settings = load_settings()

    app = Flask(__name__)
    setup_logging(app, settings.log_level, settings.log_format)

    context = WebhookContext.from_settings(settings, gateway=gateway)

    init_request_id_middleware(app)
    register_error_handlers(app)

    app.register_blueprint(create_webhook_blueprint(context))
    app.register_blueprint(health_bp)

    if not settings.verify_signature:
        logger.warning("Request signature verification is DISABLED")

    logger.info(f"Configuration loaded: {settings.to_dict()}")
    return app

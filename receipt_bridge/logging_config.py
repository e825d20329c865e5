import logging
import logging.config

from flask import g, has_request_context
from pythonjsonlogger import jsonlogger


class RequestIdFilter(logging.Filter):
    """
    Inject request_id into every log record if present.
    """

    def filter(self, record):
        request_id = None
        if has_request_context():
            request_id = g.get("request_id")
        if not hasattr(record, "request_id"):
            record.request_id = request_id
        return True


def build_logging_config(log_level: str = "INFO", log_format: str = "json") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {
                "()": RequestIdFilter,
            },
        },
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": (
                    "%(asctime)s "
                    "%(levelname)s "
                    "%(name)s "
                    "%(message)s "
                    "%(request_id)s"
                ),
            },
            "text": {
                "format": "%(asctime)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": log_format,
                "filters": ["request_id"],
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["default"],
        },
    }


def setup_logging(app, log_level: str = "INFO", log_format: str = "json"):
    """Configure logging for the application"""
    logging.config.dictConfig(build_logging_config(log_level, log_format))

    # Flask's own logger propagates to root
    app.logger.handlers.clear()
    app.logger.setLevel(log_level)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)

    return app

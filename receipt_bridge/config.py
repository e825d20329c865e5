"""
Process configuration loaded from the environment.

Fails fast: every required variable must be present before the server is
allowed to start. A `.env` file in the working directory is honoured.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv


DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"
DEFAULT_CHARGE_WINDOW = 5
MAX_CHARGE_WINDOW = 100

REQUIRED_VARS = [
    "LISTEN_HOST",
    "LISTEN_PORT",
    "VERIFY_SIGNATURE",
    "TYPEFORM_WEBHOOK_SECRET",
    "STRIPE_LIVE_API_KEY",
]

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigurationError(Exception):
    """Raised when configuration validation fails"""
    pass


def _mask(value: str) -> str:
    return f"***{value[-4:]}" if len(value) > 8 else "***"


@dataclass(frozen=True)
class Settings:
    listen_host: str
    listen_port: int
    verify_signature: bool
    webhook_secret: bytes = field(repr=False)
    stripe_api_key: str = field(repr=False)
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    charge_window: int = DEFAULT_CHARGE_WINDOW

    def to_dict(self) -> dict:
        """Safe dictionary view with secrets masked."""
        return {
            "listen_host": self.listen_host,
            "listen_port": self.listen_port,
            "verify_signature": self.verify_signature,
            "webhook_secret": "***",
            "stripe_api_key": _mask(self.stripe_api_key),
            "log_level": self.log_level,
            "log_format": self.log_format,
            "charge_window": self.charge_window,
        }


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {raw!r}")


def _parse_int(name: str, raw: str, low: int, high: int) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None

    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be between {low} and {high}, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ after loading
            a `.env` file.

    Raises:
        ConfigurationError: if a required variable is missing or invalid.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    missing = [name for name in REQUIRED_VARS if not environ.get(name)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    log_level = (environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(f"Invalid LOG_LEVEL: {log_level}")

    log_format = (environ.get("LOG_FORMAT") or DEFAULT_LOG_FORMAT).lower()
    if log_format not in ("json", "text"):
        raise ConfigurationError(f"LOG_FORMAT must be json or text, got {log_format!r}")

    charge_window = DEFAULT_CHARGE_WINDOW
    if environ.get("STRIPE_CHARGE_WINDOW"):
        charge_window = _parse_int(
            "STRIPE_CHARGE_WINDOW", environ["STRIPE_CHARGE_WINDOW"], 1, MAX_CHARGE_WINDOW
        )

    return Settings(
        listen_host=environ["LISTEN_HOST"],
        listen_port=_parse_int("LISTEN_PORT", environ["LISTEN_PORT"], 1, 65535),
        verify_signature=_parse_bool("VERIFY_SIGNATURE", environ["VERIFY_SIGNATURE"]),
        webhook_secret=environ["TYPEFORM_WEBHOOK_SECRET"].encode("utf-8"),
        stripe_api_key=environ["STRIPE_LIVE_API_KEY"],
        log_level=log_level,
        log_format=log_format,
        charge_window=charge_window,
    )

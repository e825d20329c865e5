import sys

from receipt_bridge import ConfigurationError, create_app, load_settings

try:
    settings = load_settings()
except ConfigurationError as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)

app = create_app(settings)

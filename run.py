import sys

from receipt_bridge import ConfigurationError, create_app, load_settings


def main():
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = create_app(settings)
    app.logger.info(f"Running on http://{settings.listen_host}:{settings.listen_port}")
    app.run(
        host=settings.listen_host,
        port=settings.listen_port,
        threaded=True,
    )


if __name__ == "__main__":
    main()

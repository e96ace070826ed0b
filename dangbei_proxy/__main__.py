"""Command-line entry point: ``python -m dangbei_proxy``."""

import argparse
import os

import uvicorn


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="OpenAI-compatible proxy for Dangbei AI search")
    parser.add_argument("--host", help="Bind address (overrides config and DANGBEI_PROXY_HOST)")
    parser.add_argument("--port", type=int, help="Port (overrides config and DANGBEI_PROXY_PORT)")
    parser.add_argument("--config", help="Path to a YAML config file")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    # Picked up by config_loader when the app module is imported
    if args.config:
        os.environ["DANGBEI_PROXY_CONFIG"] = args.config

    from .config_loader import get_server_settings
    from .main import app

    host, port = get_server_settings(app.state.config)
    uvicorn.run(app, host=args.host or host, port=args.port or port)


if __name__ == "__main__":
    main()

"""Development entry point."""

import argparse
import os

from app import create_app
from common.logging import get_logger


def _resolve_port(value: str | None) -> int:
    value = value or os.getenv("EQUATION_SERVER_PORT") or os.getenv("PORT") or "5002"
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(
            f"Invalid port '{value}'. Set EQUATION_SERVER_PORT to a number."
        ) from exc


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the equation plotter server locally")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", help="Defaults to EQUATION_SERVER_PORT or 5002")
    parser.add_argument("--config", help="Config class name, e.g. TestingConfig")
    args = parser.parse_args(argv)

    app = create_app(args.config)
    port = _resolve_port(args.port)
    get_logger().info("serving %d plugin(s) on %s:%d", len(app.config["PLUGIN_MANIFESTS"]), args.host, port)
    app.run(host=args.host, port=port, debug=False)


if __name__ == "__main__":
    main()

"""Development entry point for the calculator server."""

import os

from app import create_app


def _resolve_port() -> int:
    value = os.getenv("CALC_SERVER_PORT") or os.getenv("PORT") or "5001"
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid port '{value}'. Set CALC_SERVER_PORT to a number.") from exc


if __name__ == "__main__":
    app = create_app(os.getenv("CALC_SERVER_CONFIG"))
    host = os.getenv("CALC_SERVER_HOST", "127.0.0.1")
    app.run(host=host, port=_resolve_port(), debug=False)

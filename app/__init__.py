"""Application factory for the calculator server."""

from __future__ import annotations

from pathlib import Path

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import AppError
from common.logging import configure_level, get_logger, install_request_logging
from common.responses import fail, ok

from . import config as config_module
from .blueprints import load_manifests, register_plugin_blueprints

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yml"

logger = get_logger("app")


def _load_yaml_config(path: Path = CONFIG_PATH) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.config.from_object(config_module.BaseConfig)

    yaml_config = _load_yaml_config()
    site_settings = yaml_config.get("site", {}) or {}
    plugin_settings = yaml_config.get("plugins", {}) or {}

    app.config["SITE_SETTINGS"] = site_settings
    if "max_content_length_kb" in site_settings:
        try:
            app.config["MAX_CONTENT_LENGTH"] = int(float(site_settings["max_content_length_kb"]) * 1024)
        except (TypeError, ValueError):
            logger.warning("ignoring invalid max_content_length_kb=%r", site_settings["max_content_length_kb"])
    app.config["PLUGIN_SETTINGS"] = plugin_settings

    if config_name:
        config_obj = getattr(config_module, config_name, None)
        if config_obj:
            app.config.from_object(config_obj)
        else:
            logger.warning("unknown config %s, using BaseConfig", config_name)

    configure_level(app.config.get("LOG_LEVEL", "INFO"))
    install_request_logging(app)
    register_plugin_blueprints(app)
    app.config["PLUGIN_MANIFESTS"] = load_manifests(plugin_settings)

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    @app.route("/")
    def home():
        return ok(
            {
                "site": site_settings.get("title", "Calculator Server"),
                "plugins": app.config["PLUGIN_MANIFESTS"],
            }
        )

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        code = (error.name or "error").lower().replace(" ", "_")
        return fail(AppError(message=error.description or error.name, code=code, status_code=error.code or 500))

    @app.errorhandler(Exception)
    def server_error(error: Exception):  # pragma: no cover - safety net
        logger.exception("unhandled error")
        return fail(AppError(message="Internal server error", code="internal_error", status_code=500))

    return app


__all__ = ["create_app"]

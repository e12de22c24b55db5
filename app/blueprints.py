"""Plugin discovery and blueprint registration helpers."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Any, Iterable, Mapping

from flask import Blueprint, Flask

from common.logging import get_logger

PLUGINS_ROOT = Path(__file__).resolve().parent.parent

logger = get_logger("plugins")


def discover_plugins(package: str = "plugins") -> list[str]:
    """Return import paths for all plugin packages."""

    package_path = PLUGINS_ROOT / package
    if not package_path.exists():
        return []
    return [
        f"{package}.{module_info.name}"
        for module_info in pkgutil.iter_modules([str(package_path)])
        if module_info.ispkg
    ]


def _iter_blueprints(package: str = "plugins") -> Iterable[Blueprint]:
    for dotted in discover_plugins(package):
        module = importlib.import_module(f"{dotted}.api")
        module_blueprints = getattr(module, "blueprints", None)
        if module_blueprints:
            yield from module_blueprints
            continue
        blueprint = getattr(module, "bp", None)
        if blueprint is not None:
            yield blueprint


def register_plugin_blueprints(app: Flask) -> None:
    for bp in _iter_blueprints():
        app.register_blueprint(bp)
        logger.debug("registered blueprint %s at %s", bp.name, bp.url_prefix)


def load_manifests(plugin_settings: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
    """Collect plugin manifests, overlaying ``docs``/``summary`` from config."""

    plugin_settings = plugin_settings or {}
    manifests: list[dict[str, Any]] = []
    for dotted in discover_plugins():
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if not manifest:
            continue
        entry = dict(manifest)
        overrides = plugin_settings.get(entry.get("blueprint", ""), {}) or {}
        for key in ("docs", "summary"):
            if overrides.get(key):
                entry[key] = overrides[key]
        manifests.append(entry)
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


__all__ = ["discover_plugins", "load_manifests", "register_plugin_blueprints"]

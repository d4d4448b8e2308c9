"""Load the platform plugin catalog from YAML.

The catalog is validated against ``schemas/catalog.schema.json`` before
any descriptor is built, so a malformed catalog fails loudly instead of
producing half-configured injections.

Usage:
    from gatsby_injector.catalog import load_catalog

    catalog = load_catalog()
    for plugin in catalog.plugins:
        print(plugin.package)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from gatsby_injector.core.types import PluginDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "plugins.yaml"
_SCHEMA_PATH = Path(__file__).parent / "schemas" / "catalog.schema.json"


class CatalogError(Exception):
    """Raised when the plugin catalog cannot be loaded or is invalid."""

    def __init__(self, message: str, issues: list[str] | None = None):
        self.issues = issues or []
        super().__init__(message)


@dataclass(frozen=True)
class PluginCatalog:
    """Ordered collection of platform plugins."""

    plugins: tuple[PluginDescriptor, ...]

    def get(self, name: str) -> PluginDescriptor:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        raise KeyError(f"Plugin '{name}' is not in the catalog")

    @property
    def packages(self) -> list[str]:
        return [p.package for p in self.plugins]


def _json_path(error: ValidationError) -> str:
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def validate_catalog(doc: Any) -> list[str]:
    """Validate a parsed catalog document.

    Returns:
        Human-readable issues, empty when the document is valid.
    """
    validator = Draft202012Validator(_load_schema())
    issues = []
    for error in sorted(validator.iter_errors(doc), key=_json_path):
        loc = _json_path(error)
        issues.append(f"{loc}: {error.message}" if loc else error.message)
    return issues


def _descriptor_from_dict(data: dict[str, Any]) -> PluginDescriptor:
    hook = data.get("hook") or {}
    return PluginDescriptor(
        name=data["name"],
        package=data["package"],
        flag=data["flag"],
        min_framework_major=data.get("min_framework_major"),
        config_entry=data.get("config_entry", False),
        hook_module=hook.get("module"),
        hook_export=hook.get("export"),
    )


def load_catalog(path: Path | None = None) -> PluginCatalog:
    """Load and validate the plugin catalog.

    Args:
        path: Catalog YAML file. Defaults to the packaged ``plugins.yaml``.

    Raises:
        CatalogError: If the file is not valid YAML, violates the schema,
            or declares the same plugin name or package twice.
    """
    path = path or DEFAULT_CATALOG_PATH

    try:
        with path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise CatalogError(f"Plugin catalog {path} is not valid YAML: {exc}") from exc

    issues = validate_catalog(raw)
    if issues:
        raise CatalogError(f"Plugin catalog {path} is invalid", issues)

    plugins = tuple(_descriptor_from_dict(entry) for entry in raw["plugins"])

    seen: set[str] = set()
    for plugin in plugins:
        for key in (plugin.name, plugin.package):
            if key in seen:
                raise CatalogError(f"Plugin catalog {path} declares '{key}' twice")
            seen.add(key)

    logger.debug("Loaded %d plugin(s) from %s", len(plugins), path)
    return PluginCatalog(plugins=plugins)

"""Platform plugin catalog."""

from gatsby_injector.catalog.loader import (
    DEFAULT_CATALOG_PATH,
    CatalogError,
    PluginCatalog,
    load_catalog,
    validate_catalog,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "CatalogError",
    "PluginCatalog",
    "load_catalog",
    "validate_catalog",
]

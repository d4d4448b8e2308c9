"""Injector configuration resolved from the build environment."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gatsby_injector.catalog import DEFAULT_CATALOG_PATH, PluginCatalog, load_catalog
from gatsby_injector.core.types import FeatureFlags

BUILDER_PLUGIN_ENV = "VERCEL_GATSBY_BUILDER_PLUGIN"
ANALYTICS_ID_ENV = "VERCEL_ANALYTICS_ID"
PLATFORM_MODULES_ENV = "GATSBY_INJECTOR_PLATFORM_MODULES"
CATALOG_ENV = "GATSBY_INJECTOR_CATALOG"

# Gatsby reads this at build time to configure the analytics plugin.
GATSBY_ANALYTICS_ID_ENV = "GATSBY_VERCEL_ANALYTICS_ID"


@dataclass
class InjectorConfig:
    """Everything the engine needs besides the project directory and version.

    Attributes:
        flags: Which platform plugins are requested
        platform_modules_dir: Directory holding the platform's bundled packages
        catalog_path: Plugin catalog YAML file
    """

    flags: FeatureFlags = field(default_factory=FeatureFlags)
    platform_modules_dir: Path = field(
        default_factory=lambda: Path(sys.prefix) / "lib" / "node_modules"
    )
    catalog_path: Path = DEFAULT_CATALOG_PATH

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InjectorConfig:
        """Create config from environment variables.

        Resolution:
        1. VERCEL_GATSBY_BUILDER_PLUGIN (any non-empty value enables the builder plugin)
        2. VERCEL_ANALYTICS_ID (non-empty enables analytics and is forwarded to Gatsby)
        3. GATSBY_INJECTOR_PLATFORM_MODULES, else <sys.prefix>/lib/node_modules
        4. GATSBY_INJECTOR_CATALOG, else the packaged plugins.yaml
        """
        env = os.environ if environ is None else environ

        flags = FeatureFlags(
            builder_plugin_enabled=bool(env.get(BUILDER_PLUGIN_ENV)),
            analytics_id=env.get(ANALYTICS_ID_ENV) or None,
        )

        config = cls(flags=flags)

        modules_dir = env.get(PLATFORM_MODULES_ENV)
        if modules_dir:
            config.platform_modules_dir = Path(modules_dir)

        catalog_path = env.get(CATALOG_ENV)
        if catalog_path:
            config.catalog_path = Path(catalog_path)

        return config

    def load_catalog(self) -> PluginCatalog:
        return load_catalog(self.catalog_path)

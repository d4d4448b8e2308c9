"""Gatsby build-file injection for platform plugins.

Patches ``gatsby-node`` and ``gatsby-config`` at deploy time so the
platform's plugins run alongside the site owner's own hooks, without the
owner editing their project. Owner files are kept in backups and every
run regenerates from them, so builds can be repeated safely.

Usage:
    import asyncio
    from gatsby_injector import InjectorConfig, create_plugin_symlinks, inject_plugins

    config = InjectorConfig.from_env()
    if asyncio.run(inject_plugins("4.24.0", project_dir, config)):
        create_plugin_symlinks(project_dir, config)
"""

from gatsby_injector.config import InjectorConfig
from gatsby_injector.engine import (
    InjectionEngine,
    InjectionResult,
    ProvisioningError,
    create_plugin_symlinks,
    inject_plugins,
    restore_backups,
)

__all__ = [
    "InjectionEngine",
    "InjectionResult",
    "InjectorConfig",
    "ProvisioningError",
    "create_plugin_symlinks",
    "inject_plugins",
    "restore_backups",
]

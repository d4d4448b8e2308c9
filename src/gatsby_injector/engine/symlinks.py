"""Make platform plugin packages resolvable from inside a project.

Each catalog plugin gets a symlink at ``node_modules/<package>`` pointing
at the platform's bundled copy, so the generated gatsby-node and
gatsby-config files can import them without an npm install.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from gatsby_injector.catalog import PluginCatalog
from gatsby_injector.core.types import PluginDescriptor

logger = logging.getLogger(__name__)

DEPENDENCY_DIR = "node_modules"

CREATED = "created"
REPLACED = "replaced"
SKIPPED = "skipped"
FAILED = "failed"


class ProvisioningError(Exception):
    """Raised when the project's dependency directory cannot be prepared."""


@dataclass
class SymlinkOutcome:
    """What happened to one plugin's link."""

    package: str
    link: Path
    target: Path
    status: str
    error: str | None = None


def _points_to(link: Path, target: Path) -> bool:
    current = Path(os.readlink(link))
    if not current.is_absolute():
        current = link.parent / current
    return os.path.realpath(current) == os.path.realpath(target)


def _link_plugin(
    plugin: PluginDescriptor, node_modules: Path, modules_dir: Path
) -> SymlinkOutcome:
    link = node_modules.joinpath(*plugin.package.split("/"))
    target = plugin.resolves_to(modules_dir)
    status = CREATED

    if link.is_symlink():
        if _points_to(link, target):
            return SymlinkOutcome(plugin.package, link, target, SKIPPED)
        logger.info("Replacing stale link %s", link)
        link.unlink()
        status = REPLACED
    elif link.exists():
        # A real install of the package wins over the bundled copy.
        logger.info("%s is already installed, leaving it in place", plugin.package)
        return SymlinkOutcome(plugin.package, link, target, SKIPPED)

    link.symlink_to(target, target_is_directory=True)
    logger.info("Linked %s -> %s", link, target)
    return SymlinkOutcome(plugin.package, link, target, status)


def link_plugins(
    project_dir: Path,
    catalog: PluginCatalog,
    modules_dir: Path,
) -> list[SymlinkOutcome]:
    """Link every catalog plugin into ``<project_dir>/node_modules``.

    Args:
        project_dir: The Gatsby project root.
        catalog: Plugins to provision.
        modules_dir: Directory containing the platform's bundled packages.

    Returns:
        One outcome per plugin, in catalog order.

    Raises:
        ProvisioningError: If ``node_modules`` (or a package scope inside it)
            cannot be created. A failure linking a single package is
            reported in its outcome and does not stop the others.
    """
    node_modules = project_dir / DEPENDENCY_DIR
    outcomes: list[SymlinkOutcome] = []

    for plugin in catalog.plugins:
        parent = node_modules.joinpath(*plugin.package.split("/")).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisioningError(
                f"Cannot create dependency directory {parent}: {e}"
            ) from e

        try:
            outcomes.append(_link_plugin(plugin, node_modules, modules_dir))
        except OSError as e:
            logger.warning("Failed to link %s: %s", plugin.package, e)
            outcomes.append(
                SymlinkOutcome(
                    package=plugin.package,
                    link=node_modules.joinpath(*plugin.package.split("/")),
                    target=plugin.resolves_to(modules_dir),
                    status=FAILED,
                    error=str(e),
                )
            )

    return outcomes

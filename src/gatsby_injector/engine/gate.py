"""Decide which platform plugins apply to a build."""

from __future__ import annotations

from dataclasses import dataclass

from gatsby_injector.catalog import PluginCatalog
from gatsby_injector.core.types import FeatureFlags, PluginDescriptor, parse_major


@dataclass(frozen=True)
class GateDecision:
    """Outcome of the version/flag gate.

    Attributes:
        plugins: Plugins to inject, in catalog order
    """

    plugins: tuple[PluginDescriptor, ...] = ()

    @property
    def applicable(self) -> bool:
        return bool(self.plugins)

    @property
    def inject_hook(self) -> bool:
        return any(p.chains_hook for p in self.plugins)

    @property
    def hook_plugin(self) -> PluginDescriptor | None:
        for plugin in self.plugins:
            if plugin.chains_hook:
                return plugin
        return None

    @property
    def config_plugins(self) -> tuple[PluginDescriptor, ...]:
        return tuple(p for p in self.plugins if p.config_entry)

    def __bool__(self) -> bool:
        return self.applicable


def _version_allows(plugin: PluginDescriptor, major: int | None) -> bool:
    if plugin.min_framework_major is None:
        return True
    if major is None:
        return False
    return major >= plugin.min_framework_major


def evaluate_gate(
    detected_version: str | None,
    flags: FeatureFlags,
    catalog: PluginCatalog,
) -> GateDecision:
    """Select the plugins whose flag is on and whose version floor is met.

    A plugin with a version floor never applies when the framework
    version is unknown.
    """
    if not flags.any_enabled:
        return GateDecision()

    major = parse_major(detected_version)
    selected = [
        plugin
        for plugin in catalog.plugins
        if flags.is_enabled(plugin.flag) and _version_allows(plugin, major)
    ]
    return GateDecision(plugins=tuple(selected))

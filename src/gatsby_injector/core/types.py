"""Core types shared by the injection engine.

Everything here is recomputed on every build invocation. Durable state
lives only on disk (owner files, generated files, backups, symlinks and
the injection manifest).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Appended to a file's name (plus the original extension again) to form
# the path where the owner's original file is kept.
BACKUP_MARKER = "__vercel_builder_backup__"


class ModuleDialect(str, Enum):
    """Module syntax a generated file must match."""

    COMMONJS = "commonjs"
    ESMODULE = "esmodule"
    TYPESCRIPT = "typescript"

    @property
    def extension(self) -> str:
        return _DIALECT_EXTENSIONS[self]

    @classmethod
    def from_extension(cls, ext: str) -> ModuleDialect:
        ext = ext.lstrip(".")
        for dialect, known in _DIALECT_EXTENSIONS.items():
            if known == ext:
                return dialect
        raise ValueError(f"Unsupported module extension: .{ext}")


_DIALECT_EXTENSIONS = {
    ModuleDialect.TYPESCRIPT: "ts",
    ModuleDialect.ESMODULE: "mjs",
    ModuleDialect.COMMONJS: "js",
}

# Detection order when more than one candidate exists on disk.
DIALECT_PRECEDENCE = (
    ModuleDialect.TYPESCRIPT,
    ModuleDialect.ESMODULE,
    ModuleDialect.COMMONJS,
)


class LogicalFile(str, Enum):
    """The two Gatsby files the engine manages."""

    HOOK = "hook"
    CONFIG = "config"

    @property
    def basename(self) -> str:
        return "gatsby-node" if self is LogicalFile.HOOK else "gatsby-config"


def backup_path_for(path: Path) -> Path:
    """Deterministic backup location for *path*.

    ``gatsby-node.ts`` -> ``gatsby-node.ts.__vercel_builder_backup__.ts``
    """
    ext = path.suffix
    return path.with_name(f"{path.name}.{BACKUP_MARKER}{ext}")


@dataclass(frozen=True)
class ManagedFile:
    """A logical file resolved to a concrete dialect inside a project.

    Attributes:
        logical: Which Gatsby file this is (hook or config)
        dialect: Module syntax detected for this file
        path: Location of the (generated) file
        backup_path: Location of the owner's original, if one ever existed
    """

    logical: LogicalFile
    dialect: ModuleDialect
    path: Path
    backup_path: Path

    @classmethod
    def resolve(
        cls, project_dir: Path, logical: LogicalFile, dialect: ModuleDialect
    ) -> ManagedFile:
        path = project_dir / f"{logical.basename}.{dialect.extension}"
        return cls(
            logical=logical,
            dialect=dialect,
            path=path,
            backup_path=backup_path_for(path),
        )

    @property
    def backup_specifier(self) -> str:
        """Relative import specifier of the backup, as seen from ``path``."""
        return f"./{self.backup_path.name}"


@dataclass(frozen=True)
class PluginDescriptor:
    """A platform-supplied Gatsby plugin package.

    Attributes:
        name: Short catalog identifier (e.g., "builder")
        package: npm package name
        flag: Feature flag that enables the plugin ("builder_plugin" | "analytics")
        min_framework_major: Lowest Gatsby major version the plugin supports
        config_entry: Whether the plugin is listed in gatsby-config's plugins
        hook_module: Module inside the package chained into gatsby-node
        hook_export: Lifecycle export the hook module augments
    """

    name: str
    package: str
    flag: str
    min_framework_major: int | None = None
    config_entry: bool = False
    hook_module: str | None = None
    hook_export: str | None = None

    @property
    def chains_hook(self) -> bool:
        return self.hook_module is not None and self.hook_export is not None

    @property
    def hook_specifier(self) -> str:
        """Bare import specifier of the hook module (``<package>/<module>``)."""
        if not self.hook_module:
            raise ValueError(f"Plugin '{self.name}' has no hook module")
        return f"{self.package}/{self.hook_module}"

    def resolves_to(self, modules_dir: Path) -> Path:
        """Where the platform's bundled copy of this package lives."""
        return modules_dir.joinpath(*self.package.split("/"))


@dataclass(frozen=True)
class FeatureFlags:
    """Enabling toggles for each platform plugin."""

    builder_plugin_enabled: bool = False
    analytics_id: str | None = None

    @property
    def analytics_enabled(self) -> bool:
        return bool(self.analytics_id)

    @property
    def any_enabled(self) -> bool:
        return self.builder_plugin_enabled or self.analytics_enabled

    def is_enabled(self, flag: str) -> bool:
        if flag == "builder_plugin":
            return self.builder_plugin_enabled
        if flag == "analytics":
            return self.analytics_enabled
        raise ValueError(f"Unknown feature flag: {flag}")


@dataclass(frozen=True)
class InjectionContext:
    """Inputs of one build invocation."""

    detected_version: str | None
    project_dir: Path
    flags: FeatureFlags = field(default_factory=FeatureFlags)

    @property
    def framework_major(self) -> int | None:
        return parse_major(self.detected_version)


_MAJOR_RE = re.compile(r"(\d+)")


def parse_major(version: str | None) -> int | None:
    """Extract the major component of a loosely formatted version string.

    Mirrors semver "coerce": the first run of digits is the major, so
    ``"^4.2.0"``, ``"v4"`` and ``"4.0.0-next.1"`` all yield 4.
    """
    if not version:
        return None
    match = _MAJOR_RE.search(version)
    if not match:
        return None
    return int(match.group(1))

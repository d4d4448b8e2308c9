"""Core types for Gatsby build-file injection."""

from gatsby_injector.core.types import (
    BACKUP_MARKER,
    DIALECT_PRECEDENCE,
    FeatureFlags,
    InjectionContext,
    LogicalFile,
    ManagedFile,
    ModuleDialect,
    PluginDescriptor,
    backup_path_for,
    parse_major,
)

__all__ = [
    "BACKUP_MARKER",
    "DIALECT_PRECEDENCE",
    "FeatureFlags",
    "InjectionContext",
    "LogicalFile",
    "ManagedFile",
    "ModuleDialect",
    "PluginDescriptor",
    "backup_path_for",
    "parse_major",
]

"""Injection engine: gating, dialect detection, backups, symlinks.

Usage:
    from gatsby_injector.engine import InjectionEngine
    from gatsby_injector.core import InjectionContext

    engine = InjectionEngine()
    result = await engine.inject(InjectionContext("4.0.0", project_dir, engine.config.flags))
"""

from gatsby_injector.engine.backup import ensure_backup, restore_backups
from gatsby_injector.engine.dialect import detect_dialect
from gatsby_injector.engine.gate import GateDecision, evaluate_gate
from gatsby_injector.engine.injector import (
    InjectionEngine,
    InjectionResult,
    create_plugin_symlinks,
    inject_plugins,
)
from gatsby_injector.engine.manifest import (
    MANIFEST_FILENAME,
    FileRecord,
    InjectionManifest,
    load_manifest,
    save_manifest,
)
from gatsby_injector.engine.symlinks import (
    ProvisioningError,
    SymlinkOutcome,
    link_plugins,
)

__all__ = [
    "MANIFEST_FILENAME",
    "FileRecord",
    "GateDecision",
    "InjectionEngine",
    "InjectionManifest",
    "InjectionResult",
    "ProvisioningError",
    "SymlinkOutcome",
    "create_plugin_symlinks",
    "detect_dialect",
    "ensure_backup",
    "evaluate_gate",
    "inject_plugins",
    "link_plugins",
    "load_manifest",
    "restore_backups",
    "save_manifest",
]

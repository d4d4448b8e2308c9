"""Keep owner files safe before generated files replace them.

A backup, once created, is the source of truth for the owner's code.
It is never moved or overwritten by a later injection pass, so repeated
builds regenerate from the same original instead of wrapping their own
output again.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gatsby_injector.core.types import (
    DIALECT_PRECEDENCE,
    LogicalFile,
    ManagedFile,
)
from gatsby_injector.engine.manifest import (
    FileRecord,
    load_manifest,
    manifest_path,
)

logger = logging.getLogger(__name__)


def ensure_backup(
    managed: ManagedFile,
    project_dir: Path,
    record: FileRecord | None = None,
) -> bool:
    """Move the owner's file out of the way if it has not been already.

    Args:
        managed: The file about to be (re)generated.
        project_dir: Project root, used to resolve ``record`` paths.
        record: Manifest record from a previous run for this file, if any.

    Returns:
        True if a backup of owner content exists after the call.
    """
    if managed.backup_path.exists():
        logger.debug(
            "Backup %s already exists, regenerating %s from it",
            managed.backup_path.name,
            managed.path.name,
        )
        return True

    if not managed.path.exists():
        return False

    if (
        record is not None
        and record.backup is None
        and project_dir / record.path == managed.path
        and record.matches(project_dir)
    ):
        # Our own direct re-export from a previous run, not owner code.
        logger.debug("%s is unchanged engine output, not backing up", managed.path.name)
        return False

    os.rename(managed.path, managed.backup_path)
    logger.info("Backed up %s to %s", managed.path.name, managed.backup_path.name)
    return True


def restore_backups(project_dir: Path) -> list[Path]:
    """Undo injection in *project_dir*.

    Every backup is moved back over its generated file, generated files
    that had no owner original are deleted (only when still unmodified),
    and the manifest is removed.

    Returns:
        Paths that were restored or removed.
    """
    manifest = load_manifest(project_dir)
    changed: list[Path] = []

    for logical in LogicalFile:
        for dialect in DIALECT_PRECEDENCE:
            managed = ManagedFile.resolve(project_dir, logical, dialect)
            if managed.backup_path.exists():
                os.replace(managed.backup_path, managed.path)
                logger.info("Restored %s from backup", managed.path.name)
                changed.append(managed.path)

    for record in manifest.files.values():
        target = project_dir / record.path
        if record.backup is None and record.matches(project_dir):
            target.unlink()
            logger.info("Removed generated %s", target.name)
            changed.append(target)

    path = manifest_path(project_dir)
    if path.exists():
        path.unlink()

    return changed

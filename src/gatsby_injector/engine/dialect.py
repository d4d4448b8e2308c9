"""Detect the module dialect of a project's Gatsby files."""

from __future__ import annotations

import logging
from pathlib import Path

from gatsby_injector.core.types import (
    DIALECT_PRECEDENCE,
    LogicalFile,
    ModuleDialect,
    backup_path_for,
)

logger = logging.getLogger(__name__)


def _exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def detect_dialect(project_dir: Path, logical: LogicalFile) -> ModuleDialect:
    """Pick the dialect for one logical file.

    Candidates are checked in ``.ts``, ``.mjs``, ``.js`` order. A backup
    left by an earlier injection counts as evidence too, so a deleted
    generated file does not flip the dialect. Defaults to CommonJS.
    """
    for dialect in DIALECT_PRECEDENCE:
        candidate = project_dir / f"{logical.basename}.{dialect.extension}"
        if _exists(candidate) or _exists(backup_path_for(candidate)):
            logger.debug("Detected %s dialect for %s", dialect.value, candidate.name)
            return dialect
    return ModuleDialect.COMMONJS

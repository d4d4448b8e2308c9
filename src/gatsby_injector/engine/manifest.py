"""Injection manifest: records what the engine wrote into a project.

The manifest lives next to the generated files and makes the injection
state queryable: which plugins were injected, which files were generated,
where their backups are, and a hash of each generated file so later runs
can recognise their own output.

It is deterministic (no timestamps) so that re-running the engine on the
same inputs leaves every file byte-identical.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

MANIFEST_FILENAME = ".gatsby-injector.json"
FORMAT_VERSION = 1


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass
class FileRecord:
    """A generated file and its backup (paths relative to the project)."""

    path: str
    sha256: str
    backup: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"path": self.path, "sha256": self.sha256}
        if self.backup is not None:
            d["backup"] = self.backup
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        return cls(
            path=data["path"],
            sha256=data["sha256"],
            backup=data.get("backup"),
        )

    def matches(self, project_dir: Path) -> bool:
        """Whether the file on disk is still exactly what the engine wrote."""
        target = project_dir / self.path
        if not target.is_file():
            return False
        return hashlib.sha256(target.read_bytes()).hexdigest() == self.sha256


@dataclass
class InjectionManifest:
    """Queryable record of a project's injection state."""

    format_version: int = FORMAT_VERSION
    plugins: list[str] = field(default_factory=list)
    files: dict[str, FileRecord] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": self.format_version,
            "plugins": list(self.plugins),
            "files": {k: v.to_dict() for k, v in self.files.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InjectionManifest:
        files = {k: FileRecord.from_dict(v) for k, v in data.get("files", {}).items()}
        return cls(
            format_version=data.get("format_version", FORMAT_VERSION),
            plugins=list(data.get("plugins", [])),
            files=files,
        )

    @classmethod
    def empty(cls) -> InjectionManifest:
        return cls()


def manifest_path(project_dir: Path) -> Path:
    return project_dir / MANIFEST_FILENAME


def save_manifest(manifest: InjectionManifest, project_dir: Path) -> Path:
    """Save a manifest into *project_dir*."""
    path = manifest_path(project_dir)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest.to_dict(), f, indent=2, sort_keys=True)
        f.write("\n")
    return path


def load_manifest(project_dir: Path) -> InjectionManifest:
    """Load the manifest of *project_dir*.

    Returns an empty manifest if the file doesn't exist.
    """
    path = manifest_path(project_dir)
    if not path.exists():
        return InjectionManifest.empty()

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return InjectionManifest.from_dict(data)

"""Tests for owner-file backups, restore, and the injection manifest."""

import json

from gatsby_injector.core.types import LogicalFile, ManagedFile, ModuleDialect
from gatsby_injector.engine.backup import ensure_backup, restore_backups
from gatsby_injector.engine.manifest import (
    MANIFEST_FILENAME,
    FileRecord,
    InjectionManifest,
    content_hash,
    load_manifest,
    save_manifest,
)

OWNER_NODE = b"exports.onPostBuild = async () => {};\r\n// \xe2\x9c\x93 owner\n"


def hook_file(tmp_path, dialect=ModuleDialect.COMMONJS):
    return ManagedFile.resolve(tmp_path, LogicalFile.HOOK, dialect)


class TestEnsureBackup:
    def test_no_file_is_noop(self, tmp_path):
        managed = hook_file(tmp_path)
        assert ensure_backup(managed, tmp_path) is False
        assert list(tmp_path.iterdir()) == []

    def test_moves_owner_file_byte_for_byte(self, tmp_path):
        managed = hook_file(tmp_path)
        managed.path.write_bytes(OWNER_NODE)

        assert ensure_backup(managed, tmp_path) is True
        assert not managed.path.exists()
        assert managed.backup_path.read_bytes() == OWNER_NODE

    def test_existing_backup_is_authoritative(self, tmp_path):
        managed = hook_file(tmp_path)
        managed.backup_path.write_bytes(OWNER_NODE)
        managed.path.write_text("// generated last build\n")

        assert ensure_backup(managed, tmp_path) is True
        assert managed.backup_path.read_bytes() == OWNER_NODE
        assert managed.path.read_text() == "// generated last build\n"

    def test_backup_without_generated_file(self, tmp_path):
        managed = hook_file(tmp_path)
        managed.backup_path.write_bytes(OWNER_NODE)
        assert ensure_backup(managed, tmp_path) is True

    def test_recognises_own_passthrough_output(self, tmp_path):
        managed = hook_file(tmp_path)
        generated = "module.exports = require('x');"
        managed.path.write_text(generated)
        record = FileRecord(path="gatsby-node.js", sha256=content_hash(generated))

        assert ensure_backup(managed, tmp_path, record) is False
        assert managed.path.exists()
        assert not managed.backup_path.exists()

    def test_owner_edit_after_passthrough_is_backed_up(self, tmp_path):
        managed = hook_file(tmp_path)
        record = FileRecord(path="gatsby-node.js", sha256=content_hash("old output"))
        managed.path.write_bytes(OWNER_NODE)

        assert ensure_backup(managed, tmp_path, record) is True
        assert managed.backup_path.read_bytes() == OWNER_NODE


class TestManifest:
    def test_missing_manifest_is_empty(self, tmp_path):
        manifest = load_manifest(tmp_path)
        assert manifest.plugins == []
        assert manifest.files == {}

    def test_saved_format(self, tmp_path):
        manifest = InjectionManifest(
            plugins=["@vercel/gatsby-plugin-vercel-analytics"],
            files={
                "config": FileRecord(
                    path="gatsby-config.js",
                    sha256="abc",
                    backup="gatsby-config.js.__vercel_builder_backup__.js",
                )
            },
        )
        path = save_manifest(manifest, tmp_path)

        assert path.name == MANIFEST_FILENAME
        text = path.read_text()
        assert text.endswith("}\n")
        data = json.loads(text)
        assert data["format_version"] == 1
        assert data["files"]["config"]["backup"].endswith("__vercel_builder_backup__.js")

        restored = load_manifest(tmp_path)
        assert restored.files["config"].backup == manifest.files["config"].backup

    def test_passthrough_record_omits_backup(self):
        assert "backup" not in FileRecord(path="a.js", sha256="x").to_dict()

    def test_matches_detects_edits(self, tmp_path):
        (tmp_path / "a.js").write_text("one")
        record = FileRecord(path="a.js", sha256=content_hash("one"))
        assert record.matches(tmp_path)
        (tmp_path / "a.js").write_text("two")
        assert not record.matches(tmp_path)


class TestRestoreBackups:
    def test_restores_owner_files(self, tmp_path):
        managed = hook_file(tmp_path, ModuleDialect.TYPESCRIPT)
        managed.backup_path.write_bytes(OWNER_NODE)
        managed.path.write_text("// generated\n")

        changed = restore_backups(tmp_path)

        assert changed == [managed.path]
        assert managed.path.read_bytes() == OWNER_NODE
        assert not managed.backup_path.exists()

    def test_removes_generated_files_without_owner(self, tmp_path):
        generated = 'module.exports = {"plugins":[]}'
        (tmp_path / "gatsby-config.js").write_text(generated)
        save_manifest(
            InjectionManifest(
                files={"config": FileRecord("gatsby-config.js", content_hash(generated))}
            ),
            tmp_path,
        )

        changed = restore_backups(tmp_path)

        assert changed == [tmp_path / "gatsby-config.js"]
        assert list(tmp_path.iterdir()) == []

    def test_keeps_edited_generated_file(self, tmp_path):
        (tmp_path / "gatsby-config.js").write_text("edited by hand")
        save_manifest(
            InjectionManifest(
                files={"config": FileRecord("gatsby-config.js", content_hash("original"))}
            ),
            tmp_path,
        )

        assert restore_backups(tmp_path) == []
        assert (tmp_path / "gatsby-config.js").read_text() == "edited by hand"
        assert not (tmp_path / MANIFEST_FILENAME).exists()

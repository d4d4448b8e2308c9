"""Tests for platform plugin symlink provisioning."""

import os

import pytest

from gatsby_injector.catalog import load_catalog
from gatsby_injector.config import InjectorConfig
from gatsby_injector.engine import ProvisioningError, create_plugin_symlinks, link_plugins
from gatsby_injector.engine.symlinks import CREATED, FAILED, REPLACED, SKIPPED

BUILDER = "@vercel/gatsby-plugin-vercel-builder"
ANALYTICS = "@vercel/gatsby-plugin-vercel-analytics"


@pytest.fixture
def platform_modules(tmp_path):
    """A fake platform install holding both bundled plugins."""
    modules = tmp_path / "platform" / "node_modules"
    builder = modules / "@vercel" / "gatsby-plugin-vercel-builder"
    builder.mkdir(parents=True)
    (builder / "package.json").write_text('{"name": "%s"}\n' % BUILDER)
    (builder / "gatsby-node.js").write_text("exports.onPostBuild = async () => {};\n")
    analytics = modules / "@vercel" / "gatsby-plugin-vercel-analytics"
    analytics.mkdir(parents=True)
    (analytics / "package.json").write_text('{"name": "%s"}\n' % ANALYTICS)
    (analytics / "index.js").write_text("module.exports = {};\n")
    return modules


@pytest.fixture
def project(tmp_path):
    project = tmp_path / "site"
    project.mkdir()
    return project


@pytest.fixture
def config(platform_modules):
    return InjectorConfig(platform_modules_dir=platform_modules)


class TestCreatePluginSymlinks:
    def test_links_every_plugin(self, project, config, platform_modules):
        outcomes = create_plugin_symlinks(project, config)

        assert [o.package for o in outcomes] == [BUILDER, ANALYTICS]
        assert all(o.status == CREATED for o in outcomes)
        link = project / "node_modules" / "@vercel" / "gatsby-plugin-vercel-builder"
        assert link.is_symlink()
        assert (link / "gatsby-node.js").read_text().startswith("exports.onPostBuild")
        assert os.path.realpath(link) == os.path.realpath(
            platform_modules / "@vercel" / "gatsby-plugin-vercel-builder"
        )

    def test_second_run_skips(self, project, config):
        create_plugin_symlinks(project, config)
        outcomes = create_plugin_symlinks(project, config)
        assert all(o.status == SKIPPED for o in outcomes)

    def test_replaces_stale_link(self, project, config, tmp_path):
        scope = project / "node_modules" / "@vercel"
        scope.mkdir(parents=True)
        stale = tmp_path / "old"
        stale.mkdir()
        (scope / "gatsby-plugin-vercel-analytics").symlink_to(stale)

        outcomes = {o.package: o for o in create_plugin_symlinks(project, config)}

        assert outcomes[ANALYTICS].status == REPLACED
        assert (scope / "gatsby-plugin-vercel-analytics" / "index.js").exists()

    def test_keeps_real_install(self, project, config):
        installed = project / "node_modules" / "@vercel" / "gatsby-plugin-vercel-analytics"
        installed.mkdir(parents=True)
        (installed / "index.js").write_text("// real install\n")

        outcomes = {o.package: o for o in create_plugin_symlinks(project, config)}

        assert outcomes[ANALYTICS].status == SKIPPED
        assert not installed.is_symlink()
        assert (installed / "index.js").read_text() == "// real install\n"

    def test_one_failure_does_not_stop_others(self, project, config, monkeypatch):
        from pathlib import Path

        original = Path.symlink_to

        def flaky_symlink(self, target, target_is_directory=False):
            if self.name == "gatsby-plugin-vercel-builder":
                raise PermissionError("denied")
            return original(self, target, target_is_directory)

        monkeypatch.setattr(Path, "symlink_to", flaky_symlink)

        outcomes = {o.package: o for o in create_plugin_symlinks(project, config)}

        assert outcomes[BUILDER].status == FAILED
        assert "denied" in outcomes[BUILDER].error
        assert outcomes[ANALYTICS].status == CREATED

    def test_dependency_dir_failure_is_fatal(self, project, config):
        (project / "node_modules").write_text("not a directory")
        with pytest.raises(ProvisioningError, match="Cannot create dependency directory"):
            create_plugin_symlinks(project, config)

    def test_link_plugins_with_explicit_catalog(self, project, platform_modules):
        outcomes = link_plugins(project, load_catalog(), platform_modules)
        assert len(outcomes) == 2

"""Injection CLI commands: inject, symlinks, status, restore."""

import asyncio
from pathlib import Path

import click

from gatsby_injector.catalog import CatalogError
from gatsby_injector.config import InjectorConfig
from gatsby_injector.engine import (
    ProvisioningError,
    create_plugin_symlinks,
    inject_plugins,
    load_manifest,
    restore_backups,
)
from gatsby_injector.engine.manifest import manifest_path
from gatsby_injector.engine.symlinks import FAILED

_project_dir = click.argument(
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)


def _report_catalog_error(error: CatalogError) -> None:
    click.echo(f"Error: {error}", err=True)
    for issue in error.issues:
        click.echo(f"  - {issue}", err=True)


@click.command()
@_project_dir
@click.option(
    "--gatsby-version",
    default=None,
    help="Gatsby version reported by framework detection.",
)
def inject(project_dir: Path, gatsby_version: str | None):
    """Inject platform plugins into gatsby-node and gatsby-config.

    Feature flags are read from the environment:

        VERCEL_GATSBY_BUILDER_PLUGIN=1   # chain the builder into onPostBuild
        VERCEL_ANALYTICS_ID=<id>         # add the analytics plugin
    """
    config = InjectorConfig.from_env()
    try:
        result = asyncio.run(inject_plugins(gatsby_version, project_dir, config))
    except CatalogError as e:
        _report_catalog_error(e)
        raise SystemExit(1)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not result:
        click.echo("No platform plugins apply. Nothing to inject.")
        return

    click.echo(f"Injected {len(result.plugins)} plugin(s):")
    for package in result.plugins:
        click.echo(f"  + {package}")
    for logical, path in result.files.items():
        backup = result.backups.get(logical)
        suffix = f" (original kept in {backup.name})" if backup else ""
        click.echo(f"Generated: {path.name}{suffix}")
    for key, value in result.environment.items():
        click.echo(f"export {key}={value}")


@click.command()
@_project_dir
def symlinks(project_dir: Path):
    """Link platform plugin packages into node_modules."""
    config = InjectorConfig.from_env()
    try:
        outcomes = create_plugin_symlinks(project_dir, config)
    except CatalogError as e:
        _report_catalog_error(e)
        raise SystemExit(1)
    except ProvisioningError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    for outcome in outcomes:
        line = f"  {outcome.status:<8} {outcome.package}"
        if outcome.error:
            line += f" ({outcome.error})"
        click.echo(line)

    if any(o.status == FAILED for o in outcomes):
        click.echo("Some plugins could not be linked.", err=True)


@click.command()
@_project_dir
def status(project_dir: Path):
    """Show what a previous injection wrote into the project."""
    if not manifest_path(project_dir).exists():
        click.echo("Project has not been injected.")
        return

    manifest = load_manifest(project_dir)
    click.echo(f"Plugins: {', '.join(manifest.plugins) or '(none)'}")
    for logical, record in sorted(manifest.files.items()):
        state = "unchanged" if record.matches(project_dir) else "modified"
        backup = f" <- {record.backup}" if record.backup else ""
        click.echo(f"  {logical:<7} {record.path} [{state}]{backup}")


@click.command()
@_project_dir
def restore(project_dir: Path):
    """Put the owner's original files back and remove generated ones."""
    changed = restore_backups(project_dir)
    if not changed:
        click.echo("Nothing to restore.")
        return
    for path in changed:
        click.echo(f"Restored: {path.name}")

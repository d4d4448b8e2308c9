"""Injection engine: patches a Gatsby project's build files.

Orchestrates one build's injection:

1. Gate on feature flags and the detected Gatsby version.
2. For gatsby-config and (when the builder plugin applies) gatsby-node,
   concurrently: detect dialect -> ensure backup -> compose -> write.
3. Record the result in the injection manifest.

Symlink provisioning is a separate entry point, run once per build.

Usage:
    import asyncio
    from gatsby_injector import inject_plugins, create_plugin_symlinks

    result = asyncio.run(inject_plugins("4.24.0", project_dir))
    if result:
        create_plugin_symlinks(project_dir)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from gatsby_injector.catalog import PluginCatalog
from gatsby_injector.composers import compose_config_file, compose_hook_file
from gatsby_injector.config import GATSBY_ANALYTICS_ID_ENV, InjectorConfig
from gatsby_injector.core.types import (
    InjectionContext,
    LogicalFile,
    ManagedFile,
    ModuleDialect,
)
from gatsby_injector.engine.backup import ensure_backup
from gatsby_injector.engine.dialect import detect_dialect
from gatsby_injector.engine.gate import GateDecision, evaluate_gate
from gatsby_injector.engine.manifest import (
    FileRecord,
    content_hash,
    load_manifest,
    save_manifest,
)
from gatsby_injector.engine.symlinks import SymlinkOutcome, link_plugins

logger = logging.getLogger(__name__)

# (dialect, owner module specifier or None) -> file text
Renderer = Callable[[ModuleDialect, str | None], str]


@dataclass
class InjectionResult:
    """What an applicable injection run did.

    Attributes:
        plugins: Packages injected, in catalog order
        files: Generated file per logical name ("hook", "config")
        backups: Owner backup per logical name, where one exists
        environment: Variables the build should export for Gatsby
    """

    plugins: list[str] = field(default_factory=list)
    files: dict[str, Path] = field(default_factory=dict)
    backups: dict[str, Path] = field(default_factory=dict)
    environment: dict[str, str] = field(default_factory=dict)


def _write_file(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)


def _run_pipeline(
    project_dir: Path,
    logical: LogicalFile,
    record: FileRecord | None,
    render: Renderer,
) -> tuple[ManagedFile, FileRecord, bool]:
    """detect dialect -> ensure backup -> compose -> write, for one file."""
    dialect = detect_dialect(project_dir, logical)
    managed = ManagedFile.resolve(project_dir, logical, dialect)

    has_backup = ensure_backup(managed, project_dir, record)
    owner_module = managed.backup_specifier if has_backup else None

    content = render(dialect, owner_module)
    _write_file(managed.path, content)
    logger.info(
        "Wrote %s (%s%s)",
        managed.path.name,
        dialect.value,
        ", chained to backup" if has_backup else "",
    )

    new_record = FileRecord(
        path=managed.path.relative_to(project_dir).as_posix(),
        sha256=content_hash(content),
        backup=managed.backup_path.relative_to(project_dir).as_posix()
        if has_backup
        else None,
    )
    return managed, new_record, has_backup


class InjectionEngine:
    """Applies platform plugins to Gatsby projects.

    The engine holds no per-project state; every call recomputes dialects
    and backup state from the filesystem.
    """

    def __init__(self, config: InjectorConfig | None = None):
        self.config = config or InjectorConfig.from_env()
        self._catalog: PluginCatalog | None = None

    @property
    def catalog(self) -> PluginCatalog:
        if self._catalog is None:
            self._catalog = self.config.load_catalog()
        return self._catalog

    def evaluate(self, context: InjectionContext) -> GateDecision:
        if not context.flags.any_enabled:
            return GateDecision()
        return evaluate_gate(context.detected_version, context.flags, self.catalog)

    async def inject(self, context: InjectionContext) -> InjectionResult | None:
        """Run injection for one build.

        Returns:
            None when no plugin applies (nothing is read or written),
            otherwise an InjectionResult.

        Raises:
            OSError: The first pipeline failure, propagated unmodified.
                Files the other pipeline wrote are kept and recorded in the
                manifest before the error is raised.
        """
        decision = self.evaluate(context)
        if not decision:
            logger.info(
                "No platform plugins apply (version=%s), skipping injection",
                context.detected_version,
            )
            return None

        project_dir = context.project_dir
        manifest = load_manifest(project_dir)

        config_plugins = decision.config_plugins
        jobs: list[tuple[LogicalFile, Renderer]] = [
            (
                LogicalFile.CONFIG,
                lambda dialect, owner: compose_config_file(dialect, owner, config_plugins),
            )
        ]
        hook_plugin = decision.hook_plugin
        if hook_plugin is not None:
            jobs.append(
                (
                    LogicalFile.HOOK,
                    lambda dialect, owner: compose_hook_file(dialect, owner, hook_plugin),
                )
            )

        # Worker threads cannot be cancelled, so a failing pipeline does not
        # stop the other from writing. Every file that was written must still
        # reach the manifest before the error is raised.
        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(
                    _run_pipeline,
                    project_dir,
                    logical,
                    manifest.files.get(logical.value),
                    render,
                )
                for logical, render in jobs
            ),
            return_exceptions=True,
        )

        result = InjectionResult(plugins=[p.package for p in decision.plugins])
        errors: list[BaseException] = []
        for (logical, _), outcome in zip(jobs, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Failed to write %s: %s", logical.basename, outcome)
                errors.append(outcome)
                continue
            managed, record, has_backup = outcome
            key = managed.logical.value
            manifest.files[key] = record
            result.files[key] = managed.path
            if has_backup:
                result.backups[key] = managed.backup_path

        if errors:
            if result.files:
                save_manifest(manifest, project_dir)
            raise errors[0]

        manifest.plugins = list(result.plugins)
        save_manifest(manifest, project_dir)

        if any(p.flag == "analytics" for p in decision.plugins):
            result.environment[GATSBY_ANALYTICS_ID_ENV] = context.flags.analytics_id

        return result

    def provision(self, project_dir: Path) -> list[SymlinkOutcome]:
        return link_plugins(
            project_dir, self.catalog, self.config.platform_modules_dir
        )


async def inject_plugins(
    detected_version: str | None,
    project_dir: Path | str,
    config: InjectorConfig | None = None,
) -> InjectionResult | None:
    """Inject platform plugins into the Gatsby project at *project_dir*.

    Args:
        detected_version: Gatsby version from framework detection, or None.
        project_dir: Project root.
        config: Flags and locations. Read from the environment if omitted.

    Returns:
        None when nothing applies, otherwise the InjectionResult.
    """
    engine = InjectionEngine(config)
    context = InjectionContext(
        detected_version=detected_version,
        project_dir=Path(project_dir),
        flags=engine.config.flags,
    )
    return await engine.inject(context)


def create_plugin_symlinks(
    project_dir: Path | str,
    config: InjectorConfig | None = None,
) -> list[SymlinkOutcome]:
    """Make every platform plugin resolvable from *project_dir*."""
    return InjectionEngine(config).provision(Path(project_dir))

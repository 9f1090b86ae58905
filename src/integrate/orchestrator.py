"""Integration orchestration.

This module coordinates pointer resolution, the idempotency check, tree
lifecycle, upstream fetch and transformation dispatch. The procedure, not
the orchestrator, commits the state marker, so the marker always reflects
exactly what was applied.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from core.config import IntegrationConfig
from core.errors import ProcedureError, SourceTreeConflictError, TransformationError
from core.logging_config import get_logger
from core.types import IntegrationResult, StateMarker, TransformationReport
from core.versioning import parse_upstream_version
from integrate.run_lock import RunLock
from integrate.state_marker import read_state_marker
from integrate.upstream_fetch import UpstreamFetcher
from transformations.procedure import TransformationProcedure
from transformations.registry import (
    TransformationRegistry,
    default_registry,
    resolve_active_transformation,
)

_LOGGER = get_logger(__name__)


class Integrator:
    """Single-invocation driver for one project root."""

    def __init__(
        self,
        config: IntegrationConfig,
        registry: TransformationRegistry | None = None,
        fetcher: UpstreamFetcher | None = None,
    ) -> None:
        self._config = config
        self._registry = registry or default_registry(config.marker_file_name)
        self._fetcher = fetcher or UpstreamFetcher(config)

    def integrate(self, upstream_version: str, force: bool = False) -> IntegrationResult:
        """Fetch and transform an upstream release unless already integrated.

        Args:
            upstream_version: Upstream release identifier, e.g. ``2.3.10``.
            force: Delete and re-fetch even when the marker matches.

        Returns:
            Result describing whether work was performed.

        Raises:
            VersionFormatError: If the release identifier is malformed.
            ProcedureNotFoundError: If the active transformation is unknown.
            IncompatibleUpstreamError: If it does not cover the release.
            RunLockError: If another invocation holds the lock.
            SourceTreeConflictError: If an unmarked tree blocks the run.
            FetchError: If download or extraction fails.
            TransformationError: If the procedure fails.
        """
        parse_upstream_version(upstream_version)
        transformation_version = resolve_active_transformation(self._config)
        marker = read_state_marker(self._config.marker_path)
        if not force and _matches_request(marker, upstream_version):
            _log_skip(marker, upstream_version, transformation_version)
            return IntegrationResult(
                status="already_integrated",
                upstream_version=upstream_version,
                transformation_version=transformation_version,
                tree_root=self._config.tree_root,
            )
        procedure = self._registry.resolve_for_upstream(transformation_version, upstream_version)
        with RunLock(self._config.lock_path):
            self._reset_tree(force)
            tree_root = self._fetcher.fetch(upstream_version)
            report = _run_procedure(procedure, tree_root, upstream_version)
        _LOGGER.info(
            "integration_completed",
            upstream_version=upstream_version,
            transformation_version=transformation_version,
            tree_root=str(tree_root),
            relocated=list(report.relocated),
            skipped=list(report.skipped),
            forced=force,
        )
        return IntegrationResult(
            status="integrated",
            upstream_version=upstream_version,
            transformation_version=transformation_version,
            tree_root=tree_root,
            report=report,
        )

    def _reset_tree(self, force: bool) -> None:
        """Delete a transformed or forced tree; refuse an unmarked one."""
        tree_root = self._config.tree_root
        if not tree_root.exists() and not tree_root.is_symlink():
            return
        marker_present = self._config.marker_path.exists()
        if not force and not marker_present:
            raise SourceTreeConflictError(
                f"Source tree {tree_root} exists without a state marker, so an earlier run "
                "did not complete. Inspect it, then re-run with --force to replace it."
            )
        _LOGGER.info(
            "source_tree_cleaning",
            tree_root=str(tree_root),
            forced=force,
            marker_present=marker_present,
        )
        try:
            _remove_path(tree_root)
        except OSError as error:
            raise SourceTreeConflictError(
                f"Failed to delete existing source tree {tree_root}: {error}. "
                "Remove it manually and retry."
            ) from error


def integrate_upstream(
    upstream_version: str,
    force: bool,
    config: IntegrationConfig,
) -> IntegrationResult:
    """Run one integration with the built-in registry and HTTP fetcher."""
    return Integrator(config).integrate(upstream_version, force=force)


def _matches_request(marker: StateMarker | None, upstream_version: str) -> bool:
    return marker is not None and marker.upstream_version == upstream_version


def _log_skip(marker: StateMarker | None, upstream_version: str, transformation_version: str) -> None:
    if marker is not None and marker.transformation_version != transformation_version:
        _LOGGER.warning(
            "transformation_version_differs",
            applied=marker.transformation_version,
            active=transformation_version,
            hint="re-run with --force to apply the active transformation",
        )
    _LOGGER.info("integration_skipped", upstream_version=upstream_version, reason="already_integrated")


def _run_procedure(
    procedure: TransformationProcedure,
    tree_root: Path,
    upstream_version: str,
) -> TransformationReport:
    try:
        return procedure.apply(tree_root, upstream_version)
    except (ProcedureError, OSError) as error:
        _LOGGER.error(
            "transformation_failed",
            transformation_version=procedure.version,
            tree_root=str(tree_root),
            error=str(error),
        )
        raise TransformationError(
            f"Transformation {procedure.version} failed: {error} "
            f"The tree at {tree_root} is left as-is for inspection; re-run with --force."
        ) from error


def _remove_path(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)

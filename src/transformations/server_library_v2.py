"""Transformation v2.0: SurrealDB 2.x application to server library.

The upstream 2.x tree keeps its server under ``src/``. This procedure moves
the server components into a ``crates/server`` workspace member, writes a
library entry point with extension hooks, registers the member in the
workspace manifest and commits the state marker.

Every step tolerates being re-run: directories are created idempotently,
relocations skip sources that are already gone, and the manifest member is
only inserted when absent. The marker is written last, so an interrupted
run always leaves an unmarked tree.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import (
    DEFAULT_SERVER_CRATE_VERSION,
    SERVER_CRATE_MEMBER,
    STATE_MARKER_FILE_NAME,
    WORKSPACE_MANIFEST_FILE_NAME,
)
from core.errors import PreconditionError, ProcedureError
from core.logging_config import get_logger
from core.types import StateMarker, TransformationReport, TransformationStage
from core.versioning import UpstreamVersionRange
from integrate.state_marker import write_state_marker
from transformations.server_library import render_crate_manifest, render_library_entry_point
from transformations.workspace_manifest import add_workspace_member

_LOGGER = get_logger(__name__)

_SOURCE_ANCHOR = "src"
_SERVER_MODULES = ("cli", "net", "rpc")


class ServerLibraryTransformation:
    """Transformation ``v2.0`` for upstream releases ``>=2.0.0,<3.0.0``."""

    version = "v2.0"
    compatible_range = UpstreamVersionRange.parse(">=2.0.0,<3.0.0")

    def __init__(self, marker_file_name: str = STATE_MARKER_FILE_NAME) -> None:
        self._marker_file_name = marker_file_name

    def apply(self, tree_root: Path, upstream_version: str | None) -> TransformationReport:
        """Transform ``tree_root`` in place and commit the state marker.

        Args:
            tree_root: Freshly extracted upstream source tree.
            upstream_version: Release identifier stamped into the marker.

        Returns:
            Report of relocated and skipped components.

        Raises:
            PreconditionError: If the tree lacks the upstream layout anchor.
            ManifestPatchError: If the workspace manifest cannot be patched.
            ProcedureError: If any filesystem edit fails.
        """
        stages: list[TransformationStage] = ["unvalidated"]
        _LOGGER.info(
            "transformation_started",
            transformation_version=self.version,
            tree_root=str(tree_root),
            upstream_version=upstream_version,
        )
        self._validate(tree_root)
        self._advance(stages, "validated")

        crate_src = self._create_skeleton(tree_root)
        self._advance(stages, "skeleton_created")

        relocated, skipped = self._relocate(tree_root, crate_src)
        self._advance(stages, "relocated")

        self._synthesize_artifacts(tree_root, crate_src, upstream_version)
        self._advance(stages, "artifacts_synthesized")

        manifest_updated = add_workspace_member(
            tree_root / WORKSPACE_MANIFEST_FILE_NAME,
            SERVER_CRATE_MEMBER,
        )
        self._advance(stages, "manifest_patched")

        marker = StateMarker(transformation_version=self.version, upstream_version=upstream_version)
        write_state_marker(tree_root / self._marker_file_name, marker)
        self._advance(stages, "committed")

        return TransformationReport(
            transformation_version=self.version,
            upstream_version=upstream_version,
            relocated=relocated,
            skipped=skipped,
            manifest_updated=manifest_updated,
            stages=tuple(stages),
        )

    def _validate(self, tree_root: Path) -> None:
        anchor = tree_root / _SOURCE_ANCHOR
        if not anchor.is_dir():
            raise PreconditionError(
                f"Expected upstream directory {anchor} not found. "
                f"Transformation {self.version} requires a SurrealDB 2.x source layout."
            )

    def _create_skeleton(self, tree_root: Path) -> Path:
        crate_src = tree_root / SERVER_CRATE_MEMBER / "src"
        try:
            crate_src.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise ProcedureError(f"Failed to create crate skeleton {crate_src}: {error}.") from error
        return crate_src

    def _relocate(self, tree_root: Path, crate_src: Path) -> tuple[tuple[str, ...], tuple[str, ...]]:
        relocated: list[str] = []
        skipped: list[str] = []
        for module_name in _SERVER_MODULES:
            source = tree_root / _SOURCE_ANCHOR / module_name
            target = crate_src / module_name
            relative_source = f"{_SOURCE_ANCHOR}/{module_name}"
            if not source.is_dir():
                _LOGGER.info("relocation_skipped", source=relative_source, reason="absent")
                skipped.append(relative_source)
                continue
            if target.exists():
                raise ProcedureError(
                    f"Cannot move {source} to {target}: target already exists. "
                    "The tree holds a partial earlier run; re-run the integration with --force."
                )
            try:
                source.rename(target)
            except OSError as error:
                raise ProcedureError(f"Failed to move {source} to {target}: {error}.") from error
            relocated.append(relative_source)
        return tuple(relocated), tuple(skipped)

    def _synthesize_artifacts(
        self,
        tree_root: Path,
        crate_src: Path,
        upstream_version: str | None,
    ) -> None:
        crate_version = upstream_version or DEFAULT_SERVER_CRATE_VERSION
        entry_point = crate_src / "lib.rs"
        crate_manifest = tree_root / SERVER_CRATE_MEMBER / WORKSPACE_MANIFEST_FILE_NAME
        try:
            entry_point.write_text(render_library_entry_point(_SERVER_MODULES), encoding="utf-8")
            crate_manifest.write_text(render_crate_manifest(crate_version), encoding="utf-8")
        except OSError as error:
            raise ProcedureError(
                f"Failed to write server crate artifacts under {crate_src.parent}: {error}."
            ) from error

    def _advance(self, stages: list[TransformationStage], stage: TransformationStage) -> None:
        stages.append(stage)
        _LOGGER.info("transformation_stage", transformation_version=self.version, stage=stage)

"""Shared typed models.

This module defines immutable data models passed between the
orchestrator, the state marker and transformation procedures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

IntegrationStatus = Literal["integrated", "already_integrated"]
TransformationStage = Literal[
    "unvalidated",
    "validated",
    "skeleton_created",
    "relocated",
    "artifacts_synthesized",
    "manifest_patched",
    "committed",
]


@dataclass(frozen=True)
class StateMarker:
    """Persisted record of the last successful transformation.

    Attributes:
        transformation_version: Transformation identifier that was applied.
        upstream_version: Upstream release that was transformed, if supplied.
    """

    transformation_version: str
    upstream_version: str | None = None


@dataclass(frozen=True)
class TransformationReport:
    """Outcome of one transformation procedure run.

    Attributes:
        transformation_version: Identifier of the procedure that ran.
        upstream_version: Release identifier stamped into the marker.
        relocated: Relative paths of sub-directories that were moved.
        skipped: Relative paths whose relocation was skipped as absent.
        manifest_updated: Whether the workspace members list changed.
        stages: Stages reached, in order.
    """

    transformation_version: str
    upstream_version: str | None
    relocated: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    manifest_updated: bool = False
    stages: tuple[TransformationStage, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IntegrationResult:
    """Result of one orchestrator invocation.

    Attributes:
        status: ``integrated`` after a run, ``already_integrated`` on skip.
        upstream_version: Requested upstream release identifier.
        transformation_version: Active transformation identifier.
        tree_root: Fixed source tree path.
        report: Procedure report, absent when the run was skipped.
    """

    status: IntegrationStatus
    upstream_version: str
    transformation_version: str
    tree_root: Path
    report: TransformationReport | None = None

"""Public SDK surface for the SurrealX integration pipeline.

This module provides a stable import path for host tooling.
It re-exports the orchestrator, configuration and typed results.
"""

from __future__ import annotations

from core.config import IntegrationConfig
from core.errors import (
    ConfigError,
    FetchError,
    IncompatibleUpstreamError,
    IntegrationError,
    ManifestPatchError,
    PreconditionError,
    ProcedureNotFoundError,
    RunLockError,
    SourceTreeConflictError,
    TransformationError,
    VersionFormatError,
)
from core.types import IntegrationResult, StateMarker, TransformationReport
from integrate.orchestrator import Integrator, integrate_upstream
from integrate.state_marker import read_state_marker
from integrate.upstream_fetch import ArchiveDownloader, UpstreamFetcher
from transformations.registry import TransformationRegistry, default_registry

__all__ = [
    "ArchiveDownloader",
    "ConfigError",
    "FetchError",
    "IncompatibleUpstreamError",
    "IntegrationConfig",
    "IntegrationError",
    "IntegrationResult",
    "Integrator",
    "ManifestPatchError",
    "PreconditionError",
    "ProcedureNotFoundError",
    "RunLockError",
    "SourceTreeConflictError",
    "StateMarker",
    "TransformationError",
    "TransformationRegistry",
    "TransformationReport",
    "UpstreamFetcher",
    "VersionFormatError",
    "default_registry",
    "integrate_upstream",
    "read_state_marker",
]

"""Integration exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline phase raises a specific error type so the CLI can name
the phase that failed in its one-line report.
"""

from __future__ import annotations


class IntegrationError(Exception):
    """Base exception for all integration failures."""

    phase = "integration"


class ConfigError(IntegrationError):
    """Raised for invalid or unreadable runtime configuration."""

    phase = "config"


class VersionFormatError(IntegrationError):
    """Raised when an upstream release identifier is malformed."""

    phase = "validate"


class IncompatibleUpstreamError(IntegrationError):
    """Raised when a transformation does not cover the requested release."""

    phase = "validate"


class ProcedureNotFoundError(IntegrationError):
    """Raised when no transformation is registered for an identifier."""

    phase = "dispatch"


class RunLockError(IntegrationError):
    """Raised when another invocation holds the project run lock."""

    phase = "lock"


class SourceTreeConflictError(IntegrationError):
    """Raised when an unmarked source tree blocks a non-forced run."""

    phase = "prepare"


class FetchError(IntegrationError):
    """Raised for archive download and extraction failures."""

    phase = "fetch"


class ProcedureError(IntegrationError):
    """Raised by a transformation procedure while editing the tree."""

    phase = "transform"


class PreconditionError(ProcedureError):
    """Raised when the source tree does not have the expected layout."""


class ManifestPatchError(ProcedureError):
    """Raised when the workspace manifest cannot be patched safely."""


class TransformationError(IntegrationError):
    """Raised by the orchestrator when a transformation run fails."""

    phase = "transform"

"""Transformation registry and current-pointer record.

Identifiers map to built-in procedures; nothing is registered at runtime.
The active identifier is read from a separate single-line pointer file,
so switching the default is independent of adding a new transformation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from core.config import IntegrationConfig
from core.constants import STATE_MARKER_FILE_NAME
from core.errors import ConfigError, IncompatibleUpstreamError, ProcedureNotFoundError
from core.logging_config import get_logger
from core.versioning import parse_upstream_version
from transformations.procedure import TransformationProcedure
from transformations.server_library_v2 import ServerLibraryTransformation

_LOGGER = get_logger(__name__)


class TransformationRegistry:
    """Lookup from transformation identifier to procedure."""

    def __init__(self, procedures: Iterable[TransformationProcedure]) -> None:
        self._procedures: dict[str, TransformationProcedure] = {}
        for procedure in procedures:
            if procedure.version in self._procedures:
                raise ConfigError(
                    f"Duplicate transformation identifier '{procedure.version}' in registry."
                )
            self._procedures[procedure.version] = procedure

    def versions(self) -> tuple[str, ...]:
        """Return registered identifiers in sorted order."""
        return tuple(sorted(self._procedures))

    def resolve(self, transformation_version: str) -> TransformationProcedure:
        """Return the procedure registered for an identifier.

        Raises:
            ProcedureNotFoundError: If the identifier is unknown.
        """
        procedure = self._procedures.get(transformation_version)
        if procedure is None:
            known = ", ".join(self.versions()) or "none"
            raise ProcedureNotFoundError(
                f"No transformation registered for '{transformation_version}' "
                f"(available: {known}). Fix the current pointer file."
            )
        return procedure

    def resolve_for_upstream(
        self,
        transformation_version: str,
        upstream_version: str,
    ) -> TransformationProcedure:
        """Resolve a procedure and check it covers the upstream release.

        Raises:
            ProcedureNotFoundError: If the identifier is unknown.
            IncompatibleUpstreamError: If the release is outside its range.
        """
        procedure = self.resolve(transformation_version)
        parsed_version = parse_upstream_version(upstream_version)
        if not procedure.compatible_range.contains(parsed_version):
            raise IncompatibleUpstreamError(
                f"Transformation {transformation_version} supports upstream "
                f"{procedure.compatible_range}, not {upstream_version}. "
                "Add a transformation for this release line or point current.txt at one."
            )
        return procedure


def default_registry(marker_file_name: str = STATE_MARKER_FILE_NAME) -> TransformationRegistry:
    """Build the registry of built-in transformations."""
    return TransformationRegistry([ServerLibraryTransformation(marker_file_name)])


def read_current_pointer(pointer_path: Path) -> str:
    """Read the active transformation identifier.

    Raises:
        ConfigError: If the pointer file is missing, unreadable or blank.
    """
    try:
        raw_value = pointer_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigError(
            f"Failed to read transformation pointer {pointer_path}: {error}."
        ) from error
    lines = [line.strip() for line in raw_value.splitlines() if line.strip()]
    if not lines:
        raise ConfigError(f"Transformation pointer {pointer_path} is empty.")
    return lines[0]


def resolve_active_transformation(config: IntegrationConfig) -> str:
    """Return the pointer's identifier, or the configured default."""
    try:
        return read_current_pointer(config.pointer_path)
    except ConfigError as error:
        _LOGGER.warning(
            "transformation_pointer_fallback",
            pointer_path=str(config.pointer_path),
            default_transformation=config.default_transformation,
            error=str(error),
        )
        return config.default_transformation

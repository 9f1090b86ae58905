"""State marker persistence.

The marker is a two-line file inside the source tree: the transformation
identifier, then the upstream release identifier. Its presence is the
only signal that a tree has been transformed.
"""

from __future__ import annotations

import os
from pathlib import Path

from core.constants import UNKNOWN_MARKER_VALUE
from core.errors import ProcedureError
from core.logging_config import get_logger
from core.types import StateMarker

_LOGGER = get_logger(__name__)


def read_state_marker(marker_path: Path) -> StateMarker | None:
    """Read the state marker if present.

    An unreadable or empty marker still counts as present, but it never
    matches a requested release, which forces a clean re-fetch.
    """
    if not marker_path.exists():
        return None
    try:
        lines = marker_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as error:
        _LOGGER.warning("state_marker_unreadable", marker_path=str(marker_path), error=str(error))
        return StateMarker(transformation_version=UNKNOWN_MARKER_VALUE)
    values = [line.strip() for line in lines if line.strip()]
    if not values:
        _LOGGER.warning("state_marker_empty", marker_path=str(marker_path))
        return StateMarker(transformation_version=UNKNOWN_MARKER_VALUE)
    upstream_version = values[1] if len(values) > 1 else None
    return StateMarker(transformation_version=values[0], upstream_version=upstream_version)


def render_state_marker(marker: StateMarker) -> str:
    """Render the exact on-disk marker payload."""
    payload = f"{marker.transformation_version}\n"
    if marker.upstream_version:
        payload += f"{marker.upstream_version}\n"
    return payload


def write_state_marker(marker_path: Path, marker: StateMarker) -> None:
    """Atomically write the state marker.

    Raises:
        ProcedureError: If the marker cannot be written.
    """
    temporary_path = marker_path.with_name(f"{marker_path.name}.tmp")
    try:
        temporary_path.write_text(render_state_marker(marker), encoding="utf-8")
        os.replace(temporary_path, marker_path)
    except OSError as error:
        temporary_path.unlink(missing_ok=True)
        raise ProcedureError(
            f"Failed to write state marker at {marker_path}: {error}. "
            "The tree is left unmarked; re-run with --force."
        ) from error

"""Transformation procedure contract."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from core.types import TransformationReport
from core.versioning import UpstreamVersionRange


class TransformationProcedure(Protocol):
    """One named, idempotent sequence of edits over a source tree.

    Implementations must write the state marker as their final step, and
    only after every structural edit has succeeded.
    """

    @property
    def version(self) -> str: ...

    @property
    def compatible_range(self) -> UpstreamVersionRange: ...

    def apply(self, tree_root: Path, upstream_version: str | None) -> TransformationReport: ...

"""Workspace manifest membership editing.

The manifest is parsed, mutated and serialized with tomlkit so comments
and layout of the upstream file survive the edit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import tomlkit
from tomlkit.exceptions import TOMLKitError

from core.errors import ManifestPatchError


def add_workspace_member(manifest_path: Path, member: str) -> bool:
    """Insert ``member`` into ``[workspace].members`` unless already listed.

    Args:
        manifest_path: Workspace manifest file.
        member: Relative member path, e.g. ``crates/server``.

    Returns:
        True when the manifest changed, False when the member was present.

    Raises:
        ManifestPatchError: If the manifest is missing, unparseable, or has
            no members list to patch.
    """
    document = _load_manifest(manifest_path)
    members = _find_members(document, manifest_path)
    if _normalize_member(member) in {_normalize_member(str(item)) for item in members}:
        return False
    members.append(member)
    try:
        manifest_path.write_text(tomlkit.dumps(document), encoding="utf-8")
    except OSError as error:
        raise ManifestPatchError(
            f"Failed to write workspace manifest {manifest_path}: {error}."
        ) from error
    return True


def list_workspace_members(manifest_path: Path) -> tuple[str, ...]:
    """Return the members declared in a workspace manifest."""
    document = _load_manifest(manifest_path)
    return tuple(str(item) for item in _find_members(document, manifest_path))


def _load_manifest(manifest_path: Path) -> tomlkit.TOMLDocument:
    if not manifest_path.is_file():
        raise ManifestPatchError(
            f"Workspace manifest not found at {manifest_path}. "
            "The upstream layout may have changed; inspect the tree."
        )
    try:
        return tomlkit.parse(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as error:
        raise ManifestPatchError(
            f"Failed to read workspace manifest {manifest_path}: {error}."
        ) from error
    except TOMLKitError as error:
        raise ManifestPatchError(
            f"Failed to parse workspace manifest {manifest_path}: {error}."
        ) from error


def _find_members(document: tomlkit.TOMLDocument, manifest_path: Path) -> Any:
    workspace = document.get("workspace")
    if not isinstance(workspace, Mapping):
        raise ManifestPatchError(
            f"Workspace manifest {manifest_path} has no [workspace] table. "
            "Inspect the upstream manifest before retrying."
        )
    members = workspace.get("members")
    if not isinstance(members, list):
        raise ManifestPatchError(
            f"Workspace manifest {manifest_path} has no members array under [workspace]. "
            "Inspect the upstream manifest before retrying."
        )
    return members


def _normalize_member(member: str) -> str:
    return member.strip().removeprefix("./").rstrip("/")

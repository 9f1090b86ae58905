"""Unit tests for the v2.0 server library transformation."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from core.errors import ManifestPatchError, PreconditionError, ProcedureError
from tests.upstream_fixtures import (
    MANIFEST_WITHOUT_WORKSPACE_TEXT,
    snapshot_tree,
    write_upstream_tree,
)
from transformations.server_library_v2 import ServerLibraryTransformation
from transformations.workspace_manifest import list_workspace_members


def _marker_path(tree_root: Path) -> Path:
    return tree_root / ".surrealx-transformed"


def test_apply_builds_library_layout(tmp_path: Path) -> None:
    """Relocated modules should live under the server crate."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    report = ServerLibraryTransformation().apply(tree_root, "2.3.10")

    crate_src = tree_root / "crates" / "server" / "src"
    assert report.relocated == ("src/cli", "src/net", "src/rpc")
    assert all((crate_src / name / "mod.rs").is_file() for name in ("cli", "net", "rpc"))
    assert not (tree_root / "src" / "cli").exists()
    assert (tree_root / "src" / "main.rs").is_file()


def test_apply_synthesizes_entry_point_and_crate_manifest(tmp_path: Path) -> None:
    """Entry point and crate manifest should be written at fixed paths."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    ServerLibraryTransformation().apply(tree_root, "2.3.10")

    crate_root = tree_root / "crates" / "server"
    entry_point = (crate_root / "src" / "lib.rs").read_text(encoding="utf-8")
    crate_manifest = tomlkit.parse((crate_root / "Cargo.toml").read_text(encoding="utf-8"))
    assert entry_point.count("pub mod ") == 3
    assert crate_manifest["package"]["version"] == "2.3.10"


def test_apply_registers_workspace_member_once(tmp_path: Path) -> None:
    """Workspace manifest should list the server crate exactly once."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    report = ServerLibraryTransformation().apply(tree_root, "2.3.10")

    members = list_workspace_members(tree_root / "Cargo.toml")
    assert report.manifest_updated and members.count("crates/server") == 1


def test_apply_commits_marker_last(tmp_path: Path) -> None:
    """Marker content and stage order should reflect a full run."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    report = ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert _marker_path(tree_root).read_text(encoding="utf-8") == "v2.0\n2.3.10\n"
    assert report.stages == (
        "unvalidated",
        "validated",
        "skeleton_created",
        "relocated",
        "artifacts_synthesized",
        "manifest_patched",
        "committed",
    )


def test_apply_without_upstream_version_uses_default_crate_version(tmp_path: Path) -> None:
    """Standalone runs without a release fall back to the default crate version."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    ServerLibraryTransformation().apply(tree_root, None)

    crate_manifest = (tree_root / "crates" / "server" / "Cargo.toml").read_text(encoding="utf-8")
    assert tomlkit.parse(crate_manifest)["package"]["version"] == "2.0.0"
    assert _marker_path(tree_root).read_text(encoding="utf-8") == "v2.0\n"


def test_apply_skips_absent_relocation_sources(tmp_path: Path) -> None:
    """A missing server module should be skipped, not fail the run."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb", modules=("cli", "net"))

    report = ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert report.skipped == ("src/rpc",)
    assert _marker_path(tree_root).exists()


def test_apply_rerun_after_partial_relocation_completes(tmp_path: Path) -> None:
    """Re-running after an interrupted attempt should finish the layout."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")
    crate_src = tree_root / "crates" / "server" / "src"
    crate_src.mkdir(parents=True)
    (tree_root / "src" / "cli").rename(crate_src / "cli")

    report = ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert report.skipped == ("src/cli",) and report.relocated == ("src/net", "src/rpc")


def test_apply_fails_precondition_without_mutation(tmp_path: Path) -> None:
    """Trees without the ``src`` anchor should be rejected untouched."""
    tree_root = tmp_path / "surrealdb"
    tree_root.mkdir()
    (tree_root / "README.md").write_text("not surrealdb\n", encoding="utf-8")
    before = snapshot_tree(tree_root)

    with pytest.raises(PreconditionError):
        ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert snapshot_tree(tree_root) == before and not (tree_root / "crates").exists()


def test_apply_without_manifest_anchor_writes_no_marker(tmp_path: Path) -> None:
    """Aborting at the manifest patch must leave the tree unmarked."""
    tree_root = write_upstream_tree(
        tmp_path / "surrealdb",
        manifest_text=MANIFEST_WITHOUT_WORKSPACE_TEXT,
    )

    with pytest.raises(ManifestPatchError):
        ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert not _marker_path(tree_root).exists()


def test_apply_refuses_to_nest_into_existing_target(tmp_path: Path) -> None:
    """Source and target both present means a conflicting partial run."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")
    (tree_root / "crates" / "server" / "src" / "cli").mkdir(parents=True)

    with pytest.raises(ProcedureError) as error_info:
        ServerLibraryTransformation().apply(tree_root, "2.3.10")

    assert type(error_info.value) is ProcedureError
    assert "target already exists" in str(error_info.value)
    assert not _marker_path(tree_root).exists()


def test_apply_honours_custom_marker_name(tmp_path: Path) -> None:
    """Marker file name should come from the injected configuration."""
    tree_root = write_upstream_tree(tmp_path / "surrealdb")

    ServerLibraryTransformation(marker_file_name=".integrated").apply(tree_root, "2.3.10")

    assert (tree_root / ".integrated").exists() and not _marker_path(tree_root).exists()

"""Unit tests for synthesized server crate artifacts."""

from __future__ import annotations

import tomlkit

from transformations.server_library import render_crate_manifest, render_library_entry_point


def test_render_crate_manifest_uses_upstream_version() -> None:
    """Crate version should equal the upstream release identifier."""
    document = tomlkit.parse(render_crate_manifest("2.3.10"))

    assert document["package"]["name"] == "surrealdb-server"
    assert document["package"]["version"] == "2.3.10"


def test_render_crate_manifest_declares_path_dependencies() -> None:
    """Server crate should depend on the workspace root and core crates."""
    document = tomlkit.parse(render_crate_manifest("2.3.10"))

    assert document["dependencies"]["surrealdb"]["path"] == "../.."
    assert document["dependencies"]["surrealdb-core"]["path"] == "../../core"
    assert list(document["dependencies"]["clap"]["features"]) == ["derive", "env"]


def test_render_library_entry_point_declares_modules_and_hooks() -> None:
    """Entry point should expose modules, re-exports and extension hooks."""
    entry_point = render_library_entry_point(("cli", "net", "rpc"))

    assert [line for line in entry_point.splitlines() if line.startswith("pub mod ")] == [
        "pub mod cli;",
        "pub mod net;",
        "pub mod rpc;",
    ]
    assert "pub use net::Server;" in entry_point
    assert "pub use cli::Config as ServerConfig;" in entry_point
    assert all(
        hook in entry_point for hook in ("fn extend_router", "fn on_startup", "fn on_shutdown")
    )

"""Synthesized artifacts of the server library crate.

This module renders the library entry point and the crate manifest
written into the transformed tree. Both are fixed content apart from
the relocated module names and the crate version.
"""

from __future__ import annotations

from typing import Sequence

import tomlkit
from tomlkit.items import InlineTable

from core.constants import SERVER_CRATE_NAME

_ENTRY_POINT_HEADER = """\
//! SurrealDB Server Library
//!
//! This crate exposes the SurrealDB server implementation as a reusable library.
//! It provides extension points for frameworks like SurrealX to add custom functionality.
"""

_ENTRY_POINT_BODY = """\
pub use net::Server;
pub use cli::Config as ServerConfig;

use std::future::Future;
use anyhow::Result;

/// Extension trait for customizing the SurrealDB server
pub trait ServerExtension: Send + Sync {
    /// Extend the HTTP router with custom routes
    fn extend_router(&self, router: axum::Router) -> axum::Router {
        router
    }

    /// Hook called when server starts
    fn on_startup(&self) -> impl Future<Output = Result<()>> + Send {
        async { Ok(()) }
    }

    /// Hook called when server shuts down
    fn on_shutdown(&self) -> impl Future<Output = Result<()>> + Send {
        async { Ok(()) }
    }
}
"""


def render_library_entry_point(module_names: Sequence[str]) -> str:
    """Render ``lib.rs`` declaring each relocated module as public."""
    module_lines = "".join(f"pub mod {name};\n" for name in module_names)
    return f"{_ENTRY_POINT_HEADER}\n{module_lines}\n{_ENTRY_POINT_BODY}"


def render_crate_manifest(crate_version: str) -> str:
    """Render the server crate ``Cargo.toml`` for one upstream release."""
    document = tomlkit.document()

    package = tomlkit.table()
    package.add("name", SERVER_CRATE_NAME)
    package.add("version", crate_version)
    package.add("edition", "2021")
    package.add("description", "SurrealDB server implementation as a library")
    package.add("license", "BSL-1.1")
    document.add("package", package)

    dependencies = tomlkit.table()
    dependencies.add("surrealdb", _path_dependency("../.."))
    dependencies.add("surrealdb-core", _path_dependency("../../core"))
    dependencies.add("axum", "0.7")
    tokio = tomlkit.inline_table()
    tokio.update({"version": "1", "features": ["full"]})
    dependencies.add("tokio", tokio)
    dependencies.add("anyhow", "1")
    dependencies.add("futures", "0.3")
    clap = tomlkit.table()
    clap.add("version", "4")
    clap.add("features", ["derive", "env"])
    dependencies.add("clap", clap)
    document.add("dependencies", dependencies)
    return tomlkit.dumps(document)


def _path_dependency(path: str) -> InlineTable:
    dependency = tomlkit.inline_table()
    dependency.add("path", path)
    return dependency

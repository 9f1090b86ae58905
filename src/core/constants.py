"""Core constants used across integration modules.

This module centralizes paths, file names and defaults.
Keeping values here avoids magic literals in pipeline logic.
"""

from __future__ import annotations

UPSTREAM_PROJECT_NAME = "surrealdb"
SOURCE_TREE_DIR_NAME = "surrealdb"
STATE_MARKER_FILE_NAME = ".surrealx-transformed"
INTEGRATION_DIR_NAME = "integration"
CURRENT_POINTER_FILE_NAME = "current.txt"
RUN_LOCK_FILE_NAME = ".surrealx-integrate.lock"
STAGING_DIR_PREFIX = ".surrealx-staging-"
DEFAULT_TRANSFORMATION_VERSION = "v2.0"
DEFAULT_DOWNLOAD_URL_TEMPLATE = (
    "https://github.com/surrealdb/surrealdb/archive/refs/tags/v{version}.tar.gz"
)
DOWNLOAD_URL_PLACEHOLDER = "{version}"
DOWNLOAD_ARCHIVE_FILE_NAME = "upstream.tar.gz"
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 120
DEFAULT_DOWNLOAD_RETRIES = 3
DOWNLOAD_CHUNK_SIZE = 1024 * 64
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
WORKSPACE_MANIFEST_FILE_NAME = "Cargo.toml"
SERVER_CRATE_MEMBER = "crates/server"
SERVER_CRATE_NAME = "surrealdb-server"
DEFAULT_SERVER_CRATE_VERSION = "2.0.0"
UNKNOWN_MARKER_VALUE = "unknown"

"""Runtime configuration model for the integration pipeline.

This module owns all environment variable parsing and validation.
The orchestrator consumes a typed config object instead of reading
ambient files and variables itself.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    CURRENT_POINTER_FILE_NAME,
    DEFAULT_DOWNLOAD_RETRIES,
    DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
    DEFAULT_DOWNLOAD_URL_TEMPLATE,
    DEFAULT_TRANSFORMATION_VERSION,
    DOWNLOAD_URL_PLACEHOLDER,
    INTEGRATION_DIR_NAME,
    RUN_LOCK_FILE_NAME,
    SOURCE_TREE_DIR_NAME,
    STATE_MARKER_FILE_NAME,
    UPSTREAM_PROJECT_NAME,
)
from core.errors import ConfigError


@dataclass(frozen=True)
class IntegrationConfig:
    """Validated integration configuration.

    Attributes:
        project_root: Host project root that receives the source tree.
        tree_root: Fixed path of the upstream source tree.
        pointer_path: Single-line record naming the active transformation.
        marker_file_name: State marker file name inside the source tree.
        default_transformation: Fallback when the pointer is unreadable.
        download_url_template: Archive URL with a ``{version}`` placeholder.
        archive_prefix: Archive top-level directory prefix.
        download_timeout_seconds: Per-request HTTP timeout.
        download_retries: HTTP retry budget for transient failures.
    """

    project_root: Path
    tree_root: Path
    pointer_path: Path
    marker_file_name: str = STATE_MARKER_FILE_NAME
    default_transformation: str = DEFAULT_TRANSFORMATION_VERSION
    download_url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE
    archive_prefix: str = UPSTREAM_PROJECT_NAME
    download_timeout_seconds: int = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    download_retries: int = DEFAULT_DOWNLOAD_RETRIES

    @property
    def marker_path(self) -> Path:
        """Path of the state marker co-located with the source tree."""
        return self.tree_root / self.marker_file_name

    @property
    def lock_path(self) -> Path:
        """Path of the advisory single-invocation lock file."""
        return self.project_root / RUN_LOCK_FILE_NAME

    @classmethod
    def for_project(cls, project_root: Path) -> "IntegrationConfig":
        """Build a default config with every path derived from one root."""
        resolved_root = Path(project_root).expanduser().resolve()
        return cls(
            project_root=resolved_root,
            tree_root=resolved_root / SOURCE_TREE_DIR_NAME,
            pointer_path=resolved_root / INTEGRATION_DIR_NAME / CURRENT_POINTER_FILE_NAME,
        )

    @classmethod
    def from_env(cls) -> "IntegrationConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        project_root = Path(os.getenv("SURREALX_PROJECT_ROOT", os.getcwd()))
        base = cls.for_project(project_root)
        url_template = os.getenv("SURREALX_DOWNLOAD_URL_TEMPLATE", DEFAULT_DOWNLOAD_URL_TEMPLATE)
        _validate_url_template(url_template)
        timeout = _parse_positive_int(
            "SURREALX_DOWNLOAD_TIMEOUT",
            os.getenv("SURREALX_DOWNLOAD_TIMEOUT", str(DEFAULT_DOWNLOAD_TIMEOUT_SECONDS)),
        )
        retries = _parse_positive_int(
            "SURREALX_DOWNLOAD_RETRIES",
            os.getenv("SURREALX_DOWNLOAD_RETRIES", str(DEFAULT_DOWNLOAD_RETRIES)),
            allow_zero=True,
        )
        return cls(
            project_root=base.project_root,
            tree_root=base.tree_root,
            pointer_path=base.pointer_path,
            download_url_template=url_template,
            download_timeout_seconds=timeout,
            download_retries=retries,
        )


def _validate_url_template(template: str) -> None:
    """Reject download templates that ignore the release identifier."""
    if DOWNLOAD_URL_PLACEHOLDER not in template:
        raise ConfigError(
            f"Invalid SURREALX_DOWNLOAD_URL_TEMPLATE value '{template}': "
            f"missing {DOWNLOAD_URL_PLACEHOLDER} placeholder. "
            "The archive URL must be derived from the upstream version."
        )


def _parse_positive_int(variable: str, raw_value: str, allow_zero: bool = False) -> int:
    """Parse a numeric environment value.

    Args:
        variable: Environment variable name, used in messages.
        raw_value: Raw string from environment.
        allow_zero: Whether zero is an accepted value.

    Returns:
        Parsed integer.

    Raises:
        ConfigError: If value is not an integer in range.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ConfigError(
            f"Invalid {variable} value: expected integer, got '{raw_value}'. "
            f"Set {variable} to a numeric value."
        ) from error
    minimum = 0 if allow_zero else 1
    if value < minimum:
        raise ConfigError(
            f"Invalid {variable} value: expected integer >= {minimum}, got {value}."
        )
    return value

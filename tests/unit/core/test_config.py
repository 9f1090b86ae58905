"""Unit tests for core config parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import IntegrationConfig
from core.errors import ConfigError


def test_from_env_reads_project_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Config should derive the tree and pointer paths from the project root."""
    monkeypatch.setenv("SURREALX_PROJECT_ROOT", str(tmp_path))

    config = IntegrationConfig.from_env()

    assert config.tree_root == tmp_path.resolve() / "surrealdb"
    assert config.pointer_path == tmp_path.resolve() / "integration" / "current.txt"


def test_marker_path_lives_inside_tree(tmp_path: Path) -> None:
    """State marker should be co-located with the source tree."""
    config = IntegrationConfig.for_project(tmp_path)

    assert config.marker_path == config.tree_root / ".surrealx-transformed"


def test_from_env_raises_for_invalid_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a non-numeric download timeout."""
    monkeypatch.setenv("SURREALX_DOWNLOAD_TIMEOUT", "soon")

    with pytest.raises(ConfigError):
        IntegrationConfig.from_env()


def test_from_env_raises_for_template_without_placeholder(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A download template must be parameterized by the release identifier."""
    monkeypatch.setenv("SURREALX_DOWNLOAD_URL_TEMPLATE", "https://example.invalid/latest.tar.gz")

    with pytest.raises(ConfigError):
        IntegrationConfig.from_env()


def test_from_env_accepts_zero_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    """Zero retries should disable the retry budget rather than fail."""
    monkeypatch.setenv("SURREALX_DOWNLOAD_RETRIES", "0")

    config = IntegrationConfig.from_env()

    assert config.download_retries == 0

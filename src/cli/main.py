"""Integration CLI entry point.

This module exposes ``integrate <upstream-version> [--force]``.
It maps argparse input onto the orchestrator and turns domain errors
into a one-line failure message and a non-zero exit code.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Sequence

from core.config import IntegrationConfig
from core.errors import ConfigError, IntegrationError
from core.types import IntegrationResult
from integrate.orchestrator import Integrator
from transformations.registry import resolve_active_transformation


def build_parser() -> argparse.ArgumentParser:
    """Build the integrate CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="integrate",
        description="Fetch a pinned SurrealDB release and transform it into a library tree",
    )
    parser.add_argument(
        "upstream_version",
        nargs="?",
        help="Upstream release identifier, e.g. 2.3.10",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Delete the existing tree and re-download even if already integrated",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the integrate CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.upstream_version:
        print(render_usage(_usage_config()))
        return 1
    try:
        config = IntegrationConfig.from_env()
    except IntegrationError as error:
        return _report_failure(error)
    try:
        result = Integrator(config).integrate(args.upstream_version, force=args.force)
    except IntegrationError as error:
        return _report_failure(error)
    for line in render_result(result):
        print(line)
    return 0


def render_usage(config: IntegrationConfig) -> str:
    """Render usage text including the active transformation."""
    current = resolve_active_transformation(config)
    return "\n".join(
        [
            "Usage: integrate <surrealdb-version> [--force]",
            "",
            "Examples:",
            "  integrate 2.3.10          # Integrate SurrealDB v2.3.10",
            "  integrate 2.3.10 --force  # Force re-download and transform",
            "",
            f"Current transformation: {current}",
        ]
    )


def render_result(result: IntegrationResult) -> list[str]:
    """Render printable output lines for a successful invocation."""
    lines = [
        f"status={result.status}",
        f"upstream_version={result.upstream_version}",
        f"transformation={result.transformation_version}",
        f"source_tree={result.tree_root}",
    ]
    if result.status == "already_integrated":
        lines.append("Use --force to re-integrate")
        return lines
    if result.report is not None and result.report.skipped:
        lines.append(f"skipped={','.join(result.report.skipped)}")
    tree_name = result.tree_root.name
    lines.extend(
        [
            "Next steps:",
            f"  1. Review changes: git diff {tree_name}/",
            "  2. Build workspace: cargo build --workspace",
            "  3. Run tests:       cargo test --workspace",
        ]
    )
    return lines


def _usage_config() -> IntegrationConfig:
    """Config for usage text; invalid settings only matter when integrating."""
    try:
        return IntegrationConfig.from_env()
    except ConfigError:
        return IntegrationConfig.for_project(Path.cwd())


def _report_failure(error: IntegrationError) -> int:
    print(f"{error.phase} failed: {error}", file=sys.stderr)
    return 1

"""Standalone transformation runner.

Applies one registered transformation to an existing source tree without
fetching, for operators re-running a procedure against a tree by hand.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from core.config import IntegrationConfig
from core.errors import IntegrationError
from transformations.registry import default_registry, resolve_active_transformation


def build_parser() -> argparse.ArgumentParser:
    """Build the standalone transform parser."""
    parser = argparse.ArgumentParser(
        prog="surrealx-transform",
        description="Apply a transformation to an extracted SurrealDB source tree",
    )
    parser.add_argument("source_tree", help="Path of the extracted source tree")
    parser.add_argument(
        "upstream_version",
        nargs="?",
        help="Upstream release identifier recorded in the state marker",
    )
    parser.add_argument(
        "--transformation",
        help="Transformation identifier; defaults to the current pointer",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run one transformation procedure and print its report."""
    args = build_parser().parse_args(argv)
    try:
        config = IntegrationConfig.from_env()
        transformation_version = args.transformation or resolve_active_transformation(config)
        registry = default_registry(config.marker_file_name)
        if args.upstream_version:
            procedure = registry.resolve_for_upstream(transformation_version, args.upstream_version)
        else:
            procedure = registry.resolve(transformation_version)
        report = procedure.apply(Path(args.source_tree).expanduser().resolve(), args.upstream_version)
    except IntegrationError as error:
        print(f"{error.phase} failed: {error}", file=sys.stderr)
        return 1
    print(f"transformation={report.transformation_version}")
    print(f"relocated={','.join(report.relocated) or '-'}")
    print(f"skipped={','.join(report.skipped) or '-'}")
    print(f"manifest_updated={str(report.manifest_updated).lower()}")
    return 0

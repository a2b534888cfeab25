"""Command-line interface for depzoom."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from depzoom.classify import RuleError
from depzoom.config import load_config
from depzoom.detect import FORMATS
from depzoom.pipeline import run

logger = logging.getLogger("depzoom")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depzoom",
        description="Collapse module dependencies into a component graph (GraphML).",
    )
    parser.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        metavar="INPUT",
        help="Dependency listing(s): mvn dependency:tree log, IDE export or edge list",
    )
    parser.add_argument(
        "output",
        type=Path,
        metavar="OUTPUT",
        help="GraphML file to write",
    )
    parser.add_argument(
        "-r",
        "--rules",
        type=Path,
        default=None,
        help="Component rules file (component=regex per line)",
    )
    parser.add_argument(
        "-p",
        "--prefix",
        default=None,
        help="Only keep modules whose id starts with this prefix",
    )
    parser.add_argument(
        "--pom",
        type=Path,
        default=None,
        help="Derive the prefix from this pom.xml's groupId (needs jgo)",
    )
    parser.add_argument(
        "--changes",
        type=Path,
        default=None,
        help="File of 'module count' lines used to colour nodes by churn",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="auto",
        dest="fmt",
        help="Input format (default: auto-detect)",
    )
    parser.add_argument(
        "--source-root",
        default=None,
        help="Source root inside IDE export paths (default: src/main/java/)",
    )
    parser.add_argument(
        "--no-reduce",
        action="store_const",
        const=False,
        default=None,
        dest="reduce",
        help="Keep transitive edges",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write ambiguity and cycle diagnostics to this JSON file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: .depzoom.toml or [tool.depzoom] in pyproject.toml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    config = load_config(Path.cwd(), args.config).with_overrides(
        rules=args.rules,
        prefix=args.prefix,
        pom=args.pom,
        source_root=args.source_root,
        reduce=args.reduce,
    )

    try:
        run(
            args.inputs,
            args.output,
            config=config,
            fmt=args.fmt,
            changes=args.changes,
            report=args.report,
        )
    except (OSError, RuleError) as e:
        logger.error("depzoom: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

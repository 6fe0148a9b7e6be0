"""Command line interface for prereqscan."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

from .core.config import get_settings
from .core.errors import PluginError
from .core.logging import get_context_logger, setup_logging
from .requirements import ScanReport
from .scan import Scanner

PERL_SUFFIXES = (".pm", ".pl", ".t", ".psgi")
KINDS = ("requires", "recommends", "suggests", "noes")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prereqscan",
        description="List the modules Perl files depend on.",
    )
    parser.add_argument(
        "paths",
        type=Path,
        nargs="+",
        metavar="PATH",
        help="Files to scan; directories are searched for .pm, .pl, .t and .psgi files.",
    )
    parser.add_argument(
        "--parsers",
        action="append",
        metavar="SPEC",
        help="Parser plugin to enable (:default, :bundled, Name, +module:Class, -Name). "
        "May be repeated.",
    )
    parser.add_argument(
        "--suggests",
        action="store_true",
        default=None,
        help="Report modules loaded inside eval as suggestions.",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json", "yaml"),
        default="text",
        help="Output format (default: text).",
    )
    parser.add_argument(
        "--show-errors",
        action="store_true",
        help="Include scan diagnostics in the output.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 if any file produced diagnostics.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more (repeat for debug output).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )
    return parser


def collect_files(paths: list[Path]) -> tuple[list[Path], list[Path]]:
    """Expand directories into Perl files; returns (files, missing paths)."""
    files: list[Path] = []
    missing: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in PERL_SUFFIXES)
            )
        elif path.is_file():
            files.append(path)
        else:
            missing.append(path)
    return files, missing


def render(report: ScanReport, fmt: str, show_errors: bool) -> str:
    data = report.model_dump(include=set(KINDS) | ({"errors", "warnings"} if show_errors else set()))
    data = {key: value for key, value in data.items() if value}
    if report.perl6:
        data["perl6"] = True
    if fmt == "json":
        return json.dumps(data, indent=2, sort_keys=True)
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=True).rstrip("\n")

    lines: list[str] = []
    for kind in KINDS:
        requirements = getattr(report, kind)
        if not requirements:
            continue
        lines.append(f"{kind}:")
        width = max(len(name) for name in requirements)
        for name, version in requirements.items():
            lines.append(f"  {name:<{width}}  {version}")
    if report.perl6:
        lines.append("perl6: yes")
    if show_errors:
        for title, messages in (("errors", report.errors), ("warnings", report.warnings)):
            if messages:
                lines.append(f"{title}:")
                lines.extend(f"  {message}" for message in messages)
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.quiet:
        level = "ERROR"
    elif args.verbose:
        level = "DEBUG" if args.verbose > 1 else "INFO"
    else:
        level = None
    setup_logging(settings, level=level)
    logger = get_context_logger(__name__, command="prereqscan")

    files, missing = collect_files(args.paths)
    for path in missing:
        print(f"Error: {path} does not exist", file=sys.stderr)
    if missing:
        return 1

    try:
        scanner = Scanner(parsers=args.parsers, suggests=args.suggests, settings=settings)
    except PluginError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    reports = []
    for path in files:
        ctx = scanner.scan_file(path)
        report = ctx.report()
        if report.errors:
            logger.info(
                "Diagnostics while scanning %s", path, extra_data={"file": str(path), "errors": report.errors}
            )
        reports.append(report)

    merged = ScanReport.merge(reports)
    output = render(merged, args.format, args.show_errors)
    if output:
        print(output)

    if args.strict and merged.errors:
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""Command line interface: lint an unpacked extension or a .zip/.xpi archive."""

import argparse
import asyncio
import logging
import sys
import zipfile
from pathlib import Path

from .audit import AuditLogger
from .compat.index import CompatibilityIndex
from .models.config import ValidationContext
from .models.diagnostic import Diagnostic, LintReport
from .package import open_package
from .validators.manifest import lint_manifest_text

MANIFEST_JSON = "manifest.json"

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2


def format_diagnostic(diagnostic: Diagnostic) -> str:
    line = f"{diagnostic.severity.value.upper():<8} {diagnostic.code}: {diagnostic.message}"
    location = diagnostic.file or diagnostic.instance_path
    if location:
        line += f" ({location})"
    return line


def format_report(report: LintReport) -> str:
    """Human readable report: one line per diagnostic plus a summary."""
    lines = [format_diagnostic(d) for d in (*report.errors, *report.warnings, *report.notices)]
    lines.append(
        f"{'valid' if report.valid else 'invalid'}: "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings, "
        f"{len(report.notices)} notices"
    )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manifest-lint",
        description="Lint a browser extension manifest and its packaged files",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Extension directory or .zip/.xpi archive",
    )
    parser.add_argument(
        "--privileged",
        action="store_true",
        help="Treat the add-on as privileged",
    )
    parser.add_argument(
        "--already-signed",
        action="store_true",
        help="The add-on is already signed (privilege findings become warnings)",
    )
    parser.add_argument(
        "--self-hosted",
        action="store_true",
        help="The add-on is self-hosted (allows applications.gecko.update_url)",
    )
    parser.add_argument(
        "--enable-background-service-worker",
        action="store_true",
        help="Accept background.service_worker",
    )
    parser.add_argument(
        "--compat-data",
        type=Path,
        default=None,
        help="Path to browser-compat-data JSON (compat checks are skipped without it)",
    )
    parser.add_argument(
        "--output",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--audit-log",
        type=Path,
        default=None,
        help="Append a run summary to this audit log file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    audit = AuditLogger(args.audit_log) if args.audit_log else None

    try:
        package = open_package(args.path)
        if not package.exists(MANIFEST_JSON):
            raise FileNotFoundError(f"No {MANIFEST_JSON} in {args.path}")
        text = package.read_text(MANIFEST_JSON)
        compat_index = CompatibilityIndex.from_file(args.compat_data) if args.compat_data else None
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        print(f"Error: {e}", file=sys.stderr)
        if audit:
            audit.log_read_error(str(args.path), e)
        return EXIT_UNREADABLE

    context = ValidationContext(
        privileged=args.privileged,
        already_signed=args.already_signed,
        self_hosted=args.self_hosted,
        enable_background_service_worker=args.enable_background_service_worker,
    )
    report = asyncio.run(
        lint_manifest_text(text, package, context=context, compat_index=compat_index)
    )

    if args.output == "json":
        print(report.model_dump_json(indent=2))
    else:
        print(format_report(report))

    if audit:
        audit.log_report(str(args.path), report)

    return EXIT_VALID if report.valid else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())

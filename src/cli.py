"""Command-line interface for apisniff."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from check import run_units
from check.engine import SymbolIndexEngine
from check.orchestrator import CheckOrchestrator
from check.report import TextReportSink
from check.runner import build_caches
from classpath.artifacts import LazyArtifactSet
from contract.artifacts import SIGNATURE_SUFFIX, safe_unit_name
from contract.validation import validate_artifacts
from errors import ApiSniffError
from logs import configure_logging
from rules.config import (
    ApiSniffConfig,
    cache_dir,
    load_config,
    module_infos,
    reports_dir,
    signature_build_inputs,
    signature_dir,
    unit_check_configs,
)
from signatures.builder import build_signature_file
from signatures.info import summarize_signature
from verify.verify import verify_cache_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root holding apisniff.toml (default: .)",
    )


def _add_unit_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--unit",
        action="append",
        default=None,
        help="Compilation unit to process (repeatable; default: all)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apisniff")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Check compiled classes against signatures"
    )
    _add_common_paths(check_parser)
    _add_unit_option(check_parser)
    check_parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Units checked in parallel (default: config max_workers)",
    )

    cache_parser = subparsers.add_parser(
        "build-cache", help="Build per-unit cached signatures only"
    )
    _add_common_paths(cache_parser)
    _add_unit_option(cache_parser)

    signature_parser = subparsers.add_parser(
        "build-signature", help="Build a signature from the [signature] section"
    )
    _add_common_paths(signature_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify determinism of cached signatures"
    )
    _add_common_paths(verify_parser)

    validate_parser = subparsers.add_parser(
        "validate", help="Validate signature and reference index files"
    )
    validate_parser.add_argument("files", nargs="+", help="Files to validate")
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat missing signature headers as errors",
    )

    info_parser = subparsers.add_parser("info", help="Summarize a signature file")
    info_parser.add_argument("file", help="Signature file")
    info_parser.add_argument(
        "--top", type=int, default=20, help="Packages to list (default: 20)"
    )

    return parser


def _orchestrator(
    root: Path, config: ApiSniffConfig, *, with_reports: bool = False
) -> CheckOrchestrator:
    artifacts = LazyArtifactSet(lambda: module_infos(root, config))
    sink = (
        TextReportSink(reports_dir(root, config), config.report_format)
        if with_reports
        else None
    )
    return CheckOrchestrator(SymbolIndexEngine(), artifacts, report_sink=sink)


def _handle_check(root: Path, units: list[str] | None, max_workers: int | None) -> int:
    config = load_config(root)
    if config.debug:
        configure_logging(verbose=True)
    configs = unit_check_configs(root, config, units=units)
    orchestrator = _orchestrator(root, config, with_reports=True)

    results = run_units(
        orchestrator,
        configs,
        max_workers=max_workers or config.max_workers,
    )

    exit_code = 0
    for result in results:
        for violation in result.violations:
            sys.stderr.write(f"[{result.unit_name}] {violation.format()}\n")
        if result.error is not None:
            sys.stderr.write(f"{result.unit_name}: error: {result.error}\n")
        if result.report_path is not None:
            sys.stdout.write(f"{result.unit_name}: report {result.report_path}\n")
        if not result.ok:
            exit_code = 1
    return exit_code


def _handle_build_cache(root: Path, units: list[str] | None) -> int:
    config = load_config(root)
    configs = unit_check_configs(root, config, units=units)
    results = build_caches(_orchestrator(root, config), configs)

    exit_code = 0
    for result in results:
        if result.error is not None:
            sys.stderr.write(f"{result.unit_name}: error: {result.error}\n")
            exit_code = 1
        elif result.cache is not None:
            for path in result.cache.paths:
                sys.stdout.write(f"{result.unit_name}: {path}\n")
    return exit_code


def _handle_build_signature(root: Path) -> int:
    config = load_config(root)
    if config.signature is None:
        sys.stderr.write("error: no [signature] section configured\n")
        return 2
    files, signatures = signature_build_inputs(root, config)
    output_name = config.signature.output_name or safe_unit_name(root.name)
    output = signature_dir(root, config) / f"{output_name}{SIGNATURE_SUFFIX}"
    build_signature_file(
        SymbolIndexEngine(),
        files=files,
        signatures=signatures,
        output=output,
        include_classes=config.signature.include,
        exclude_classes=config.signature.exclude,
    )
    sys.stdout.write(f"{output}\n")
    return 0


def _handle_verify(root: Path) -> int:
    config = load_config(root)
    resolved_cache_dir = cache_dir(root, config)
    try:
        result = verify_cache_determinism(
            orchestrator=_orchestrator(root, config),
            configs=unit_check_configs(root, config),
            cache_dir=resolved_cache_dir,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"cache-dir: {resolved_cache_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def _handle_validate(files: list[str], *, strict: bool) -> int:
    paths = [Path(name).expanduser().resolve() for name in files]
    result = validate_artifacts(paths, strict_schema_version=strict)
    for warning in result.warnings:
        sys.stderr.write(f"{warning.location()}: warning: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_info(file: str, top: int) -> int:
    summary = summarize_signature(Path(file).expanduser().resolve(), top=top)
    for line in summary.lines():
        sys.stdout.write(f"{line}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "validate":
            return _handle_validate(args.files, strict=args.strict)

        if args.command == "info":
            return _handle_info(args.file, args.top)

        root = Path(args.root).expanduser().resolve()

        if args.command == "check":
            return _handle_check(root, args.unit, args.max_workers)

        if args.command == "build-cache":
            return _handle_build_cache(root, args.unit)

        if args.command == "build-signature":
            return _handle_build_signature(root)

        if args.command == "verify":
            return _handle_verify(root)
    except ApiSniffError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())

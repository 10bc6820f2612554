"""
Command-line interface for checking (and fixing) import styles in JavaScript files.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import esprima

from emitter import apply_fixes
from frontend import FrontEndResult, load_frontend, run_frontend
from rules import (
    ConfigError,
    ImportStyleOptions,
    ImportStyleRule,
    Violation,
    load_options,
)

logger = logging.getLogger("js_import_style")

MAX_FIX_PASSES = 10


def _format_location(line: int | None, column: int | None) -> str:
    if line is None:
        return ""
    if column is None:
        return f":{line}"
    return f":{line}:{column + 1}"


def _print_diagnostics(messages: List[str]) -> None:
    if not messages:
        return
    for message in messages:
        sys.stderr.write(message + "\n")


def _collect_diagnostics(frontend_result: FrontEndResult) -> List[str]:
    diagnostics: List[str] = []
    source_name = frontend_result.parse.source_name

    for error in frontend_result.parse.errors:
        loc = _format_location(error.line, error.column)
        diagnostics.append(f"ERROR {source_name}{loc}: {error.description}")

    analysis = frontend_result.analysis
    if analysis:
        for issue in analysis.issues:
            loc = _format_location(issue.loc.line, issue.loc.column)
            diagnostics.append(f"WARNING {source_name}{loc}: {issue.message}")

    return diagnostics


def _format_violation(source_name: str, violation: Violation) -> str:
    loc = _format_location(violation.line, violation.column)
    suffix = " [fixable]" if violation.fixable else ""
    return f"{source_name}{loc}: import-style: {violation.message}{suffix}"


def _frontend_options(args: argparse.Namespace) -> dict:
    return {
        "tolerant": not args.strict,
        "source_type": "script" if args.script else "module",
    }


def _violations(rule: ImportStyleRule, frontend_result: FrontEndResult) -> List[Violation]:
    if not frontend_result.has_ast:
        return []
    return rule.check(
        frontend_result.parse.ast, frontend_result.source, frontend_result.analysis
    )


def _fix_source(
    rule: ImportStyleRule,
    frontend_result: FrontEndResult,
    violations: List[Violation],
    args: argparse.Namespace,
) -> tuple[FrontEndResult, List[Violation]]:
    """Apply fixes repeatedly until nothing more changes, like `eslint --fix`."""
    source_name = frontend_result.source_name
    for _ in range(MAX_FIX_PASSES):
        fix_result = apply_fixes(frontend_result.source, violations)
        if not fix_result.changed:
            break
        logger.info("%s: applied %d fix(es)", source_name, len(fix_result.applied))
        frontend_result = run_frontend(
            fix_result.output, source_name=source_name, **_frontend_options(args)
        )
        violations = _violations(rule, frontend_result)
    return frontend_result, violations


def check_command(args: argparse.Namespace) -> int:
    options = ImportStyleOptions()
    if args.config:
        try:
            options = load_options(args.config)
        except ConfigError as exc:
            sys.stderr.write(f"ERROR: {exc}\n")
            return 1
    rule = ImportStyleRule(options)

    has_errors = False
    reports: List[dict] = []
    for raw_path in args.inputs:
        input_path = Path(raw_path)
        source_name = str(raw_path)
        if not input_path.exists():
            sys.stderr.write(f"ERROR: Input file not found: {input_path.resolve()}\n")
            has_errors = True
            continue

        try:
            frontend_result = load_frontend(input_path, **_frontend_options(args))
            original = frontend_result.source
            violations = _violations(rule, frontend_result)
            if args.fix and frontend_result.has_ast:
                frontend_result, violations = _fix_source(
                    rule, frontend_result, violations, args
                )
                if frontend_result.source != original:
                    input_path.write_text(frontend_result.source, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"ERROR: Failed to access {source_name}: {exc}\n")
            has_errors = True
            continue
        except esprima.Error as exc:
            sys.stderr.write(f"ERROR: Parsing failed for {source_name}: {exc}\n")
            has_errors = True
            continue

        _print_diagnostics(_collect_diagnostics(frontend_result))
        if not frontend_result.has_ast:
            sys.stderr.write(f"ERROR: Parsing failed for {source_name}; no AST produced.\n")
            has_errors = True
            continue

        for violation in violations:
            if args.format == "json":
                reports.append({"file": source_name, **violation.to_dict()})
            else:
                sys.stdout.write(_format_violation(source_name, violation) + "\n")
        if violations:
            has_errors = True
        if args.strict and frontend_result.diagnostics:
            has_errors = True

    if args.format == "json":
        sys.stdout.write(json.dumps(reports, ensure_ascii=False, indent=2) + "\n")

    return 1 if has_errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="js-import-style", description="Enforce per-module import styles in JavaScript"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug details about skipped statements and declined fixes.",
    )
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Check JS files for import-style violations")
    check_parser.add_argument("inputs", nargs="+", help="Paths to JavaScript files")
    check_parser.add_argument(
        "--config",
        help="YAML or JSON file with rule options (styles, extendDefaultStyles, checkImport, ...)",
    )
    check_parser.add_argument(
        "--fix",
        action="store_true",
        help="Rewrite fixable violations in place.",
    )
    check_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format for violations",
    )
    check_parser.add_argument(
        "--script",
        action="store_true",
        help="Parse inputs as classic scripts instead of ES modules.",
    )
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as errors and disable tolerant parsing.",
    )
    check_parser.set_defaults(func=check_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

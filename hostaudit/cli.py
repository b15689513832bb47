"""Command-line entry point for the host audit evidence collector."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

from .document import load_document
from .errors import HostAuditError
from .result import AuditResult, format_summary_table

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect compliance evidence from the local host",
    )
    parser.add_argument(
        "document",
        help="Path to the YAML/JSON document describing the objects to check.",
    )
    parser.add_argument(
        "--var",
        dest="variables",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set or override a document variable (repeatable).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail an object when a directory cannot be read instead of skipping it.",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the structured report (e.g., artifacts/evidence.json).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def parse_variables(pairs: List[str]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"invalid variable {pair!r}, expected KEY=VALUE")
        variables[key] = value
    return variables


def run_audit(document_path: str, variables: Dict[str, str], strict: bool = False) -> AuditResult:
    document = load_document(Path(document_path), overrides=variables, strict=strict)
    return document.prepare()


def write_output(result: AuditResult, output_path: str | None) -> None:
    summary = format_summary_table(result)
    print(summary)

    payload = json.dumps(result.to_dict(), indent=2)
    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        print(f"\nReport written to {output_path}")
    else:
        print("\nJSON Report")
        print(payload)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        variables = parse_variables(args.variables)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    try:
        result = run_audit(args.document, variables, strict=args.strict)
    except HostAuditError as exc:
        logger.error("%s", exc)
        print(f"Failed to load document: {exc}", file=sys.stderr)
        return 1
    write_output(result, args.output_path)
    return result.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""
HPMA — Command-Line Interface

Subcommands:

  score      Score a response file and print the result as JSON, CSV or a
             markdown field guide.
  questions  List the question bank (optionally one module or context).

Usage examples
--------------
  # Full JSON result plus field guide
  hpma score responses.json --report

  # Flattened CSV
  hpma score responses.json --format csv

  # Markdown field guide
  hpma score responses.json --format markdown

The response file is either a flat ``{"<id>": rating}`` mapping or
``{"baseline": {...}, "contexts": {"WORK": {...}}, "duration_ms": 1234}``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import ValidationError

from hpma.config import get_settings
from hpma.data.questions import ALL_QUESTIONS
from hpma.logging_config import configure_logging
from hpma.schemas.questionnaire import AssessmentInput, coerce_responses
from hpma.services.assessment_service import AssessmentService
from hpma.services.export_service import ExportService
from hpma.services.report_service import render_markdown

logger = structlog.get_logger("hpma.cli")


def load_input(path: Path) -> AssessmentInput:
    """Read a response file into an ``AssessmentInput``.

    Raises
    ------
    ValueError
        The file cannot be read or does not hold a JSON object.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")

    if "baseline" not in raw:
        return AssessmentInput(baseline=coerce_responses(raw))

    contexts = raw.get("contexts") or {}
    if not isinstance(raw["baseline"], dict) or not isinstance(contexts, dict):
        raise ValueError(f"{path}: 'baseline' and 'contexts' must be objects")
    try:
        return AssessmentInput(
            baseline=coerce_responses(raw["baseline"]),
            contexts={
                str(ctx).upper(): coerce_responses(answers)
                for ctx, answers in contexts.items()
                if isinstance(answers, dict)
            },
            duration_ms=raw.get("duration_ms"),
        )
    except ValidationError as exc:
        raise ValueError(f"{path}: {exc}") from exc


# ──────────────────────────────────────────────────────────────────────────────
# Subcommands
# ──────────────────────────────────────────────────────────────────────────────


def cmd_score(args: argparse.Namespace) -> int:
    payload = load_input(Path(args.responses))
    service = AssessmentService()
    exporter = ExportService()
    result = service.assess_input(payload)

    if args.format == "csv":
        output = exporter.to_csv(result)
    elif args.format == "markdown":
        output = render_markdown(service.build_report(result))
    else:
        report = service.build_report(result) if args.report else None
        output = exporter.to_json(result, report)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("cli.output_written", path=args.output, format=args.format)
    else:
        print(output)
    return 0


def cmd_questions(args: argparse.Namespace) -> int:
    for question in ALL_QUESTIONS:
        if args.module and question.module != args.module:
            continue
        if args.context and question.context != args.context:
            continue
        marker = " (R)" if question.reversed else ""
        print(f"{question.id:>4}  {question.facet_id:<10} {question.text}{marker}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hpma",
        description="HPMA personality assessment — scoring, roster classification and field guides.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # ── score ─────────────────────────────────────────────────────────
    score_parser = subparsers.add_parser("score", help="Score a response file.")
    score_parser.add_argument("responses", help="Path to a JSON response file.")
    score_parser.add_argument(
        "--format", "-f",
        choices=("json", "csv", "markdown"),
        default="json",
        help="Output format (default: json).",
    )
    score_parser.add_argument(
        "--report",
        action="store_true",
        default=False,
        help="Include the field-guide report in JSON output.",
    )
    score_parser.add_argument("--output", "-o", help="Write to a file instead of stdout.")

    # ── questions ─────────────────────────────────────────────────────
    questions_parser = subparsers.add_parser("questions", help="List the question bank.")
    questions_parser.add_argument(
        "--module",
        choices=("hexaco", "motive", "affect", "validity", "attachment", "antagonism", "context"),
        help="Only this module.",
    )
    questions_parser.add_argument(
        "--context",
        choices=("BASELINE", "WORK", "STRESS", "INTIMACY", "PUBLIC"),
        help="Only this context.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(get_settings())

    if args.command == "score":
        try:
            return cmd_score(args)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
    if args.command == "questions":
        return cmd_questions(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

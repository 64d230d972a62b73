"""Command-line entrypoint for the rules engine."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from remedy_ux.config import get_settings
from remedy_ux.harness.evaluator import evaluate_test, evaluation_payload
from remedy_ux.harness.scenarios import SCENARIOS, get_scenario
from remedy_ux.pipeline.parsing import parse_ai_response
from remedy_ux.pipeline.rules_engine import RulesEngine


def setup_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            (
                structlog.dev.ConsoleRenderer()
                if sys.stderr.isatty()
                else structlog.processors.JSONRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdout carries the JSON result.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remedy-ux",
        description="Assemble and score health-response UI payloads.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    assemble = sub.add_parser("assemble", help="Build the final UI for a model response")
    assemble.add_argument("file", help="Model response (JSON or raw model text), '-' for stdin")
    assemble.add_argument("--clarifying-count", type=int, default=0)

    evaluate = sub.add_parser("evaluate", help="Assemble and score against a scenario")
    evaluate.add_argument("scenario_id", type=int)
    evaluate.add_argument("file", help="Model response (JSON or raw model text), '-' for stdin")
    evaluate.add_argument("--clarifying-count", type=int, default=0)

    sub.add_parser("scenarios", help="List the scenario table")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = structlog.get_logger()

    if args.command == "scenarios":
        for scenario in SCENARIOS:
            print(f"{scenario.id:>2}  [{scenario.category}] {scenario.name}: {scenario.input}")
        return 0

    if args.command == "evaluate":
        try:
            scenario = get_scenario(args.scenario_id)
        except KeyError:
            print(f"unknown scenario id: {args.scenario_id}", file=sys.stderr)
            return 2

    try:
        raw = _read_source(args.file)
    except OSError as exc:
        print(f"cannot read {args.file}: {exc}", file=sys.stderr)
        return 1

    response = parse_ai_response(raw)
    engine = RulesEngine.from_settings(settings)

    if args.command == "assemble":
        if response is None:
            print("could not parse model response", file=sys.stderr)
            return 1
        result = engine.assemble(response, args.clarifying_count)
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    payload = None
    if response is not None:
        payload = evaluation_payload(response, engine.assemble(response, args.clarifying_count))
    evaluation = evaluate_test(scenario, payload)
    logger.info("Scenario evaluated", scenario=scenario.id, overall=evaluation.overall.value)
    print(json.dumps(evaluation.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

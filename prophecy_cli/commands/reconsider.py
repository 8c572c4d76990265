"""
CLI Reconsider Command

Ask the oracle whether new evidence should change a settled outcome. The
result is advisory and nothing is written to the ledger.

Usage:
    prophecy reconsider --market-id m1 --outcome YES --evidence-cid bafy... \
        --description "Official results page"
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from typing import Any

from core.schemas.reconsideration import ReconsiderationRequest, ReconsiderationResult
from orchestrator.service import OracleService

from prophecy_cli.config import CLIConfig


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def print_result_human(result: ReconsiderationResult) -> None:
    print(f"request_id: {result.request_id}")
    print(f"market_id: {result.market_id}")
    print(f"recommendation: {result.recommendation.value}")
    print(f"confidence_delta: {result.confidence_delta:+d}")
    print(f"new_outcome: {result.new_outcome.value}")
    print(f"credibility: {result.analysis.credibility_score}%")
    if result.annotation:
        print(f"annotation: {result.annotation}")
    print(f"\nreasoning: {result.reasoning}")
    if result.analysis.facts:
        print(f"\nfacts ({len(result.analysis.facts)}):")
        for fact in result.analysis.facts[:10]:
            print(f"  - {fact.text}")


def reconsider_cmd(args: Namespace) -> int:
    config: CLIConfig = getattr(args, "cli_config", None) or CLIConfig()

    request = ReconsiderationRequest(
        market_id=args.market_id,
        question=args.question or "",
        original_outcome=args.outcome,
        original_reasoning=args.reasoning or "",
        evidence_cid=args.evidence_cid,
        evidence_description=args.description or "",
        submitter=args.submitter,
    )

    service = OracleService.from_config(config.runtime)
    try:
        result = service.reconsider(request)
    except Exception as e:
        if args.debug:
            raise
        print(f"Reconsideration error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        service.close()

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print_result_human(result)
    return EXIT_SUCCESS


def add_parser(subparsers: Any) -> None:
    p = subparsers.add_parser(
        "reconsider",
        help="Review new evidence against a settled outcome",
        description="Advisory reconsideration: UPHOLD, ANNOTATE or OVERTURN.",
    )
    p.add_argument("--market-id", required=True)
    p.add_argument("--outcome", type=str.upper, choices=["YES", "NO"], required=True, help="The settled outcome")
    p.add_argument("--evidence-cid", required=True, help="CID of the new evidence")
    p.add_argument("--description", default="", help="What the evidence shows")
    p.add_argument("--question", default="", help="Market question")
    p.add_argument("--reasoning", default="", help="Reasoning of the original resolution")
    p.add_argument("--submitter", default="cli")
    p.add_argument("--json", action="store_true", help="Print the result as JSON")
    p.add_argument("--debug", action="store_true", help="Show tracebacks")
    p.set_defaults(func=reconsider_cmd)

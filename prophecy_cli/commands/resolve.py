"""
CLI Resolve Command

Register a market and run one resolution workflow against it.

Usage:
    prophecy resolve "Will it rain in Paris on 2026-11-01?" --market-id rain-paris
    prophecy resolve "<question>" --stake alice:100:yes --stake bob:50:no --json
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.ledger import InMemoryLedger
from core.schemas.errors import OracleException
from orchestrator.service import OracleService
from orchestrator.state_machine import ResolutionRun, SettlementStatus

from prophecy_cli.config import CLIConfig


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_SETTLEMENT_FAILED = 2


@dataclass
class ResolveSummary:
    """Summary of a resolution run for CLI output."""
    market_id: str = ""
    decision: str = ""
    confidence: int = 0
    iterations: int = 0
    settlement: str = ""
    outcome: str | None = None
    transcript_cid: str | None = None
    signature: str | None = None
    reasoning: str = ""
    distribution: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        if d["distribution"] is None:
            del d["distribution"]
        return d


def parse_stake(value: str) -> tuple[str, int, bool]:
    """Parse ``user:amount:yes|no``."""
    parts = value.split(":")
    if len(parts) != 3:
        raise ValueError(f"Invalid stake '{value}', expected user:amount:yes|no")
    user, amount, side = parts
    side = side.strip().lower()
    if side not in ("yes", "no"):
        raise ValueError(f"Invalid stake side '{side}', expected yes or no")
    return user.strip(), int(amount), side == "yes"


def build_summary(run: ResolutionRun) -> ResolveSummary:
    verdict = run.verdict
    return ResolveSummary(
        market_id=run.market_id,
        decision=run.decision.value,
        confidence=verdict.confidence if verdict else 0,
        iterations=run.iterations,
        settlement=run.settlement.value if run.settlement else "",
        outcome=run.outcome.value if run.outcome else None,
        transcript_cid=run.anchor.cid if run.anchor else None,
        signature=run.signature,
        reasoning=verdict.reasoning if verdict else "",
        distribution=run.distribution.model_dump() if run.distribution else None,
        errors=list(run.errors),
    )


def print_summary_human(summary: ResolveSummary) -> None:
    """Print summary in human-readable format."""
    print(f"market_id: {summary.market_id}")
    print(f"decision: {summary.decision}")
    print(f"confidence: {summary.confidence}%")
    print(f"iterations: {summary.iterations}")
    print(f"settlement: {summary.settlement}")
    if summary.outcome:
        print(f"outcome: {summary.outcome}")
    if summary.transcript_cid:
        print(f"transcript: {summary.transcript_cid}")
    if summary.signature:
        print(f"transaction: {summary.signature}")
    if summary.distribution:
        d = summary.distribution
        print(f"rewards: {d['distributed']}/{d['total']} distributed, {d['failed']} failed")
    if summary.reasoning:
        print(f"\nreasoning: {summary.reasoning}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:5]:
            print(f"  - {err}")


def print_summary_json(summary: ResolveSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def resolve_cmd(args: Namespace) -> int:
    """
    Execute the resolve command.

    Returns:
        Exit code
    """
    config: CLIConfig = getattr(args, "cli_config", None) or CLIConfig()
    market_id = args.market_id or "cli-market"

    try:
        stakes = [parse_stake(s) for s in args.stake or []]
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    service = OracleService.from_config(config.runtime)
    try:
        market = service.register_market(
            market_id, args.question, source_url=args.source_url, creator="cli"
        )
        if stakes:
            if not isinstance(service.ledger, InMemoryLedger):
                print("Error: --stake is only supported with the memory ledger backend", file=sys.stderr)
                return EXIT_RUNTIME_ERROR
            for user, amount, direction in stakes:
                service.ledger.place_stake(market.ledger_address, user, amount, direction)
            service.refresh_stakes(market_id)

        for cid in args.evidence or []:
            service.submit_evidence(market_id, cid=cid, description="Submitted via CLI", submitter="cli")

        logger.info("Resolving market %s", market_id)
        run = service.resolve(market_id)
    except OracleException as e:
        if args.debug:
            raise
        print(f"Resolution error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    finally:
        service.close()

    summary = build_summary(run)
    if args.json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if run.settlement in (SettlementStatus.FAILED, SettlementStatus.REFUSED):
        return EXIT_SETTLEMENT_FAILED
    return EXIT_SUCCESS


def add_parser(subparsers: Any) -> None:
    p = subparsers.add_parser(
        "resolve",
        help="Resolve a market question",
        description="Register a market and run the research/judge/settle workflow on it.",
    )
    p.add_argument("question", help="The market question to resolve")
    p.add_argument("--market-id", default=None, help="Market identifier (default: cli-market)")
    p.add_argument("--source-url", default=None, help="Resolution source URL")
    p.add_argument("--evidence", "-e", action="append", help="Evidence CID or URL (repeatable)")
    p.add_argument("--stake", action="append", help="user:amount:yes|no (repeatable, memory ledger only)")
    p.add_argument("--json", action="store_true", help="Print a JSON summary")
    p.add_argument("--debug", action="store_true", help="Show tracebacks")
    p.set_defaults(func=resolve_cmd)

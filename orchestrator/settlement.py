"""
Settlement Executor & Reward Distribution

Settlement commits (market address, outcome, transcript digest) to the
ledger in a single ``resolve`` call. A ledger rejection is surfaced verbatim
and ends settlement: no retry, no disbursement.

After a successful commit the reward distributor pays every winning staker
``payout_multiplier`` times their stake, one ``disburse`` call at a time.
A failed disbursement is counted and audited; it never rolls back or blocks
the others. Payments already present in the audit log are skipped, so a
distribution can be re-run after a partial failure without paying twice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TYPE_CHECKING

from core.audit import AuditLog, AuditRecord
from core.schemas.errors import LedgerError, LedgerErrorKind
from core.schemas.logs import Sentiment, Speaker
from core.schemas.market import Outcome
from core.schemas.stake import DisbursementFailure, DistributionResult, StakeRecord
from core.schemas.transcript import AnchorResult
from core.schemas.verdict import Decision

from orchestrator.state_machine import SettlementStatus

if TYPE_CHECKING:
    from core.ledger import LedgerClient
    from core.store.logs import LogStore
    from core.store.markets import MarketStore

logger = logging.getLogger(__name__)

ACTOR = "settlement_executor"


def decision_to_outcome(decision: Decision) -> Outcome:
    if decision == Decision.YES:
        return Outcome.YES
    if decision == Decision.NO:
        return Outcome.NO
    return Outcome.UNSET


def winning_stakes(stakes: list[StakeRecord], outcome: Outcome) -> dict[str, int]:
    """
    Winning stake per user, summed across a user's stakes, in first-seen order.

    A winner is a stake whose direction matches the outcome (True = Yes).
    """
    yes_won = outcome == Outcome.YES
    winners: dict[str, int] = {}
    for stake in stakes:
        if stake.direction == yes_won and stake.amount > 0:
            winners[stake.user] = winners.get(stake.user, 0) + stake.amount
    return winners


class RewardDistributor:
    """
    Sequential reward payout for a resolved market.

    ``sleep`` is injectable so tests run without the inter-call delay.
    """

    def __init__(
        self,
        ledger: "LedgerClient",
        logs: "LogStore",
        audit: AuditLog,
        *,
        payout_multiplier: int = 2,
        disburse_delay_s: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.ledger = ledger
        self.logs = logs
        self.audit = audit
        self.payout_multiplier = payout_multiplier
        self.disburse_delay_s = disburse_delay_s
        self._sleep = sleep

    def reward_for(self, amount: int) -> int:
        return self.payout_multiplier * amount

    def distribute(
        self,
        market_address: str,
        outcome: Outcome,
        *,
        market_id: Optional[str] = None,
    ) -> DistributionResult:
        if outcome == Outcome.UNSET:
            raise ValueError("Cannot distribute rewards for an unset outcome")

        stakes = self.ledger.query_stakes(market_address)
        winners = winning_stakes(stakes, outcome)
        already_paid_users = self.audit.paid_users(market_address)

        logger.info(
            "Distributing rewards for %s: %d stakes, %d winners, outcome %s",
            market_address, len(stakes), len(winners), outcome.value,
        )

        distributed = 0
        failed = 0
        already_paid = 0
        amount_disbursed = 0
        failures: list[DisbursementFailure] = []

        pending = [(user, amount) for user, amount in winners.items()]
        for index, (user, stake_amount) in enumerate(pending):
            if user in already_paid_users:
                already_paid += 1
                continue

            reward = self.reward_for(stake_amount)
            try:
                signature = self.ledger.disburse(market_address, user, reward)
            except LedgerError as e:
                if e.kind == LedgerErrorKind.ALREADY_DISBURSED:
                    # Ledger paid this user in a run whose audit record was lost
                    already_paid += 1
                    self._record(market_address, market_id, user, reward, details={"reconciled": True})
                else:
                    failed += 1
                    failures.append(DisbursementFailure(user=user, amount=reward, error=str(e)))
                    self._record_failure(market_address, market_id, user, reward, str(e))
            except Exception as e:
                failed += 1
                failures.append(DisbursementFailure(user=user, amount=reward, error=str(e)))
                self._record_failure(market_address, market_id, user, reward, str(e))
            else:
                distributed += 1
                amount_disbursed += reward
                self._record(market_address, market_id, user, reward, signature=signature)

            if index < len(pending) - 1:
                self._sleep(self.disburse_delay_s)

        result = DistributionResult(
            distributed=distributed,
            failed=failed,
            total=distributed + failed,
            already_paid=already_paid,
            amount_disbursed=amount_disbursed,
            failures=failures,
        )
        logger.info(
            "Distribution complete for %s: %d succeeded, %d failed, %d already paid",
            market_address, distributed, failed, already_paid,
        )
        return result

    def _record(
        self,
        market_address: str,
        market_id: Optional[str],
        user: str,
        amount: int,
        *,
        signature: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.audit.append(
            AuditRecord(
                action="disburse",
                actor=ACTOR,
                subject=market_address,
                market_id=market_id,
                counterparty=user,
                amount=amount,
                signature=signature,
                details=details or {},
            )
        )

    def _record_failure(
        self,
        market_address: str,
        market_id: Optional[str],
        user: str,
        amount: int,
        error: str,
    ) -> None:
        logger.error("Disbursement to %s failed: %s", user, error)
        self.audit.append(
            AuditRecord(
                action="disburse_failed",
                actor=ACTOR,
                subject=market_address,
                market_id=market_id,
                counterparty=user,
                amount=amount,
                error=error,
            )
        )


@dataclass
class SettlementOutcome:
    status: SettlementStatus
    outcome: Outcome = Outcome.UNSET
    signature: Optional[str] = None
    error: Optional[str] = None
    distribution: Optional[DistributionResult] = None


class SettlementExecutor:
    """
    Commits a decided market to the ledger and triggers reward distribution.
    """

    def __init__(
        self,
        ledger: "LedgerClient",
        markets: "MarketStore",
        logs: "LogStore",
        audit: AuditLog,
        distributor: Optional[RewardDistributor] = None,
    ) -> None:
        self.ledger = ledger
        self.markets = markets
        self.logs = logs
        self.audit = audit
        self.distributor = distributor or RewardDistributor(ledger, logs, audit)

    def _log(self, market_id: str, message: str, sentiment: Sentiment = Sentiment.NEUTRAL) -> None:
        self.logs.append(Speaker.EXECUTOR, message, sentiment=sentiment, market_id=market_id)

    def settle(
        self,
        market_id: str,
        decision: Decision,
        anchor: Optional[AnchorResult],
    ) -> SettlementOutcome:
        """
        Commit ``decision`` for the market.

        UNCERTAIN is not committed. A market already Resolved locally is
        refused before the ledger is touched.
        """
        outcome = decision_to_outcome(decision)
        if outcome == Outcome.UNSET:
            self._log(market_id, "Market remains UNRESOLVED (decision uncertain)")
            return SettlementOutcome(status=SettlementStatus.UNRESOLVED)
        if anchor is None:
            raise ValueError("A terminal decision needs an anchored transcript")

        market = self.markets.get(market_id)
        if market.outcome != Outcome.UNSET or market.status.settled:
            self._log(
                market_id,
                f"Settlement refused: market is already {market.status.value}",
                Sentiment.NEGATIVE,
            )
            return SettlementOutcome(
                status=SettlementStatus.REFUSED,
                outcome=market.outcome,
                error="Market already resolved",
            )

        try:
            signature = self.ledger.resolve(
                market.ledger_address, outcome.as_ledger_value(), anchor.digest_bytes
            )
        except LedgerError as e:
            return self._commit_failed(market.market_id, market.ledger_address, outcome, str(e),
                                       already_resolved=e.kind == LedgerErrorKind.ALREADY_RESOLVED)
        except Exception as e:
            logger.exception("Ledger resolve call failed for %s", market_id)
            return self._commit_failed(market.market_id, market.ledger_address, outcome, str(e))

        self.markets.record_settlement(
            market_id,
            outcome,
            transcript_cid=anchor.cid,
            transcript_digest=anchor.digest,
        )
        self.audit.append(
            AuditRecord(
                action="resolve",
                actor=ACTOR,
                subject=market.ledger_address,
                market_id=market_id,
                signature=signature,
                details={
                    "outcome": outcome.as_ledger_value(),
                    "transcript_cid": anchor.cid,
                    "transcript_digest": anchor.digest,
                },
            )
        )
        self._log(market_id, f"MARKET RESOLVED ON LEDGER: {decision.value}", Sentiment.POSITIVE)
        self._log(market_id, f"Transaction: {signature}", Sentiment.POSITIVE)

        result = SettlementOutcome(
            status=SettlementStatus.COMMITTED, outcome=outcome, signature=signature
        )
        result.distribution = self.distribute(market_id, market.ledger_address, outcome)
        return result

    def distribute(self, market_id: str, market_address: str, outcome: Outcome) -> Optional[DistributionResult]:
        """Run reward distribution and report it to the log stream. Never raises."""
        self._log(market_id, "Distributing rewards to winning stakers...")
        try:
            distribution = self.distributor.distribute(market_address, outcome, market_id=market_id)
        except Exception as e:
            logger.exception("Reward distribution failed for %s", market_id)
            self._log(market_id, f"Reward distribution error: {e}", Sentiment.NEGATIVE)
            return None

        self.markets.record_distribution(market_id, distribution)
        if distribution.total == 0 and distribution.already_paid == 0:
            self._log(market_id, "No winning stakes found for this market")
        elif distribution.total == 0:
            self._log(market_id, f"All {distribution.already_paid} winner(s) were already paid")
        else:
            self._log(
                market_id,
                f"Distributed rewards: {distribution.distributed}/{distribution.total} winners "
                f"received {self.distributor.payout_multiplier}x their stake",
                Sentiment.POSITIVE,
            )
        if distribution.failed:
            self._log(
                market_id,
                f"{distribution.failed} reward distribution(s) failed",
                Sentiment.NEGATIVE,
            )
        return distribution

    def _commit_failed(
        self,
        market_id: str,
        market_address: str,
        outcome: Outcome,
        error: str,
        *,
        already_resolved: bool = False,
    ) -> SettlementOutcome:
        self._log(market_id, f"Ledger resolution failed: {error}", Sentiment.NEGATIVE)
        self.audit.append(
            AuditRecord(
                action="resolve_failed",
                actor=ACTOR,
                subject=market_address,
                market_id=market_id,
                error=error,
                details={"outcome": outcome.as_ledger_value()},
            )
        )
        status = SettlementStatus.ALREADY_RESOLVED if already_resolved else SettlementStatus.FAILED
        return SettlementOutcome(status=status, outcome=outcome, error=error)

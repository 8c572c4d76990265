"""
Audit Record Models

One record per ledger-affecting event. The JSONL audit log is what an
operator reconciles against after a partial reward distribution.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


AuditAction = Literal[
    "resolve",
    "resolve_failed",
    "disburse",
    "disburse_failed",
    "anchor",
    "anchor_degraded",
]


class AuditRecord(BaseModel):
    """
    ``subject`` is the market address; for disbursements ``counterparty`` is
    the paid user.
    """

    model_config = ConfigDict(extra="forbid")

    action: AuditAction
    actor: str = Field(..., description="Component that performed the action")
    subject: str = Field(..., description="Ledger address of the market")
    market_id: Optional[str] = None
    counterparty: Optional[str] = None
    amount: Optional[int] = None
    signature: Optional[str] = None
    error: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.action.endswith("_failed")

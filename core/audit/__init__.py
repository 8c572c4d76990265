"""
Audit Module

Append-only record of ledger-affecting actions.
"""

from .log import AuditLog
from .models import AuditAction, AuditRecord

__all__ = [
    "AuditAction",
    "AuditLog",
    "AuditRecord",
]

"""Reconciliation and count-verification result DTOs."""

from typing import Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class ReconciliationResult:
    """
    Outcome of recomputing an event's counter projection from the ledger.

    success=False means nothing was written (store failure or unknown event);
    error carries the reason. corrected reports whether stored values were
    written; drift_detected whether they disagreed with the ledger, so a dry run
    reports drift_detected without corrected.
    """

    success: bool
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None
    corrected: bool = False
    drift_detected: bool = False
    error: Optional[str] = None
    event_id: Optional[UUID] = None
    previous_remaining: Optional[int] = None
    dry_run: bool = False

    @classmethod
    def failed(cls, *, event_id: Optional[UUID], error: str) -> 'ReconciliationResult':
        return cls(success=False, event_id=event_id, error=error)


@attrs.define(frozen=True)
class TicketCountCheck:
    """Stored counter next to the ledger-derived truth"""

    event_id: UUID
    tickets_total: int
    current_remaining: int
    calculated_remaining: int
    current_sold_out: bool
    sold_quantity: int

    @property
    def discrepancy(self) -> int:
        return self.current_remaining - self.calculated_remaining

    @property
    def in_sync(self) -> bool:
        return self.discrepancy == 0 and self.current_sold_out == (self.calculated_remaining == 0)


@attrs.define(frozen=True)
class TicketCountVerification:
    counts: TicketCountCheck
    fixed: bool = False
    after: Optional[TicketCountCheck] = None

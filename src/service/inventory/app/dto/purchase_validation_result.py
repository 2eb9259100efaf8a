from typing import Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class PurchaseValidationResult:
    """Pre-flight answer; advisory only, the sale transaction re-checks"""

    event_id: UUID
    quantity: int
    valid: bool
    tickets_remaining: int
    sold_out: bool
    reason: Optional[str] = None

"""Sale recording result DTOs."""

from typing import Optional
from uuid import UUID

import attrs

from src.service.inventory.domain.entity.order_entity import Order


@attrs.define(frozen=True)
class SaleRecordResult:
    """
    Outcome of recording a finalized sale.

    counter_updated=False means the ledger row committed but the counter
    decrement did not apply; tickets_remaining / sold_out then come from the
    follow-up reconciliation when it succeeded.
    """

    order: Order
    duplicate: bool = False
    counter_updated: bool = True
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None


@attrs.define(frozen=True)
class WebhookHandlingResult:
    event_type: str
    handled: bool
    webhook_event_id: Optional[str] = None
    order_id: Optional[UUID] = None
    duplicate: bool = False
    counter_updated: Optional[bool] = None
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None

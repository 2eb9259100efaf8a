from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.inventory_rules import (
    calculate_remaining,
    derive_sold_out,
    validate_ticket_counts,
)


@attrs.define
class EventInventory:
    """Counter projection of one event: a fast-read cache of total minus completed sales"""

    name: str
    tickets_total: int
    tickets_remaining: int
    sold_out: bool
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(cls, *, name: str, tickets_total: int) -> 'EventInventory':
        if not name or not name.strip():
            raise DomainError('Event name is required')
        if tickets_total < 0:
            raise DomainError('tickets_total must not be negative')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            name=name.strip(),
            tickets_total=tickets_total,
            tickets_remaining=tickets_total,
            sold_out=derive_sold_out(tickets_total),
            created_at=now,
            updated_at=now,
        )

    @Logger.io
    def with_counts(self, *, tickets_total: int, tickets_remaining: int) -> 'EventInventory':
        validate_ticket_counts(tickets_total=tickets_total, tickets_remaining=tickets_remaining)
        return attrs.evolve(
            self,
            tickets_total=tickets_total,
            tickets_remaining=tickets_remaining,
            sold_out=derive_sold_out(tickets_remaining),
            updated_at=datetime.now(timezone.utc),
        )

    def reconciled(self, *, sold_quantity: int) -> 'EventInventory':
        remaining = calculate_remaining(tickets_total=self.tickets_total, sold_quantity=sold_quantity)
        return attrs.evolve(
            self,
            tickets_remaining=remaining,
            sold_out=derive_sold_out(remaining),
            updated_at=datetime.now(timezone.utc),
        )

    def is_consistent_with(self, other: 'EventInventory') -> bool:
        return (
            self.tickets_remaining == other.tickets_remaining and self.sold_out == other.sold_out
        )

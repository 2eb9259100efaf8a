"""
Inventory Rules
Pure counter arithmetic and sale-quantity checks - no store, no HTTP

Every writer of the counter projection goes through these functions so the
projection always satisfies:
    0 <= tickets_remaining <= tickets_total
    sold_out  <=>  tickets_remaining == 0
"""

from enum import StrEnum
from typing import Any, Optional

from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    InsufficientTicketsError,
    InvalidQuantityError,
)


class SaleRejection(StrEnum):
    INVALID_QUANTITY = 'quantity must be a positive integer'
    SOLD_OUT = 'event sold out'
    INSUFFICIENT = 'not enough tickets remaining'

    @property
    def reason_code(self) -> str:
        return self.name.lower()


def clamp_remaining(value: int) -> int:
    return value if value > 0 else 0


def derive_sold_out(tickets_remaining: int) -> bool:
    return tickets_remaining <= 0


def calculate_remaining(*, tickets_total: int, sold_quantity: int) -> int:
    """Truth derived from the ledger: max(0, total - sum of completed quantities)"""
    return clamp_remaining(tickets_total - sold_quantity)


def is_positive_quantity(quantity: Any) -> bool:
    # bool is an int subclass; True must not count as one ticket
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0


def sale_rejection(
    *, quantity: Any, tickets_remaining: int, sold_out: bool
) -> Optional[SaleRejection]:
    """Return why a sale of ``quantity`` cannot be covered, or None when it can"""
    if not is_positive_quantity(quantity):
        return SaleRejection.INVALID_QUANTITY
    if sold_out or tickets_remaining <= 0:
        return SaleRejection.SOLD_OUT
    if quantity > tickets_remaining:
        return SaleRejection.INSUFFICIENT
    return None


def rejection_error(rejection: SaleRejection) -> CustomBaseError:
    if rejection is SaleRejection.INVALID_QUANTITY:
        return InvalidQuantityError(rejection.value)
    return InsufficientTicketsError(rejection.value)


def validate_ticket_counts(*, tickets_total: int, tickets_remaining: int) -> None:
    """Admin edits: both values written verbatim, so they must already be consistent"""
    if tickets_total < 0:
        raise DomainError('tickets_total must not be negative')
    if tickets_remaining < 0:
        raise DomainError('tickets_remaining must not be negative')
    if tickets_remaining > tickets_total:
        raise DomainError('tickets_remaining cannot exceed tickets_total')

from enum import StrEnum


class OrderStatus(StrEnum):
    """Ledger row status; only COMPLETED counts toward sold inventory"""

    PENDING = 'pending'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING

"""
Order Command Repository Interface - Ledger Write Side

Ledger rows are append-mostly: quantity never changes, status moves out of
PENDING at most once.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus


class IOrderCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        """
        Insert a ledger row

        Raises:
            DuplicateSaleError: external_session_id already recorded
        """
        pass

    @abstractmethod
    async def get_for_update(self, *, order_id: UUID) -> Order | None:
        pass

    @abstractmethod
    async def transition_status(
        self, *, order_id: UUID, from_status: OrderStatus, to_status: OrderStatus
    ) -> bool:
        """
        Conditional status update (WHERE status = from_status)

        Returns:
            True if this call moved the row, False if it was not in from_status
        """
        pass

"""
Order Query Repository Interface - Ledger Read Side
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.inventory.domain.entity.order_entity import Order


class IOrderQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Order | None:
        pass

    @abstractmethod
    async def get_by_external_session_id(self, *, external_session_id: str) -> Order | None:
        pass

    @abstractmethod
    async def sum_completed_quantity(self, *, event_id: UUID) -> int:
        """
        Tickets consumed by an event: sum of quantity over its COMPLETED orders

        Returns:
            0 when the event has no completed orders
        """
        pass

    @abstractmethod
    async def list_by_event(self, *, event_id: UUID) -> List[Order]:
        pass

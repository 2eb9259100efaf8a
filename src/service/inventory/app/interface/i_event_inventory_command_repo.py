"""
Event Inventory Command Repository Interface - CQRS Write Side

Owns every write to the counter projection (tickets_remaining / sold_out).
Implementations must keep sold_out derived from tickets_remaining on every
write path.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


class IEventInventoryCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, event: EventInventory) -> EventInventory:
        pass

    @abstractmethod
    async def get_for_update(self, *, event_id: UUID) -> EventInventory | None:
        """
        Read the event row under a row lock held until the unit of work ends

        Returns:
            EventInventory or None if not found
        """
        pass

    @abstractmethod
    async def apply_sale(self, *, event_id: UUID, quantity: int) -> EventInventory | None:
        """
        Atomic clamped decrement of tickets_remaining by quantity

        Single statement; the read-modify-write happens inside the store so
        concurrent callers cannot lose updates and the value never goes negative.

        Returns:
            Updated EventInventory or None if not found
        """
        pass

    @abstractmethod
    async def update_counts(
        self, *, event_id: UUID, tickets_total: int, tickets_remaining: int
    ) -> EventInventory | None:
        """
        Overwrite total and remaining together; sold_out is recomputed from remaining

        Returns:
            Updated EventInventory or None if not found
        """
        pass

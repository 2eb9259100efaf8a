"""
Event Inventory Query Repository Interface - CQRS Read Side
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


class IEventInventoryQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, event_id: UUID) -> EventInventory | None:
        pass

    @abstractmethod
    async def list_events(self) -> List[EventInventory]:
        pass

    @abstractmethod
    async def list_event_ids(self) -> List[UUID]:
        pass

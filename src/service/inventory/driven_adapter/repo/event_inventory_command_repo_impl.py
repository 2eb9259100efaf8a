"""
Event Inventory Command Repository Implementation - CQRS Write Side

Every counter write is a single statement scoped to one event row:
- apply_sale: clamped decrement evaluated inside the store
- update_counts: total + remaining + derived sold_out written together
"""

from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_event_inventory_command_repo import (
    IEventInventoryCommandRepo,
)
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.domain.inventory_rules import derive_sold_out
from src.service.inventory.driven_adapter.model.event_model import EventModel


_EVENT_COLUMNS = (
    EventModel.id,
    EventModel.name,
    EventModel.tickets_total,
    EventModel.tickets_remaining,
    EventModel.sold_out,
    EventModel.created_at,
    EventModel.updated_at,
)


class EventInventoryCommandRepoImpl(IEventInventoryCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> EventInventory:
        return EventInventory(
            id=row['id'],
            name=row['name'],
            tickets_total=row['tickets_total'],
            tickets_remaining=row['tickets_remaining'],
            sold_out=bool(row['sold_out']),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    @staticmethod
    def _model_to_entity(model: EventModel) -> EventInventory:
        return EventInventory(
            id=model.id,
            name=model.name,
            tickets_total=model.tickets_total,
            tickets_remaining=model.tickets_remaining,
            sold_out=bool(model.sold_out),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create(self, *, event: EventInventory) -> EventInventory:
        model = EventModel(
            id=event.id,
            name=event.name,
            tickets_total=event.tickets_total,
            tickets_remaining=event.tickets_remaining,
            sold_out=event.sold_out,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_for_update(self, *, event_id: UUID) -> EventInventory | None:
        result = await self.session.execute(
            select(EventModel)
            .where(EventModel.id == event_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def apply_sale(self, *, event_id: UUID, quantity: int) -> EventInventory | None:
        # SET expressions are evaluated against the pre-update row
        decremented = EventModel.tickets_remaining - quantity
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(
                tickets_remaining=case((decremented < 0, 0), else_=decremented),
                sold_out=decremented <= 0,
                updated_at=func.now(),
            )
            .returning(*_EVENT_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.mappings().one_or_none()
        if row is None:
            return None

        event = self._row_to_entity(row)
        Logger.base.info(
            f'🎟️ [GATE] event={event_id} -{quantity} → remaining={event.tickets_remaining} '
            f'sold_out={event.sold_out}'
        )
        return event

    @Logger.io
    async def update_counts(
        self, *, event_id: UUID, tickets_total: int, tickets_remaining: int
    ) -> EventInventory | None:
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(
                tickets_total=tickets_total,
                tickets_remaining=tickets_remaining,
                sold_out=derive_sold_out(tickets_remaining),
                updated_at=func.now(),
            )
            .returning(*_EVENT_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.mappings().one_or_none()
        return self._row_to_entity(row) if row else None

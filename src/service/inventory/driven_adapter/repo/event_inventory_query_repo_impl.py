"""
Event Inventory Query Repository Implementation - CQRS Read Side
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_event_inventory_query_repo import (
    IEventInventoryQueryRepo,
)
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.driven_adapter.model.event_model import EventModel


class EventInventoryQueryRepoImpl(IEventInventoryQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

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
    async def get_by_id(self, *, event_id: UUID) -> EventInventory | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_events(self) -> List[EventInventory]:
        async with self._get_session() as session:
            result = await session.execute(select(EventModel).order_by(EventModel.created_at))
            return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_event_ids(self) -> List[UUID]:
        async with self._get_session() as session:
            result = await session.execute(select(EventModel.id).order_by(EventModel.id))
            return list(result.scalars().all())

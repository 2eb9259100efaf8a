"""
Order Query Repository Implementation - Ledger Read Side
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.driven_adapter.model.order_model import OrderModel


class OrderQueryRepoImpl(IOrderQueryRepo):
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
    def _model_to_entity(model: OrderModel) -> Order:
        return Order(
            id=model.id,
            event_id=model.event_id,
            quantity=model.quantity,
            status=OrderStatus(model.status),
            channel=SaleChannel(model.channel),
            external_session_id=model.external_session_id,
            customer_email=model.customer_email,
            customer_name=model.customer_name,
            amount_total=model.amount_total,
            user_id=model.user_id,
            processed_by=model.processed_by,
            processing_location=model.processing_location,
            payment_method=model.payment_method,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Order | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel)
                .where(OrderModel.id == order_id)
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_external_session_id(self, *, external_session_id: str) -> Order | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.external_session_id == external_session_id)
            )
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def sum_completed_quantity(self, *, event_id: UUID) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.coalesce(func.sum(OrderModel.quantity), 0)).where(
                    OrderModel.event_id == event_id,
                    OrderModel.status == OrderStatus.COMPLETED.value,
                )
            )
            return int(result.scalar_one())

    @Logger.io
    async def list_by_event(self, *, event_id: UUID) -> List[Order]:
        async with self._get_session() as session:
            result = await session.execute(
                select(OrderModel)
                .where(OrderModel.event_id == event_id)
                .order_by(OrderModel.created_at, OrderModel.id)
            )
            return [self._model_to_entity(model) for model in result.scalars().all()]

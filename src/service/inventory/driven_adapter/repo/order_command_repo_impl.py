"""
Order Command Repository Implementation - Ledger Write Side
"""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from src.platform.exception.exceptions import DuplicateSaleError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.driven_adapter.model.order_model import OrderModel


class OrderCommandRepoImpl(IOrderCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

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

    async def _external_session_id_exists(self, external_session_id: str) -> bool:
        result = await self.session.execute(
            select(OrderModel.id).where(OrderModel.external_session_id == external_session_id)
        )
        return result.first() is not None

    @Logger.io
    async def create(self, *, order: Order) -> Order:
        model = OrderModel(
            id=order.id,
            event_id=order.event_id,
            quantity=order.quantity,
            status=order.status.value,
            channel=order.channel.value,
            external_session_id=order.external_session_id,
            customer_email=order.customer_email,
            customer_name=order.customer_name,
            amount_total=order.amount_total,
            user_id=order.user_id,
            processed_by=order.processed_by,
            processing_location=order.processing_location,
            payment_method=order.payment_method,
        )

        # Savepoint: a unique-key violation must not poison the caller's transaction
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            if order.external_session_id and await self._external_session_id_exists(
                order.external_session_id
            ):
                raise DuplicateSaleError(order.external_session_id) from e
            raise

        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_for_update(self, *, order_id: UUID) -> Order | None:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def transition_status(
        self, *, order_id: UUID, from_status: OrderStatus, to_status: OrderStatus
    ) -> bool:
        result = await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == from_status.value)
            .values(status=to_status.value, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus


class CancelPendingOrderUseCase:
    """PENDING → CANCELLED; pending rows never consumed inventory, so the counter is untouched"""

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
    ) -> None:
        self.uow_factory = uow_factory
        self.retry_policy = retry_policy

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        retry_policy: RetryPolicy = Depends(Provide[Container.retry_policy]),
    ) -> Self:
        return cls(uow_factory=uow_factory, retry_policy=retry_policy)

    async def _cancel(self, *, order_id: UUID) -> Order:
        async with self.uow_factory() as uow:
            order = await uow.order_command_repo.get_for_update(order_id=order_id)
            if order is None:
                raise NotFoundError('Order not found')

            cancelled = order.cancel()  # DomainError unless PENDING
            moved = await uow.order_command_repo.transition_status(
                order_id=order_id, from_status=OrderStatus.PENDING, to_status=OrderStatus.CANCELLED
            )
            if not moved:
                raise DomainError('Order is no longer pending')
            await uow.commit()
        return cancelled

    @Logger.io
    async def execute(self, *, order_id: UUID) -> Order:
        order = await self.retry_policy.run(
            lambda: self._cancel(order_id=order_id),
            idempotent=True,
            operation_name='cancel_pending_order',
        )
        Logger.base.info(f'🚫 [ORDER] Order {order_id} cancelled')
        return order

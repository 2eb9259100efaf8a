from typing import Callable, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.domain.inventory_rules import rejection_error, sale_rejection


class CreatePendingOrderUseCase:
    """
    Open a PENDING ledger row after pre-flight validation.

    Pending rows do not consume inventory; the counter moves only when the
    order completes. The validation is advisory (no row lock), the completion
    path clamps.
    """

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

    async def _create(self, *, draft: Order) -> Order:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_query_repo.get_by_id(event_id=draft.event_id)
            if event is None:
                raise NotFoundError('Event not found')

            rejection = sale_rejection(
                quantity=draft.quantity,
                tickets_remaining=event.tickets_remaining,
                sold_out=event.sold_out,
            )
            if rejection is not None:
                metrics.record_validation_rejection(reason=rejection.reason_code)
                raise rejection_error(rejection)

            order = await uow.order_command_repo.create(order=draft)
            await uow.commit()
        return order

    @Logger.io
    async def execute(
        self,
        *,
        event_id: UUID,
        quantity: int,
        channel: SaleChannel = SaleChannel.ONLINE,
        external_session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        customer_name: Optional[str] = None,
        amount_total: Optional[int] = None,
    ) -> Order:
        draft = Order.create(
            event_id=event_id,
            quantity=quantity,
            channel=channel,
            external_session_id=external_session_id,
            user_id=user_id,
            customer_email=customer_email,
            customer_name=customer_name,
            amount_total=amount_total,
        )
        order = await self.retry_policy.run(
            lambda: self._create(draft=draft),
            # Without a session id a replayed insert would open a second order
            idempotent=external_session_id is not None,
            operation_name='create_pending_order',
        )
        Logger.base.info(f'📝 [ORDER] Pending order {order.id}: {quantity} for event {event_id}')
        return order

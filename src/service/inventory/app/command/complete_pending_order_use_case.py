from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.app.command.apply_completed_sale_use_case import (
    ApplyCompletedSaleUseCase,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult
from src.service.inventory.domain.enum.order_status import OrderStatus


class CompletePendingOrderUseCase:
    """
    PENDING → COMPLETED plus the gate decrement, in one transaction.

    The status change is conditional (WHERE status = 'pending'); completing an
    already-completed order is a no-op reported as duplicate, so the operation
    is keyed by order id and safe to retry.
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

    async def _complete(self, *, order_id: UUID) -> SaleRecordResult:
        async with self.uow_factory() as uow:
            order = await uow.order_command_repo.get_for_update(order_id=order_id)
            if order is None:
                raise NotFoundError('Order not found')

            if order.status == OrderStatus.COMPLETED:
                event = await uow.event_inventory_query_repo.get_by_id(event_id=order.event_id)
                return SaleRecordResult(
                    order=order,
                    duplicate=True,
                    counter_updated=False,
                    tickets_remaining=event.tickets_remaining if event else None,
                    sold_out=event.sold_out if event else None,
                )

            completed = order.complete()  # DomainError for cancelled / failed
            moved = await uow.order_command_repo.transition_status(
                order_id=order_id, from_status=OrderStatus.PENDING, to_status=OrderStatus.COMPLETED
            )
            if not moved:
                # Lost the race to another completion; it owns the decrement
                return SaleRecordResult(order=completed, duplicate=True, counter_updated=False)

            updated = await ApplyCompletedSaleUseCase.apply_within(
                uow, event_id=order.event_id, quantity=order.quantity
            )
            await uow.commit()

        metrics.record_sale(channel=order.channel, result='recorded', quantity=order.quantity)
        Logger.base.info(
            f'✅ [ORDER] Order {order_id} completed, event {order.event_id} '
            f'remaining={updated.tickets_remaining}'
        )
        return SaleRecordResult(
            order=completed,
            tickets_remaining=updated.tickets_remaining,
            sold_out=updated.sold_out,
        )

    @Logger.io
    async def execute(self, *, order_id: UUID) -> SaleRecordResult:
        return await self.retry_policy.run(
            lambda: self._complete(order_id=order_id),
            idempotent=True,
            operation_name='complete_pending_order',
        )

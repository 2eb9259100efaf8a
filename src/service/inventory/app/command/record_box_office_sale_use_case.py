from typing import Callable, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DuplicateSaleError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.app.command.apply_completed_sale_use_case import (
    ApplyCompletedSaleUseCase,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult
from src.service.inventory.app.query.get_recorded_sale_use_case import GetRecordedSaleUseCase
from src.service.inventory.domain.entity.order_entity import (
    Order,
    generate_box_office_session_id,
)
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.domain.inventory_rules import rejection_error, sale_rejection


class RecordBoxOfficeSaleUseCase:
    """
    In-person sale with true oversell prevention.

    Flow (one transaction, event row locked throughout):
    1. Lock the event row
    2. Re-run sale-quantity validation against the locked counter (may reject)
    3. Insert a COMPLETED ledger row keyed by a generated pos_<uuid7> session id
    4. Apply the gate decrement

    The session id is generated once, before any attempt, so a retry after a
    lost commit acknowledgement resolves to the already-recorded order.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        get_recorded_sale: GetRecordedSaleUseCase,
    ) -> None:
        self.uow_factory = uow_factory
        self.retry_policy = retry_policy
        self.get_recorded_sale = get_recorded_sale

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        retry_policy: RetryPolicy = Depends(Provide[Container.retry_policy]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            retry_policy=retry_policy,
            get_recorded_sale=GetRecordedSaleUseCase(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
        )

    async def _record(self, *, draft: Order) -> SaleRecordResult:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_command_repo.get_for_update(event_id=draft.event_id)
            if event is None:
                raise NotFoundError('Event not found')

            rejection = sale_rejection(
                quantity=draft.quantity,
                tickets_remaining=event.tickets_remaining,
                sold_out=event.sold_out,
            )
            if rejection is not None:
                metrics.record_validation_rejection(reason=rejection.reason_code)
                metrics.record_sale(channel=SaleChannel.BOX_OFFICE, result='rejected')
                raise rejection_error(rejection)

            order = await uow.order_command_repo.create(order=draft)
            updated = await ApplyCompletedSaleUseCase.apply_within(
                uow, event_id=draft.event_id, quantity=draft.quantity
            )
            await uow.commit()

        return SaleRecordResult(
            order=order,
            tickets_remaining=updated.tickets_remaining,
            sold_out=updated.sold_out,
        )

    @Logger.io
    async def execute(
        self,
        *,
        event_id: UUID,
        quantity: int,
        customer_email: Optional[str] = None,
        customer_name: Optional[str] = None,
        amount_total: Optional[int] = None,
        processed_by: Optional[str] = None,
        processing_location: Optional[str] = None,
        payment_method: Optional[str] = 'cash',
    ) -> SaleRecordResult:
        draft = Order.create(
            event_id=event_id,
            quantity=quantity,
            channel=SaleChannel.BOX_OFFICE,
            status=OrderStatus.COMPLETED,
            external_session_id=generate_box_office_session_id(),
            customer_email=customer_email,
            customer_name=customer_name,
            amount_total=amount_total,
            processed_by=processed_by,
            processing_location=processing_location,
            payment_method=payment_method,
        )

        try:
            result = await self.retry_policy.run(
                lambda: self._record(draft=draft),
                idempotent=True,
                operation_name='record_box_office_sale',
            )
        except DuplicateSaleError as e:
            # Only reachable when an earlier attempt committed
            session_id = e.external_session_id
            Logger.base.warning(f'🔁 [BOX_OFFICE] Sale {session_id} already recorded')
            return await self.get_recorded_sale.execute(external_session_id=session_id)

        metrics.record_sale(
            channel=SaleChannel.BOX_OFFICE, result='recorded', quantity=draft.quantity
        )
        Logger.base.info(
            f'🎟️ [BOX_OFFICE] Order {result.order.id} sold {draft.quantity} for event {event_id}, '
            f'remaining={result.tickets_remaining}'
        )
        return result

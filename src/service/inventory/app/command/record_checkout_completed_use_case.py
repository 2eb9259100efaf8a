from typing import Callable, Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, DuplicateSaleError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.app.command.apply_completed_sale_use_case import (
    ApplyCompletedSaleUseCase,
)
from src.service.inventory.app.command.reconcile_ticket_count_use_case import (
    ReconcileTicketCountUseCase,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult
from src.service.inventory.app.query.get_recorded_sale_use_case import GetRecordedSaleUseCase
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.domain.payment_webhook_event import CheckoutSessionCompleted


class RecordCheckoutCompletedUseCase:
    """
    Record an online sale confirmed by the payment provider.

    The payment is already captured, so the sale is never rejected for lack of
    tickets: the ledger row is written and the gate clamps at zero.

    Flow (one transaction):
    1. Look up the session id:
       - COMPLETED row: redelivery (duplicate, no effect)
       - PENDING row (order created at checkout start): lock it and move it to
         COMPLETED with a conditional status update
       - CANCELLED / FAILED row: rejected with DomainError
       - none: insert the COMPLETED ledger row (unique session id closes the
         concurrent-redelivery race)
    2. Apply the gate inside a savepoint; if it fails the ledger row still
       commits and reconciliation runs right after the commit

    Keyed by the session id, so the whole operation runs under the retry policy.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        reconcile_ticket_count: ReconcileTicketCountUseCase,
        get_recorded_sale: GetRecordedSaleUseCase,
    ) -> None:
        self.uow_factory = uow_factory
        self.retry_policy = retry_policy
        self.reconcile_ticket_count = reconcile_ticket_count
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
        return cls.build(uow_factory=uow_factory, retry_policy=retry_policy)

    @classmethod
    def build(
        cls, *, uow_factory: Callable[[], AbstractUnitOfWork], retry_policy: RetryPolicy
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            retry_policy=retry_policy,
            reconcile_ticket_count=ReconcileTicketCountUseCase(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
            get_recorded_sale=GetRecordedSaleUseCase(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
        )

    async def _apply_gate(self, uow: AbstractUnitOfWork, *, order: Order) -> EventInventory | None:
        try:
            async with uow.savepoint():
                return await ApplyCompletedSaleUseCase.apply_within(
                    uow, event_id=order.event_id, quantity=order.quantity
                )
        except SQLAlchemyError as e:
            metrics.record_counter_update(result='failed')
            Logger.base.warning(
                f'⚠️ [WEBHOOK] Order {order.id} recorded but counter update failed for '
                f'event {order.event_id}: {type(e).__name__}: {e}'
            )
            return None

    async def _finalize_pending(
        self, uow: AbstractUnitOfWork, *, order_id: UUID, session_id: str, quantity: int
    ) -> Order:
        """
        Complete the order created at checkout start for this session.

        Raises:
            DuplicateSaleError: already completed (redelivery or /complete won the race)
            DomainError: cancelled / failed orders cannot take the payment
        """
        order = await uow.order_command_repo.get_for_update(order_id=order_id)
        if order is None:
            raise NotFoundError('Order not found')
        if order.status == OrderStatus.COMPLETED:
            raise DuplicateSaleError(session_id)

        completed = order.complete()
        moved = await uow.order_command_repo.transition_status(
            order_id=order.id, from_status=OrderStatus.PENDING, to_status=OrderStatus.COMPLETED
        )
        if not moved:
            raise DuplicateSaleError(session_id)

        if order.quantity != quantity:
            # The ledger row is what reconciliation counts
            Logger.base.warning(
                f'⚠️ [WEBHOOK] Session {session_id} paid for {quantity} '
                f'ticket(s), pending order {order.id} holds {order.quantity}'
            )
        return completed

    async def _record(self, *, draft: Order, session_id: str) -> SaleRecordResult:
        async with self.uow_factory() as uow:
            known = await uow.order_query_repo.get_by_external_session_id(
                external_session_id=session_id
            )

            if known is not None:
                order = await self._finalize_pending(
                    uow, order_id=known.id, session_id=session_id, quantity=draft.quantity
                )
            else:
                if await uow.event_inventory_query_repo.get_by_id(event_id=draft.event_id) is None:
                    raise NotFoundError('Event not found')
                order = await uow.order_command_repo.create(order=draft)

            updated = await self._apply_gate(uow, order=order)
            await uow.commit()

        return SaleRecordResult(
            order=order,
            counter_updated=updated is not None,
            tickets_remaining=updated.tickets_remaining if updated else None,
            sold_out=updated.sold_out if updated else None,
        )

    @Logger.io
    async def execute(self, *, checkout: CheckoutSessionCompleted) -> SaleRecordResult:
        if not checkout.session_id:
            raise DomainError('Online sales are keyed by the checkout session id')

        draft = Order.create(
            event_id=checkout.event_id,
            quantity=checkout.quantity,
            channel=SaleChannel.ONLINE,
            status=OrderStatus.COMPLETED,
            external_session_id=checkout.session_id,
            customer_email=checkout.customer_email,
            customer_name=checkout.customer_name,
            amount_total=checkout.amount_total,
            user_id=checkout.user_id,
            payment_method=checkout.payment_method,
        )

        try:
            result = await self.retry_policy.run(
                lambda: self._record(draft=draft, session_id=checkout.session_id),
                idempotent=True,
                operation_name='record_checkout_completed',
            )
        except DuplicateSaleError:
            metrics.record_sale(channel=SaleChannel.ONLINE, result='duplicate')
            Logger.base.info(
                f'🔁 [WEBHOOK] Checkout session {checkout.session_id} already recorded, ignoring'
            )
            return await self.get_recorded_sale.execute(external_session_id=checkout.session_id)

        metrics.record_sale(channel=SaleChannel.ONLINE, result='recorded', quantity=result.order.quantity)

        order = result.order
        if not result.counter_updated:
            reconciliation = await self.reconcile_ticket_count.execute(event_id=order.event_id)
            if reconciliation.success:
                result = attrs.evolve(
                    result,
                    tickets_remaining=reconciliation.tickets_remaining,
                    sold_out=reconciliation.sold_out,
                )
            else:
                Logger.base.error(
                    f'❌ [WEBHOOK] Follow-up reconciliation failed for event '
                    f'{order.event_id}: {reconciliation.error}'
                )

        Logger.base.info(
            f'🛒 [WEBHOOK] Session {checkout.session_id} → order {order.id}, '
            f'{order.quantity} ticket(s) for event {order.event_id}, '
            f'remaining={result.tickets_remaining}'
        )
        return result

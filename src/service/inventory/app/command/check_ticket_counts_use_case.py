from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError, StoreUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.reconcile_ticket_count_use_case import (
    ReconcileTicketCountUseCase,
)
from src.service.inventory.app.dto.reconciliation_result import (
    TicketCountCheck,
    TicketCountVerification,
)
from src.service.inventory.domain.inventory_rules import calculate_remaining


class CheckTicketCountsUseCase:
    """
    Compare the stored counter with the ledger; optionally repair it.

    The repair goes through ReconcileTicketCountUseCase, then the counts are
    read again so the caller sees before/after.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        reconcile_ticket_count: ReconcileTicketCountUseCase,
    ) -> None:
        self.uow_factory = uow_factory
        self.retry_policy = retry_policy
        self.reconcile_ticket_count = reconcile_ticket_count

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
            reconcile_ticket_count=ReconcileTicketCountUseCase(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
        )

    async def _check(self, *, event_id: UUID) -> TicketCountCheck:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_query_repo.get_by_id(event_id=event_id)
            if event is None:
                raise NotFoundError('Event not found')
            sold = await uow.order_query_repo.sum_completed_quantity(event_id=event_id)

        return TicketCountCheck(
            event_id=event_id,
            tickets_total=event.tickets_total,
            current_remaining=event.tickets_remaining,
            calculated_remaining=calculate_remaining(
                tickets_total=event.tickets_total, sold_quantity=sold
            ),
            current_sold_out=event.sold_out,
            sold_quantity=sold,
        )

    async def check(self, *, event_id: UUID) -> TicketCountCheck:
        return await self.retry_policy.run(
            lambda: self._check(event_id=event_id),
            idempotent=True,
            operation_name='check_ticket_counts',
        )

    @Logger.io
    async def execute(self, *, event_id: UUID, fix: bool = False) -> TicketCountVerification:
        counts = await self.check(event_id=event_id)
        if counts.in_sync or not fix:
            if not counts.in_sync:
                Logger.base.warning(
                    f'⚠️ [VERIFY] Event {event_id} discrepancy={counts.discrepancy} (not fixed)'
                )
            return TicketCountVerification(counts=counts, fixed=False)

        result = await self.reconcile_ticket_count.execute(event_id=event_id)
        if not result.success:
            if result.error == 'Event not found':
                raise NotFoundError('Event not found')
            raise StoreUnavailableError('Failed to fix ticket counts, please retry later')

        after = await self.check(event_id=event_id)
        return TicketCountVerification(counts=counts, fixed=True, after=after)

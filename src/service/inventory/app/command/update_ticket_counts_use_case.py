from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


class UpdateTicketCountsUseCase:
    """
    Admin direct edit of an event's ticket counts.

    Writes total and remaining verbatim (after range validation) and always
    recomputes sold_out. The ledger is not consulted; reconciliation is the
    way back to ledger truth. Absolute values make the write safe to retry.
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

    async def _update(
        self, *, event_id: UUID, tickets_total: int, tickets_remaining: int
    ) -> EventInventory:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_command_repo.get_for_update(event_id=event_id)
            if event is None:
                raise NotFoundError('Event not found')

            edited = event.with_counts(
                tickets_total=tickets_total, tickets_remaining=tickets_remaining
            )
            updated = await uow.event_inventory_command_repo.update_counts(
                event_id=event_id,
                tickets_total=edited.tickets_total,
                tickets_remaining=edited.tickets_remaining,
            )
            if updated is None:
                raise NotFoundError('Event not found')
            await uow.commit()

        Logger.base.info(
            f'🛠️ [ADMIN] Event {event_id} counts set: total {event.tickets_total} → '
            f'{updated.tickets_total}, remaining {event.tickets_remaining} → '
            f'{updated.tickets_remaining}, sold_out={updated.sold_out}'
        )
        return updated

    @Logger.io
    async def execute(
        self, *, event_id: UUID, tickets_total: int, tickets_remaining: int
    ) -> EventInventory:
        return await self.retry_policy.run(
            lambda: self._update(
                event_id=event_id,
                tickets_total=tickets_total,
                tickets_remaining=tickets_remaining,
            ),
            idempotent=True,
            operation_name='update_ticket_counts',
        )

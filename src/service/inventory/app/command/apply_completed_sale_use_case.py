from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import InvalidQuantityError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.domain.inventory_rules import is_positive_quantity


class ApplyCompletedSaleUseCase:
    """
    Mutation gate: apply a finalized sale of ``quantity`` tickets to the counter.

    The decrement is one atomic statement clamped at zero, so it never rejects
    for lack of tickets; that decision belongs to the sale channel. Callers
    that also write a ledger row use ``apply_within`` so both land in one
    transaction.
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

    @staticmethod
    async def apply_within(
        uow: AbstractUnitOfWork, *, event_id: UUID, quantity: int
    ) -> EventInventory:
        if not is_positive_quantity(quantity):
            raise InvalidQuantityError()

        event = await uow.event_inventory_command_repo.apply_sale(
            event_id=event_id, quantity=quantity
        )
        if event is None:
            metrics.record_counter_update(result='not_found')
            raise NotFoundError('Event not found')

        metrics.record_counter_update(result='applied')
        return event

    async def _apply(self, *, event_id: UUID, quantity: int) -> EventInventory:
        async with self.uow_factory() as uow:
            event = await self.apply_within(uow, event_id=event_id, quantity=quantity)
            await uow.commit()
        return event

    @Logger.io
    async def execute(self, *, event_id: UUID, quantity: int) -> EventInventory:
        # A bare decrement has no idempotency key: replaying it could decrement twice
        return await self.retry_policy.run(
            lambda: self._apply(event_id=event_id, quantity=quantity),
            idempotent=False,
            operation_name='apply_completed_sale',
        )

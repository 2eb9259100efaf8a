from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


class CreateEventUseCase:
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

    async def _create(self, *, event: EventInventory) -> EventInventory:
        async with self.uow_factory() as uow:
            created = await uow.event_inventory_command_repo.create(event=event)
            await uow.commit()
        return created

    @Logger.io
    async def execute(self, *, name: str, tickets_total: int) -> EventInventory:
        event = EventInventory.create(name=name, tickets_total=tickets_total)
        created = await self.retry_policy.run(
            lambda: self._create(event=event),
            idempotent=False,
            operation_name='create_event',
        )
        Logger.base.info(
            f'🎫 [EVENT] Created {created.id} "{created.name}" with {created.tickets_total} tickets'
        )
        return created

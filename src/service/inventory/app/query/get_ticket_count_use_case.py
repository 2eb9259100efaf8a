from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_event_inventory_query_repo import (
    IEventInventoryQueryRepo,
)
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


class GetTicketCountUseCase:
    """Fast read of the counter projection (no ledger scan)"""

    def __init__(
        self, *, event_inventory_query_repo: IEventInventoryQueryRepo, retry_policy: RetryPolicy
    ) -> None:
        self.event_inventory_query_repo = event_inventory_query_repo
        self.retry_policy = retry_policy

    @classmethod
    @inject
    def depends(
        cls,
        event_inventory_query_repo: IEventInventoryQueryRepo = Depends(
            Provide[Container.event_inventory_query_repo]
        ),
        retry_policy: RetryPolicy = Depends(Provide[Container.retry_policy]),
    ) -> Self:
        return cls(event_inventory_query_repo=event_inventory_query_repo, retry_policy=retry_policy)

    @Logger.io
    async def execute(self, *, event_id: UUID) -> EventInventory:
        event = await self.retry_policy.run(
            lambda: self.event_inventory_query_repo.get_by_id(event_id=event_id),
            idempotent=True,
            operation_name='get_ticket_count',
        )
        if event is None:
            raise NotFoundError('Event not found')
        return event

from typing import Any, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.app.dto.purchase_validation_result import PurchaseValidationResult
from src.service.inventory.app.interface.i_event_inventory_query_repo import (
    IEventInventoryQueryRepo,
)
from src.service.inventory.domain.inventory_rules import sale_rejection


class ValidateTicketPurchaseUseCase:
    """
    Pre-flight sale-quantity check against the current counter.

    Advisory only: it runs outside any sale transaction, so two validations
    can both pass before either decrement lands. Box-office sales repeat the
    check under a row lock; online sales clamp and reconcile.
    """

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
    async def execute(self, *, event_id: UUID, quantity: Any) -> PurchaseValidationResult:
        event = await self.retry_policy.run(
            lambda: self.event_inventory_query_repo.get_by_id(event_id=event_id),
            idempotent=True,
            operation_name='validate_ticket_purchase',
        )
        if event is None:
            raise NotFoundError('Event not found')

        rejection = sale_rejection(
            quantity=quantity, tickets_remaining=event.tickets_remaining, sold_out=event.sold_out
        )
        if rejection is not None:
            metrics.record_validation_rejection(reason=rejection.reason_code)

        return PurchaseValidationResult(
            event_id=event_id,
            quantity=quantity,
            valid=rejection is None,
            tickets_remaining=event.tickets_remaining,
            sold_out=event.sold_out,
            reason=rejection.value if rejection else None,
        )

from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.dto.sale_result import SaleRecordResult


class GetRecordedSaleUseCase:
    """Resolve an idempotency key to the sale it already recorded (duplicate delivery/retry)"""

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

    async def _get(self, *, external_session_id: str) -> SaleRecordResult:
        async with self.uow_factory() as uow:
            order = await uow.order_query_repo.get_by_external_session_id(
                external_session_id=external_session_id
            )
            if order is None:
                raise NotFoundError('Order not found')
            event = await uow.event_inventory_query_repo.get_by_id(event_id=order.event_id)

        return SaleRecordResult(
            order=order,
            duplicate=True,
            counter_updated=False,
            tickets_remaining=event.tickets_remaining if event else None,
            sold_out=event.sold_out if event else None,
        )

    @Logger.io
    async def execute(self, *, external_session_id: str) -> SaleRecordResult:
        return await self.retry_policy.run(
            lambda: self._get(external_session_id=external_session_id),
            idempotent=True,
            operation_name='get_recorded_sale',
        )

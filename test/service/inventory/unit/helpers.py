from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional
from unittest.mock import AsyncMock, Mock
from uuid import UUID

from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.domain.inventory_rules import derive_sold_out


EVENT_ID = UUID('01936d8f-5e73-7c4e-a9c5-123456789abc')
ORDER_ID = UUID('01936d8f-5e73-7c4e-a9c5-00000000000a')


def make_event(
    *, tickets_total: int = 100, tickets_remaining: int = 100, sold_out: Optional[bool] = None
) -> EventInventory:
    return EventInventory(
        id=EVENT_ID,
        name='Spring Showcase',
        tickets_total=tickets_total,
        tickets_remaining=tickets_remaining,
        sold_out=derive_sold_out(tickets_remaining) if sold_out is None else sold_out,
        created_at=datetime.now(timezone.utc),
    )


def make_order(
    *,
    quantity: int = 2,
    status: OrderStatus = OrderStatus.PENDING,
    channel: SaleChannel = SaleChannel.ONLINE,
    external_session_id: Optional[str] = None,
) -> Order:
    return Order(
        id=ORDER_ID,
        event_id=EVENT_ID,
        quantity=quantity,
        channel=channel,
        status=status,
        external_session_id=external_session_id,
        created_at=datetime.now(timezone.utc),
    )


def no_retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0, max_delay=0)


class FakeUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work backed by AsyncMock repositories

    Records commits, rollbacks and savepoint usage so tests can assert on the
    transaction boundaries a use case draws.
    """

    def __init__(
        self,
        *,
        event: Optional[EventInventory] = None,
        sold_quantity: int = 0,
        existing_order: Optional[Order] = None,
    ) -> None:
        self.commit_count = 0
        self.rollback_count = 0
        self.savepoints_entered = 0
        self.savepoints_rolled_back = 0

        self.event_inventory_command_repo: Mock = AsyncMock()
        self.event_inventory_command_repo.get_for_update = AsyncMock(return_value=event)
        self.event_inventory_command_repo.apply_sale = AsyncMock(side_effect=self._apply_sale)
        self.event_inventory_command_repo.update_counts = AsyncMock(
            side_effect=self._update_counts
        )

        self.event_inventory_query_repo: Mock = AsyncMock()
        self.event_inventory_query_repo.get_by_id = AsyncMock(return_value=event)

        self.order_command_repo: Mock = AsyncMock()
        self.order_command_repo.create = AsyncMock(side_effect=self._create_order)
        self.order_command_repo.get_for_update = AsyncMock(return_value=existing_order)
        self.order_command_repo.transition_status = AsyncMock(return_value=True)

        self.order_query_repo: Mock = AsyncMock()
        self.order_query_repo.sum_completed_quantity = AsyncMock(return_value=sold_quantity)
        self.order_query_repo.get_by_external_session_id = AsyncMock(return_value=existing_order)

        self.event = event

    async def _apply_sale(self, *, event_id: UUID, quantity: int) -> Optional[EventInventory]:
        """Mock: clamped decrement on the in-memory event"""
        if self.event is None:
            return None
        remaining = max(0, self.event.tickets_remaining - quantity)
        self.event = EventInventory(
            id=self.event.id,
            name=self.event.name,
            tickets_total=self.event.tickets_total,
            tickets_remaining=remaining,
            sold_out=derive_sold_out(remaining),
        )
        return self.event

    async def _update_counts(
        self, *, event_id: UUID, tickets_total: int, tickets_remaining: int
    ) -> Optional[EventInventory]:
        if self.event is None:
            return None
        self.event = EventInventory(
            id=self.event.id,
            name=self.event.name,
            tickets_total=tickets_total,
            tickets_remaining=tickets_remaining,
            sold_out=derive_sold_out(tickets_remaining),
        )
        return self.event

    async def _create_order(self, *, order: Order) -> Order:
        """Mock: return order as-is (simulates successful persistence)"""
        return order

    async def _commit(self) -> None:
        self.commit_count += 1

    async def rollback(self) -> None:
        self.rollback_count += 1

    @asynccontextmanager
    async def _savepoint(self) -> AsyncIterator[None]:
        self.savepoints_entered += 1
        try:
            yield
        except Exception:
            self.savepoints_rolled_back += 1
            raise

    def savepoint(self) -> Any:
        return self._savepoint()

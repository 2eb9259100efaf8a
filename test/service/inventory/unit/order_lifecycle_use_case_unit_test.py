"""
Unit tests for the pending-order lifecycle

Test Focus:
1. CreatePendingOrderUseCase: advisory validation, pending row, counter untouched
2. CompletePendingOrderUseCase: PENDING → COMPLETED + gate decrement, once
3. CancelPendingOrderUseCase: PENDING → CANCELLED, counter untouched
"""

from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import (
    DomainError,
    InsufficientTicketsError,
    NotFoundError,
)
from src.service.inventory.app.command.cancel_pending_order_use_case import (
    CancelPendingOrderUseCase,
)
from src.service.inventory.app.command.complete_pending_order_use_case import (
    CompletePendingOrderUseCase,
)
from src.service.inventory.app.command.create_pending_order_use_case import (
    CreatePendingOrderUseCase,
)
from src.service.inventory.domain.enum.order_status import OrderStatus
from test.service.inventory.unit.helpers import (
    EVENT_ID,
    ORDER_ID,
    FakeUnitOfWork,
    make_event,
    make_order,
    no_retry_policy,
)


@pytest.mark.unit
class TestCreatePendingOrder:
    @pytest.mark.asyncio
    async def test_creates_pending_order_without_touching_counter(self) -> None:
        uow = FakeUnitOfWork(event=make_event(tickets_total=10, tickets_remaining=10))
        use_case = CreatePendingOrderUseCase(uow_factory=lambda: uow, retry_policy=no_retry_policy())

        order = await use_case.execute(event_id=EVENT_ID, quantity=2, external_session_id='cs_1')

        assert order.status == OrderStatus.PENDING
        assert order.external_session_id == 'cs_1'
        uow.event_inventory_command_repo.apply_sale.assert_not_awaited()
        assert uow.commit_count == 1

    @pytest.mark.asyncio
    async def test_rejects_quantity_above_remaining(self) -> None:
        uow = FakeUnitOfWork(event=make_event(tickets_total=10, tickets_remaining=1))
        use_case = CreatePendingOrderUseCase(uow_factory=lambda: uow, retry_policy=no_retry_policy())

        with pytest.raises(InsufficientTicketsError):
            await use_case.execute(event_id=EVENT_ID, quantity=2)

        uow.order_command_repo.create.assert_not_awaited()


@pytest.mark.unit
class TestCompletePendingOrder:
    @pytest.mark.asyncio
    async def test_completes_and_decrements(self) -> None:
        """
        Given: PENDING order of 5, event with 5 remaining
        When: complete
        Then: order COMPLETED, remaining 0, sold_out true, one commit
        """
        uow = FakeUnitOfWork(
            event=make_event(tickets_total=5, tickets_remaining=5),
            existing_order=make_order(quantity=5),
        )
        use_case = CompletePendingOrderUseCase(
            uow_factory=lambda: uow, retry_policy=no_retry_policy()
        )

        result = await use_case.execute(order_id=ORDER_ID)

        assert result.order.status == OrderStatus.COMPLETED
        assert result.tickets_remaining == 0
        assert result.sold_out is True
        uow.order_command_repo.transition_status.assert_awaited_once_with(
            order_id=ORDER_ID, from_status=OrderStatus.PENDING, to_status=OrderStatus.COMPLETED
        )
        assert uow.commit_count == 1

    @pytest.mark.asyncio
    async def test_completing_twice_is_a_duplicate(self) -> None:
        uow = FakeUnitOfWork(
            event=make_event(tickets_total=5, tickets_remaining=0),
            existing_order=make_order(quantity=5, status=OrderStatus.COMPLETED),
        )
        use_case = CompletePendingOrderUseCase(
            uow_factory=lambda: uow, retry_policy=no_retry_policy()
        )

        result = await use_case.execute(order_id=ORDER_ID)

        assert result.duplicate is True
        assert result.counter_updated is False
        uow.event_inventory_command_repo.apply_sale.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_does_not_decrement(self) -> None:
        uow = FakeUnitOfWork(event=make_event(), existing_order=make_order())
        uow.order_command_repo.transition_status = AsyncMock(return_value=False)
        use_case = CompletePendingOrderUseCase(
            uow_factory=lambda: uow, retry_policy=no_retry_policy()
        )

        result = await use_case.execute(order_id=ORDER_ID)

        assert result.duplicate is True
        uow.event_inventory_command_repo.apply_sale.assert_not_awaited()
        assert uow.commit_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_order_cannot_complete(self) -> None:
        uow = FakeUnitOfWork(
            event=make_event(), existing_order=make_order(status=OrderStatus.CANCELLED)
        )
        use_case = CompletePendingOrderUseCase(
            uow_factory=lambda: uow, retry_policy=no_retry_policy()
        )

        with pytest.raises(DomainError, match='Cannot complete a cancelled order'):
            await use_case.execute(order_id=ORDER_ID)

    @pytest.mark.asyncio
    async def test_unknown_order(self) -> None:
        uow = FakeUnitOfWork(event=make_event(), existing_order=None)
        use_case = CompletePendingOrderUseCase(
            uow_factory=lambda: uow, retry_policy=no_retry_policy()
        )

        with pytest.raises(NotFoundError, match='Order not found'):
            await use_case.execute(order_id=ORDER_ID)


@pytest.mark.unit
class TestCancelPendingOrder:
    @pytest.mark.asyncio
    async def test_cancels_pending_order(self) -> None:
        uow = FakeUnitOfWork(event=make_event(), existing_order=make_order())
        use_case = CancelPendingOrderUseCase(uow_factory=lambda: uow, retry_policy=no_retry_policy())

        order = await use_case.execute(order_id=ORDER_ID)

        assert order.status == OrderStatus.CANCELLED
        uow.event_inventory_command_repo.apply_sale.assert_not_awaited()
        uow.event_inventory_command_repo.update_counts.assert_not_awaited()
        assert uow.commit_count == 1

    @pytest.mark.asyncio
    async def test_completed_order_cannot_be_cancelled(self) -> None:
        uow = FakeUnitOfWork(
            event=make_event(), existing_order=make_order(status=OrderStatus.COMPLETED)
        )
        use_case = CancelPendingOrderUseCase(uow_factory=lambda: uow, retry_policy=no_retry_policy())

        with pytest.raises(DomainError, match='Cannot cancel a completed order'):
            await use_case.execute(order_id=ORDER_ID)

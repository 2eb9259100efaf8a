"""
Integration tests for reconciliation and the admin edit

The ledger (completed orders) is the source of truth; the counter is a
projection that reconciliation rebuilds.
"""

from collections.abc import Callable
from uuid import UUID

import pytest

from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.inventory.app.command.check_ticket_counts_use_case import (
    CheckTicketCountsUseCase,
)
from src.service.inventory.app.command.complete_pending_order_use_case import (
    CompletePendingOrderUseCase,
)
from src.service.inventory.app.command.reconcile_ticket_count_use_case import (
    ReconcileTicketCountUseCase,
)
from src.service.inventory.app.command.update_ticket_counts_use_case import (
    UpdateTicketCountsUseCase,
)
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel


async def _insert_order(
    uow_factory: Callable[[], AbstractUnitOfWork],
    *,
    event_id: UUID,
    quantity: int,
    status: OrderStatus,
) -> Order:
    order = Order.create(
        event_id=event_id, quantity=quantity, channel=SaleChannel.ONLINE, status=status
    )
    async with uow_factory() as uow:
        created = await uow.order_command_repo.create(order=order)
        await uow.commit()
    return created


async def _corrupt_remaining(
    uow_factory: Callable[[], AbstractUnitOfWork], *, event_id: UUID, tickets_remaining: int
) -> None:
    async with uow_factory() as uow:
        event = await uow.event_inventory_query_repo.get_by_id(event_id=event_id)
        assert event is not None
        await uow.event_inventory_command_repo.update_counts(
            event_id=event_id,
            tickets_total=event.tickets_total,
            tickets_remaining=tickets_remaining,
        )
        await uow.commit()


@pytest.mark.integration
class TestReconcileTicketCount:
    @pytest.mark.asyncio
    async def test_rebuilds_counter_from_completed_orders(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        """
        Given: total 100, completed 3 and 4, pending 2, stored remaining corrupted to 50
        When: reconcile twice
        Then: first run corrects to 93, second run is a no-op
        """
        event = await seed_event(tickets_total=100)
        await _insert_order(uow_factory, event_id=event.id, quantity=3, status=OrderStatus.COMPLETED)
        await _insert_order(uow_factory, event_id=event.id, quantity=4, status=OrderStatus.COMPLETED)
        await _insert_order(uow_factory, event_id=event.id, quantity=2, status=OrderStatus.PENDING)
        await _corrupt_remaining(uow_factory, event_id=event.id, tickets_remaining=50)
        use_case = ReconcileTicketCountUseCase(uow_factory=uow_factory, retry_policy=retry_policy)

        first = await use_case.execute(event_id=event.id)
        second = await use_case.execute(event_id=event.id)

        assert first.success is True
        assert first.corrected is True
        assert first.previous_remaining == 50
        assert first.tickets_remaining == 93
        assert first.sold_out is False
        assert second.success is True
        assert second.corrected is False
        assert second.tickets_remaining == 93

    @pytest.mark.asyncio
    async def test_dry_run_leaves_store_untouched(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        event = await seed_event(tickets_total=20)
        await _insert_order(uow_factory, event_id=event.id, quantity=5, status=OrderStatus.COMPLETED)
        use_case = ReconcileTicketCountUseCase(uow_factory=uow_factory, retry_policy=retry_policy)

        result = await use_case.execute(event_id=event.id, dry_run=True)

        assert result.corrected is False
        assert result.drift_detected is True
        assert result.tickets_remaining == 15
        async with uow_factory() as uow:
            stored = await uow.event_inventory_query_repo.get_by_id(event_id=event.id)
        assert stored is not None
        assert stored.tickets_remaining == 20

    @pytest.mark.asyncio
    async def test_reconcile_all_covers_every_event(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        drifted = await seed_event(tickets_total=10, name='Drifted')
        await seed_event(tickets_total=10, name='Clean')
        await _insert_order(
            uow_factory, event_id=drifted.id, quantity=10, status=OrderStatus.COMPLETED
        )
        use_case = ReconcileTicketCountUseCase(uow_factory=uow_factory, retry_policy=retry_policy)

        results = await use_case.reconcile_all()

        by_event = {r.event_id: r for r in results}
        assert len(results) == 2
        assert by_event[drifted.id].corrected is True
        assert by_event[drifted.id].sold_out is True
        assert sum(1 for r in results if r.corrected) == 1

    @pytest.mark.asyncio
    async def test_check_with_fix_reports_before_and_after(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        event = await seed_event(tickets_total=100)
        await _insert_order(uow_factory, event_id=event.id, quantity=7, status=OrderStatus.COMPLETED)
        use_case = CheckTicketCountsUseCase(
            uow_factory=uow_factory,
            retry_policy=retry_policy,
            reconcile_ticket_count=ReconcileTicketCountUseCase(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
        )

        verification = await use_case.execute(event_id=event.id, fix=True)

        assert verification.fixed is True
        assert verification.counts.current_remaining == 100
        assert verification.counts.calculated_remaining == 93
        assert verification.after is not None
        assert verification.after.current_remaining == 93


@pytest.mark.integration
class TestAdminEditThenSales:
    @pytest.mark.asyncio
    async def test_gate_works_from_edited_counts(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        """
        Given: admin sets 80/80
        When: a pending order of 5 completes
        Then: remaining 75
        """
        event = await seed_event(tickets_total=100)
        await UpdateTicketCountsUseCase(uow_factory=uow_factory, retry_policy=retry_policy).execute(
            event_id=event.id, tickets_total=80, tickets_remaining=80
        )
        pending = await _insert_order(
            uow_factory, event_id=event.id, quantity=5, status=OrderStatus.PENDING
        )

        result = await CompletePendingOrderUseCase(
            uow_factory=uow_factory, retry_policy=retry_policy
        ).execute(order_id=pending.id)

        assert result.order.status == OrderStatus.COMPLETED
        assert result.tickets_remaining == 75
        assert result.sold_out is False

    @pytest.mark.asyncio
    async def test_completing_twice_decrements_once(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        retry_policy: RetryPolicy,
        seed_event: Callable,
    ) -> None:
        event = await seed_event(tickets_total=10)
        pending = await _insert_order(
            uow_factory, event_id=event.id, quantity=4, status=OrderStatus.PENDING
        )
        use_case = CompletePendingOrderUseCase(uow_factory=uow_factory, retry_policy=retry_policy)

        await use_case.execute(order_id=pending.id)
        again = await use_case.execute(order_id=pending.id)

        assert again.duplicate is True
        assert again.tickets_remaining == 6

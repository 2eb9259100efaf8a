from typing import Callable, List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import StoreUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.inventory_metrics import metrics
from src.service.inventory.app.dto.reconciliation_result import ReconciliationResult


class ReconcileTicketCountUseCase:
    """
    Recompute an event's counter projection from the order ledger and repair drift.

    Flow (one transaction):
    1. Lock the event row
    2. sold = sum of COMPLETED order quantities
    3. correct remaining = max(0, total - sold), sold_out = remaining == 0
    4. If either stored field differs, overwrite both in one UPDATE

    Idempotent, so store calls run under the retry policy. Failures are
    reported through ReconciliationResult(success=False), never raised.
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

    async def _reconcile(self, *, event_id: UUID, dry_run: bool) -> ReconciliationResult:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_command_repo.get_for_update(event_id=event_id)
            if event is None:
                return ReconciliationResult.failed(event_id=event_id, error='Event not found')

            sold = await uow.order_query_repo.sum_completed_quantity(event_id=event_id)
            target = event.reconciled(sold_quantity=sold)

            if event.is_consistent_with(target):
                metrics.record_reconciliation(result='in_sync')
                return ReconciliationResult(
                    success=True,
                    event_id=event_id,
                    tickets_remaining=event.tickets_remaining,
                    sold_out=event.sold_out,
                    corrected=False,
                    previous_remaining=event.tickets_remaining,
                    dry_run=dry_run,
                )

            drift = event.tickets_remaining - target.tickets_remaining
            Logger.base.warning(
                f'⚠️ [RECONCILE] Drift on event {event_id}: stored remaining='
                f'{event.tickets_remaining} sold_out={event.sold_out}, ledger says remaining='
                f'{target.tickets_remaining} sold_out={target.sold_out} '
                f'(total={event.tickets_total}, sold={sold}, drift={drift:+d})'
                f'{" [dry run]" if dry_run else ""}'
            )

            if dry_run:
                metrics.record_reconciliation(result='dry_run_drift')
                return ReconciliationResult(
                    success=True,
                    event_id=event_id,
                    tickets_remaining=target.tickets_remaining,
                    sold_out=target.sold_out,
                    corrected=False,
                    drift_detected=True,
                    previous_remaining=event.tickets_remaining,
                    dry_run=True,
                )

            updated = await uow.event_inventory_command_repo.update_counts(
                event_id=event_id,
                tickets_total=event.tickets_total,
                tickets_remaining=target.tickets_remaining,
            )
            if updated is None:
                return ReconciliationResult.failed(event_id=event_id, error='Event not found')
            await uow.commit()

        metrics.record_reconciliation(result='corrected', drift=drift)
        Logger.base.info(
            f'🔧 [RECONCILE] Event {event_id} corrected: remaining '
            f'{event.tickets_remaining} → {updated.tickets_remaining}, sold_out={updated.sold_out}'
        )
        return ReconciliationResult(
            success=True,
            event_id=event_id,
            tickets_remaining=updated.tickets_remaining,
            sold_out=updated.sold_out,
            corrected=True,
            drift_detected=True,
            previous_remaining=event.tickets_remaining,
        )

    @Logger.io
    async def execute(self, *, event_id: UUID, dry_run: bool = False) -> ReconciliationResult:
        try:
            return await self.retry_policy.run(
                lambda: self._reconcile(event_id=event_id, dry_run=dry_run),
                idempotent=True,
                operation_name='reconcile_ticket_count',
            )
        except (StoreUnavailableError, SQLAlchemyError) as e:
            metrics.record_reconciliation(result='failed')
            Logger.base.error(f'❌ [RECONCILE] Event {event_id} failed: {type(e).__name__}: {e}')
            return ReconciliationResult.failed(
                event_id=event_id, error=f'Failed to reconcile ticket counts: {e}'
            )

    async def _list_event_ids(self) -> List[UUID]:
        async with self.uow_factory() as uow:
            return await uow.event_inventory_query_repo.list_event_ids()

    @Logger.io
    async def reconcile_all(self, *, dry_run: bool = False) -> List[ReconciliationResult]:
        """Run the routine for every event (scheduled backstop)"""
        event_ids = await self.retry_policy.run(
            self._list_event_ids, idempotent=True, operation_name='list_event_ids'
        )
        results = [await self.execute(event_id=event_id, dry_run=dry_run) for event_id in event_ids]

        corrected = sum(1 for r in results if r.corrected)
        failed = sum(1 for r in results if not r.success)
        Logger.base.info(
            f'📊 [RECONCILE] {len(results)} event(s) checked, {corrected} corrected, '
            f'{failed} failed{" [dry run]" if dry_run else ""}'
        )
        return results

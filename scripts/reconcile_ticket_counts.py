#!/usr/bin/env python
"""
Ticket Count Reconciliation
Recompute every event's tickets_remaining / sold_out from completed orders

Scheduled backstop for counter drift (a gate update that failed after its
order committed, manual SQL edits, restored backups).

Usage:
    python -m scripts.reconcile_ticket_counts            # repair drift
    python -m scripts.reconcile_ticket_counts --dry-run  # report only
    python -m scripts.reconcile_ticket_counts --event-id <uuid>
"""

import asyncio
import sys
from typing import List, Optional
from uuid import UUID

import click

from src.platform.config.di import cleanup, container, setup
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.reconcile_ticket_count_use_case import (
    ReconcileTicketCountUseCase,
)
from src.service.inventory.app.dto.reconciliation_result import ReconciliationResult


def build_use_case() -> ReconcileTicketCountUseCase:
    return ReconcileTicketCountUseCase(
        uow_factory=container.unit_of_work.provider,
        retry_policy=container.retry_policy(),
    )


def _print_result(result: ReconciliationResult) -> None:
    if not result.success:
        click.echo(f'❌ {result.event_id}: {result.error}')
    elif result.drift_detected:
        action = 'corrected' if result.corrected else 'would correct'
        click.echo(
            f'🔧 {result.event_id}: {action} {result.previous_remaining} -> '
            f'{result.tickets_remaining} (sold_out={result.sold_out})'
        )
    else:
        click.echo(f'✅ {result.event_id}: in sync ({result.tickets_remaining} remaining)')


async def reconcile(*, event_id: Optional[UUID], dry_run: bool) -> List[ReconciliationResult]:
    setup()
    try:
        use_case = build_use_case()
        if event_id is not None:
            return [await use_case.execute(event_id=event_id, dry_run=dry_run)]
        return await use_case.reconcile_all(dry_run=dry_run)
    finally:
        await cleanup()


@click.command()
@click.option('--dry-run', is_flag=True, help='Report drift without writing')
@click.option('--event-id', type=click.UUID, default=None, help='Only reconcile this event')
def main(dry_run: bool, event_id: Optional[UUID]) -> None:
    Logger.base.info(f'🔄 [RECONCILE] Starting{" (dry run)" if dry_run else ""}')

    results = asyncio.run(reconcile(event_id=event_id, dry_run=dry_run))
    for result in results:
        _print_result(result)

    drifted = sum(1 for r in results if r.drift_detected)
    failed = sum(1 for r in results if not r.success)
    click.echo(f'{len(results)} event(s), {drifted} drifted, {failed} failed')

    if failed:
        sys.exit(1)


if __name__ == '__main__':
    main()

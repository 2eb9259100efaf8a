from uuid import UUID

from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.check_ticket_counts_use_case import (
    CheckTicketCountsUseCase,
)
from src.service.inventory.app.command.update_ticket_counts_use_case import (
    UpdateTicketCountsUseCase,
)
from src.service.inventory.app.dto.reconciliation_result import TicketCountCheck
from src.service.inventory.driving_adapter.http_controller.event_controller import (
    to_event_response,
)
from src.service.inventory.driving_adapter.schema.event_schema import EventResponse
from src.service.inventory.driving_adapter.schema.ticket_count_schema import (
    AdminTicketCountsRequest,
    TicketCountsReport,
    VerifyCountsRequest,
    VerifyCountsResponse,
)


router = APIRouter()
admin_router = APIRouter()
tracer = trace.get_tracer(__name__)


def to_counts_report(check: TicketCountCheck) -> TicketCountsReport:
    return TicketCountsReport(
        tickets_total=check.tickets_total,
        current_remaining=check.current_remaining,
        calculated_remaining=check.calculated_remaining,
        discrepancy=check.discrepancy,
    )


@router.post('/verify-counts')
@Logger.io
async def verify_counts(
    request: VerifyCountsRequest,
    use_case: CheckTicketCountsUseCase = Depends(CheckTicketCountsUseCase.depends),
) -> VerifyCountsResponse:
    with tracer.start_as_current_span('controller.verify_counts') as span:
        span.set_attribute('event.id', str(request.event_id))
        span.set_attribute('fix', request.fix)

        verification = await use_case.execute(event_id=request.event_id, fix=request.fix)
        span.set_attribute('discrepancy', verification.counts.discrepancy)

        if verification.fixed and verification.after is not None:
            return VerifyCountsResponse(
                fixed=True,
                before=to_counts_report(verification.counts),
                after=to_counts_report(verification.after),
            )
        return VerifyCountsResponse(fixed=False, counts=to_counts_report(verification.counts))


@admin_router.patch('/event/{event_id}/ticket-counts')
@Logger.io
async def update_ticket_counts(
    event_id: UUID,
    request: AdminTicketCountsRequest,
    use_case: UpdateTicketCountsUseCase = Depends(UpdateTicketCountsUseCase.depends),
) -> EventResponse:
    with tracer.start_as_current_span('controller.update_ticket_counts') as span:
        span.set_attribute('event.id', str(event_id))
        event = await use_case.execute(
            event_id=event_id,
            tickets_total=request.tickets_total,
            tickets_remaining=request.tickets_remaining,
        )
        return to_event_response(event)

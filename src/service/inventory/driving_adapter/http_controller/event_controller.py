from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.create_event_use_case import CreateEventUseCase
from src.service.inventory.app.command.reconcile_ticket_count_use_case import (
    ReconcileTicketCountUseCase,
)
from src.service.inventory.app.query.get_ticket_count_use_case import GetTicketCountUseCase
from src.service.inventory.app.query.list_events_use_case import ListEventsUseCase
from src.service.inventory.app.query.validate_ticket_purchase_use_case import (
    ValidateTicketPurchaseUseCase,
)
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory
from src.service.inventory.driving_adapter.schema.event_schema import (
    EventCreateRequest,
    EventListResponse,
    EventResponse,
    PurchaseValidationRequest,
    PurchaseValidationResponse,
    SyncTicketsResponse,
    TicketCountResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def to_event_response(event: EventInventory) -> EventResponse:
    assert event.id is not None
    return EventResponse(
        id=event.id,
        name=event.name,
        tickets_total=event.tickets_total,
        tickets_remaining=event.tickets_remaining,
        sold_out=event.sold_out,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    with tracer.start_as_current_span('controller.create_event') as span:
        span.set_attribute('tickets_total', request.tickets_total)
        event = await use_case.execute(name=request.name, tickets_total=request.tickets_total)
        span.set_attribute('event.id', str(event.id))
        return to_event_response(event)


@router.get('')
@Logger.io
async def list_events(
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventListResponse:
    events = await use_case.execute()
    return EventListResponse(events=[to_event_response(event) for event in events])


@router.get('/{event_id}/tickets-remaining')
@Logger.io
async def get_tickets_remaining(
    event_id: UUID,
    use_case: GetTicketCountUseCase = Depends(GetTicketCountUseCase.depends),
) -> TicketCountResponse:
    event = await use_case.execute(event_id=event_id)
    return TicketCountResponse(
        tickets_remaining=event.tickets_remaining, sold_out=event.sold_out
    )


@router.post('/{event_id}/validate-purchase')
@Logger.io
async def validate_purchase(
    event_id: UUID,
    request: PurchaseValidationRequest,
    use_case: ValidateTicketPurchaseUseCase = Depends(ValidateTicketPurchaseUseCase.depends),
) -> PurchaseValidationResponse:
    result = await use_case.execute(event_id=event_id, quantity=request.quantity)
    return PurchaseValidationResponse(
        valid=result.valid,
        quantity=result.quantity,
        tickets_remaining=result.tickets_remaining,
        sold_out=result.sold_out,
        reason=result.reason,
    )


@router.post('/{event_id}/sync-tickets', response_model=SyncTicketsResponse)
@Logger.io
async def sync_tickets(
    event_id: UUID,
    dry_run: bool = False,
    use_case: ReconcileTicketCountUseCase = Depends(ReconcileTicketCountUseCase.depends),
) -> SyncTicketsResponse | JSONResponse:
    with tracer.start_as_current_span('controller.sync_tickets') as span:
        span.set_attribute('event.id', str(event_id))
        span.set_attribute('dry_run', dry_run)

        result = await use_case.execute(event_id=event_id, dry_run=dry_run)
        span.set_attribute('corrected', result.corrected)
        span.set_attribute('drift_detected', result.drift_detected)

        if not result.success:
            error_status = (
                status.HTTP_404_NOT_FOUND
                if result.error == 'Event not found'
                else status.HTTP_503_SERVICE_UNAVAILABLE
            )
            body = SyncTicketsResponse(success=False, error=result.error)
            return JSONResponse(
                status_code=error_status, content=body.model_dump(by_alias=True, mode='json')
            )

        return SyncTicketsResponse(
            success=True,
            tickets_remaining=result.tickets_remaining,
            sold_out=result.sold_out,
            corrected=result.corrected,
            drift_detected=result.drift_detected,
            dry_run=result.dry_run,
        )

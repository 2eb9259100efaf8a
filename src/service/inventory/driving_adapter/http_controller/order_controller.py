from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.cancel_pending_order_use_case import (
    CancelPendingOrderUseCase,
)
from src.service.inventory.app.command.complete_pending_order_use_case import (
    CompletePendingOrderUseCase,
)
from src.service.inventory.app.command.create_pending_order_use_case import (
    CreatePendingOrderUseCase,
)
from src.service.inventory.app.command.record_box_office_sale_use_case import (
    RecordBoxOfficeSaleUseCase,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult
from src.service.inventory.domain.entity.order_entity import Order
from src.service.inventory.driving_adapter.schema.order_schema import (
    BoxOfficeSaleRequest,
    OrderResponse,
    PendingOrderCreateRequest,
    SaleResponse,
)


router = APIRouter()
box_office_router = APIRouter()
tracer = trace.get_tracer(__name__)


def to_order_response(order: Order) -> OrderResponse:
    assert order.id is not None
    return OrderResponse(
        id=order.id,
        event_id=order.event_id,
        quantity=order.quantity,
        status=order.status.value,
        channel=order.channel.value,
        external_session_id=order.external_session_id,
        customer_email=order.customer_email,
        customer_name=order.customer_name,
        amount_total=order.amount_total,
        created_at=order.created_at,
    )


def to_sale_response(result: SaleRecordResult) -> SaleResponse:
    return SaleResponse(
        order=to_order_response(result.order),
        duplicate=result.duplicate,
        counter_updated=result.counter_updated,
        tickets_remaining=result.tickets_remaining,
        sold_out=result.sold_out,
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_pending_order(
    request: PendingOrderCreateRequest,
    use_case: CreatePendingOrderUseCase = Depends(CreatePendingOrderUseCase.depends),
) -> OrderResponse:
    with tracer.start_as_current_span('controller.create_pending_order') as span:
        span.set_attribute('event.id', str(request.event_id))
        span.set_attribute('quantity', request.quantity)
        order = await use_case.execute(
            event_id=request.event_id,
            quantity=request.quantity,
            external_session_id=request.external_session_id,
            user_id=request.user_id,
            customer_email=request.customer_email,
            customer_name=request.customer_name,
            amount_total=request.amount_total,
        )
        return to_order_response(order)


@router.post('/{order_id}/complete')
@Logger.io
async def complete_order(
    order_id: UUID,
    use_case: CompletePendingOrderUseCase = Depends(CompletePendingOrderUseCase.depends),
) -> SaleResponse:
    with tracer.start_as_current_span('controller.complete_order') as span:
        span.set_attribute('order.id', str(order_id))
        result = await use_case.execute(order_id=order_id)
        span.set_attribute('duplicate', result.duplicate)
        return to_sale_response(result)


@router.post('/{order_id}/cancel')
@Logger.io
async def cancel_order(
    order_id: UUID,
    use_case: CancelPendingOrderUseCase = Depends(CancelPendingOrderUseCase.depends),
) -> OrderResponse:
    order = await use_case.execute(order_id=order_id)
    return to_order_response(order)


@box_office_router.post('/sale', status_code=status.HTTP_201_CREATED)
@Logger.io
async def record_box_office_sale(
    request: BoxOfficeSaleRequest,
    use_case: RecordBoxOfficeSaleUseCase = Depends(RecordBoxOfficeSaleUseCase.depends),
) -> SaleResponse:
    with tracer.start_as_current_span('controller.record_box_office_sale') as span:
        span.set_attribute('event.id', str(request.event_id))
        span.set_attribute('quantity', request.quantity)
        result = await use_case.execute(
            event_id=request.event_id,
            quantity=request.quantity,
            customer_email=request.customer_email,
            customer_name=request.customer_name,
            amount_total=request.amount_total,
            processed_by=request.processed_by,
            processing_location=request.processing_location,
            payment_method=request.payment_method,
        )
        span.set_attribute('order.id', str(result.order.id))
        return to_sale_response(result)

from fastapi import APIRouter, Depends, Header, Request
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.handle_payment_webhook_use_case import (
    HandlePaymentWebhookUseCase,
)
from src.service.inventory.driving_adapter.schema.webhook_schema import WebhookAckResponse


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/stripe')
@Logger.io
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(default='', alias='Stripe-Signature'),
    use_case: HandlePaymentWebhookUseCase = Depends(HandlePaymentWebhookUseCase.depends),
) -> WebhookAckResponse:
    # Signature covers the exact bytes received, so the body is read raw
    payload = await request.body()

    with tracer.start_as_current_span('controller.stripe_webhook') as span:
        result = await use_case.execute(payload=payload, signature_header=stripe_signature)
        span.set_attribute('webhook.event_type', result.event_type)
        span.set_attribute('webhook.handled', result.handled)

        return WebhookAckResponse(
            event_type=result.event_type,
            handled=result.handled,
            order_id=result.order_id,
            duplicate=result.duplicate,
            counter_updated=result.counter_updated,
            tickets_remaining=result.tickets_remaining,
            sold_out=result.sold_out,
        )

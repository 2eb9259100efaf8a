from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.command.record_checkout_completed_use_case import (
    RecordCheckoutCompletedUseCase,
)
from src.service.inventory.app.dto.sale_result import WebhookHandlingResult
from src.service.inventory.app.interface.i_payment_webhook_verifier import (
    IPaymentWebhookVerifier,
)
from src.service.inventory.domain.payment_webhook_event import (
    CHECKOUT_SESSION_COMPLETED,
    PAYMENT_INTENT_FAILED,
    PAYMENT_INTENT_SUCCEEDED,
    CheckoutSessionCompleted,
    PaymentIntentFailed,
    PaymentIntentSucceeded,
    parse_payment_webhook_event,
)


class HandlePaymentWebhookUseCase:
    """
    Verify, parse and dispatch one payment-provider webhook delivery.

    Only checkout completion touches inventory; payment-intent events are
    logged; any other type is acknowledged with handled=False.
    """

    def __init__(
        self,
        *,
        verifier: IPaymentWebhookVerifier,
        record_checkout_completed: RecordCheckoutCompletedUseCase,
    ) -> None:
        self.verifier = verifier
        self.record_checkout_completed = record_checkout_completed

    @classmethod
    @inject
    def depends(
        cls,
        verifier: IPaymentWebhookVerifier = Depends(Provide[Container.payment_webhook_verifier]),
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        retry_policy: RetryPolicy = Depends(Provide[Container.retry_policy]),
    ) -> Self:
        return cls(
            verifier=verifier,
            record_checkout_completed=RecordCheckoutCompletedUseCase.build(
                uow_factory=uow_factory, retry_policy=retry_policy
            ),
        )

    @Logger.io(truncate_content=True)
    async def execute(self, *, payload: bytes, signature_header: str) -> WebhookHandlingResult:
        body = self.verifier.verify(payload=payload, signature_header=signature_header)
        event = parse_payment_webhook_event(body)

        if isinstance(event, CheckoutSessionCompleted):
            Logger.base.info(f'🛒 [WEBHOOK] Checkout session completed: {event.session_id}')
            sale = await self.record_checkout_completed.execute(checkout=event)
            return WebhookHandlingResult(
                event_type=CHECKOUT_SESSION_COMPLETED,
                handled=True,
                webhook_event_id=event.webhook_event_id,
                order_id=sale.order.id,
                duplicate=sale.duplicate,
                counter_updated=sale.counter_updated,
                tickets_remaining=sale.tickets_remaining,
                sold_out=sale.sold_out,
            )
        elif isinstance(event, PaymentIntentSucceeded):
            Logger.base.info(
                f'💰 [WEBHOOK] PaymentIntent {event.payment_intent_id} succeeded '
                f'(amount={event.amount})'
            )
            return WebhookHandlingResult(
                event_type=PAYMENT_INTENT_SUCCEEDED,
                handled=True,
                webhook_event_id=event.webhook_event_id,
            )
        elif isinstance(event, PaymentIntentFailed):
            Logger.base.warning(
                f'❌ [WEBHOOK] PaymentIntent {event.payment_intent_id} failed: '
                f'{event.failure_message}'
            )
            return WebhookHandlingResult(
                event_type=PAYMENT_INTENT_FAILED,
                handled=True,
                webhook_event_id=event.webhook_event_id,
            )

        Logger.base.info(f'ℹ️ [WEBHOOK] Unhandled event type {event.event_type!r}, acknowledged')
        return WebhookHandlingResult(
            event_type=event.event_type, handled=False, webhook_event_id=event.webhook_event_id
        )

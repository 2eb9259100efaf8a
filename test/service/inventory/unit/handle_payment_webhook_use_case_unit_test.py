"""
Unit tests for HandlePaymentWebhookUseCase

Test Focus:
1. Signature verification happens before anything is parsed
2. Dispatch by event type; unknown types are acknowledged, not handled
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.platform.exception.exceptions import WebhookSignatureError
from src.service.inventory.app.command.handle_payment_webhook_use_case import (
    HandlePaymentWebhookUseCase,
)
from src.service.inventory.app.dto.sale_result import SaleRecordResult
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.payment_webhook_event import CheckoutSessionCompleted
from test.service.inventory.unit.helpers import EVENT_ID, ORDER_ID, make_order
from test.shared.utils import checkout_completed_payload


def _build(body: dict | Exception) -> tuple[HandlePaymentWebhookUseCase, Mock, AsyncMock]:
    verifier = Mock()
    if isinstance(body, Exception):
        verifier.verify = Mock(side_effect=body)
    else:
        verifier.verify = Mock(return_value=body)

    record_checkout_completed = AsyncMock()
    record_checkout_completed.execute = AsyncMock(
        return_value=SaleRecordResult(
            order=make_order(quantity=2, status=OrderStatus.COMPLETED),
            tickets_remaining=8,
            sold_out=False,
        )
    )
    use_case = HandlePaymentWebhookUseCase(
        verifier=verifier, record_checkout_completed=record_checkout_completed
    )
    return use_case, verifier, record_checkout_completed


@pytest.mark.unit
class TestHandlePaymentWebhook:
    @pytest.mark.asyncio
    async def test_checkout_completed_records_sale(self) -> None:
        body = checkout_completed_payload(event_id=str(EVENT_ID), quantity=2)
        use_case, verifier, record_checkout_completed = _build(body)

        result = await use_case.execute(payload=b'{}', signature_header='t=1,v1=abc')

        verifier.verify.assert_called_once_with(payload=b'{}', signature_header='t=1,v1=abc')
        checkout = record_checkout_completed.execute.call_args.kwargs['checkout']
        assert isinstance(checkout, CheckoutSessionCompleted)
        assert checkout.quantity == 2
        assert result.handled is True
        assert result.event_type == 'checkout.session.completed'
        assert result.order_id == ORDER_ID
        assert result.tickets_remaining == 8

    @pytest.mark.asyncio
    async def test_bad_signature_stops_before_parsing(self) -> None:
        use_case, _, record_checkout_completed = _build(
            WebhookSignatureError('Webhook signature verification failed')
        )

        with pytest.raises(WebhookSignatureError):
            await use_case.execute(payload=b'{}', signature_header='t=1,v1=bad')

        record_checkout_completed.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_payment_intent_events_are_acknowledged(self) -> None:
        use_case, _, record_checkout_completed = _build(
            {'id': 'evt_9', 'type': 'payment_intent.succeeded', 'data': {'object': {'id': 'pi_1'}}}
        )

        result = await use_case.execute(payload=b'{}', signature_header='sig')

        assert result.handled is True
        assert result.event_type == 'payment_intent.succeeded'
        record_checkout_completed.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_event_type_is_not_handled(self) -> None:
        use_case, _, record_checkout_completed = _build(
            {'id': 'evt_10', 'type': 'invoice.paid', 'data': {'object': {}}}
        )

        result = await use_case.execute(payload=b'{}', signature_header='sig')

        assert result.handled is False
        assert result.event_type == 'invoice.paid'
        record_checkout_completed.execute.assert_not_awaited()

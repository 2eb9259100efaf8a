"""
Payment Webhook Event
Tagged variant of the payment-provider webhook payloads the inventory cares about

Only ``checkout.session.completed`` records a sale. The payment-intent events
are acknowledged for observability; every other type becomes an explicit
UnhandledWebhookEvent instead of falling through silently.
"""

from typing import Any, Mapping, Optional, Union
from uuid import UUID

import attrs

from src.platform.exception.exceptions import DomainError, InvalidQuantityError
from src.service.inventory.domain.inventory_rules import is_positive_quantity


CHECKOUT_SESSION_COMPLETED = 'checkout.session.completed'
PAYMENT_INTENT_SUCCEEDED = 'payment_intent.succeeded'
PAYMENT_INTENT_FAILED = 'payment_intent.payment_failed'


@attrs.define(frozen=True)
class CheckoutSessionCompleted:
    webhook_event_id: str
    session_id: str
    event_id: UUID
    quantity: int
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    amount_total: Optional[int] = None  # minor units (cents)
    user_id: Optional[str] = None
    payment_method: Optional[str] = None


@attrs.define(frozen=True)
class PaymentIntentSucceeded:
    webhook_event_id: str
    payment_intent_id: str
    amount: Optional[int] = None


@attrs.define(frozen=True)
class PaymentIntentFailed:
    webhook_event_id: str
    payment_intent_id: str
    failure_message: Optional[str] = None


@attrs.define(frozen=True)
class UnhandledWebhookEvent:
    webhook_event_id: str
    event_type: str


PaymentWebhookEvent = Union[
    CheckoutSessionCompleted,
    PaymentIntentSucceeded,
    PaymentIntentFailed,
    UnhandledWebhookEvent,
]


def _parse_event_id(raw: Any) -> UUID:
    if raw in (None, ''):
        raise DomainError('Missing event ID in metadata')
    try:
        return UUID(str(raw))
    except ValueError:
        raise DomainError(f'Invalid event ID in metadata: {raw}')


def _parse_quantity(raw: Any) -> int:
    if raw in (None, ''):
        raise DomainError('Missing quantity in metadata')
    # metadata values are always strings on the wire
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw.lstrip('-').isdigit():
            raise InvalidQuantityError()
        raw = int(raw)
    if not is_positive_quantity(raw):
        raise InvalidQuantityError()
    return raw


def _optional_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _parse_checkout_session(
    webhook_event_id: str, session: Mapping[str, Any]
) -> CheckoutSessionCompleted:
    session_id = session.get('id')
    if not session_id:
        raise DomainError('Missing checkout session id')

    metadata = session.get('metadata') or {}
    customer_details = session.get('customer_details') or {}
    payment_method_types = session.get('payment_method_types') or []

    return CheckoutSessionCompleted(
        webhook_event_id=webhook_event_id,
        session_id=str(session_id),
        event_id=_parse_event_id(metadata.get('eventId')),
        quantity=_parse_quantity(metadata.get('quantity')),
        customer_email=customer_details.get('email') or session.get('customer_email'),
        customer_name=customer_details.get('name'),
        amount_total=_optional_int(session.get('amount_total')),
        user_id=metadata.get('userId') or None,
        payment_method=payment_method_types[0] if payment_method_types else None,
    )


def parse_payment_webhook_event(payload: Mapping[str, Any]) -> PaymentWebhookEvent:
    """
    Args:
        payload: verified webhook body (``{"id", "type", "data": {"object": {...}}}``)

    Raises:
        DomainError: checkout-completed payload without a required field
    """
    webhook_event_id = str(payload.get('id') or '')
    event_type = str(payload.get('type') or '')
    data_object: Mapping[str, Any] = (payload.get('data') or {}).get('object') or {}

    if event_type == CHECKOUT_SESSION_COMPLETED:
        return _parse_checkout_session(webhook_event_id, data_object)
    elif event_type == PAYMENT_INTENT_SUCCEEDED:
        return PaymentIntentSucceeded(
            webhook_event_id=webhook_event_id,
            payment_intent_id=str(data_object.get('id') or ''),
            amount=_optional_int(data_object.get('amount')),
        )
    elif event_type == PAYMENT_INTENT_FAILED:
        last_error = data_object.get('last_payment_error') or {}
        return PaymentIntentFailed(
            webhook_event_id=webhook_event_id,
            payment_intent_id=str(data_object.get('id') or ''),
            failure_message=last_error.get('message'),
        )
    return UnhandledWebhookEvent(webhook_event_id=webhook_event_id, event_type=event_type)

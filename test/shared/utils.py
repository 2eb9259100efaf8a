import hashlib
import hmac
import time
from typing import Any, Optional

from fastapi.testclient import TestClient
import orjson

from test.constants import EVENT_BASE, WEBHOOK_SECRET


def create_event(client: TestClient, *, name: str = 'Spring Showcase', tickets_total: int) -> dict:
    response = client.post(EVENT_BASE, json={'name': name, 'ticketsTotal': tickets_total})
    assert response.status_code == 201, response.text
    return response.json()


def stripe_signature_header(
    payload: bytes, *, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None
) -> str:
    """Stripe-Signature value: t=<ts>,v1=HMAC_SHA256(secret, "<ts>.<payload>")"""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f'{ts}.'.encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f't={ts},v1={digest}'


def checkout_completed_payload(
    *,
    event_id: str,
    quantity: Any,
    session_id: str = 'cs_test_001',
    webhook_event_id: str = 'evt_test_001',
    amount_total: int = 5000,
    email: str = 'fan@example.com',
) -> dict:
    metadata: dict[str, Any] = {'eventId': event_id, 'userId': 'user_42'}
    if quantity is not None:
        metadata['quantity'] = str(quantity)
    return {
        'id': webhook_event_id,
        'type': 'checkout.session.completed',
        'data': {
            'object': {
                'id': session_id,
                'object': 'checkout.session',
                'amount_total': amount_total,
                'customer_details': {'email': email, 'name': 'Fan Person'},
                'payment_method_types': ['card'],
                'metadata': metadata,
            }
        },
    }


def post_signed_webhook(client: TestClient, url: str, body: dict, **kwargs: Any) -> Any:
    payload = orjson.dumps(body)
    return client.post(
        url,
        content=payload,
        headers={
            'Content-Type': 'application/json',
            'Stripe-Signature': stripe_signature_header(payload, **kwargs),
        },
    )

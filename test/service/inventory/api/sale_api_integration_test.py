"""
API tests for the sale channels

- Box office: validated under lock, may reject (409)
- Pending orders: create → complete / cancel
- Stripe webhook: signed deliveries, idempotent on the checkout session id
"""

from fastapi.testclient import TestClient
import pytest
from uuid_utils.compat import uuid7

from test.constants import (
    BOX_OFFICE_SALE,
    ORDER_BASE,
    STRIPE_WEBHOOK,
    event_tickets_remaining,
)
from test.shared.utils import checkout_completed_payload, create_event, post_signed_webhook


def _remaining(client: TestClient, event_id: str) -> dict:
    return client.get(event_tickets_remaining(event_id)).json()


@pytest.mark.integration
class TestBoxOfficeApi:
    def test_sale_decrements_counter(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=5)

        response = client.post(
            BOX_OFFICE_SALE,
            json={'eventId': event['id'], 'quantity': 2, 'processedBy': 'staff-17'},
        )

        assert response.status_code == 201
        body = response.json()
        assert body['order']['status'] == 'completed'
        assert body['order']['channel'] == 'box_office'
        assert body['order']['externalSessionId'].startswith('pos_')
        assert body['ticketsRemaining'] == 3
        assert _remaining(client, event['id'])['ticketsRemaining'] == 3

    def test_oversell_is_rejected(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=2)

        response = client.post(BOX_OFFICE_SALE, json={'eventId': event['id'], 'quantity': 3})

        assert response.status_code == 409
        assert response.json()['detail'] == 'not enough tickets remaining'
        assert _remaining(client, event['id'])['ticketsRemaining'] == 2

    def test_sold_out_event_is_rejected(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=1)
        client.post(BOX_OFFICE_SALE, json={'eventId': event['id'], 'quantity': 1})

        response = client.post(BOX_OFFICE_SALE, json={'eventId': event['id'], 'quantity': 1})

        assert response.status_code == 409
        assert response.json()['detail'] == 'event sold out'
        assert _remaining(client, event['id'])['soldOut'] is True

    def test_zero_quantity_is_bad_request(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=5)

        response = client.post(BOX_OFFICE_SALE, json={'eventId': event['id'], 'quantity': 0})

        assert response.status_code == 400


@pytest.mark.integration
class TestPendingOrderApi:
    def test_pending_order_does_not_consume_inventory_until_completed(
        self, client: TestClient
    ) -> None:
        event = create_event(client, tickets_total=10)

        created = client.post(ORDER_BASE, json={'eventId': event['id'], 'quantity': 4})
        assert created.status_code == 201
        order = created.json()
        assert order['status'] == 'pending'
        assert _remaining(client, event['id'])['ticketsRemaining'] == 10

        completed = client.post(f'{ORDER_BASE}/{order["id"]}/complete')

        assert completed.status_code == 200
        assert completed.json()['order']['status'] == 'completed'
        assert completed.json()['ticketsRemaining'] == 6

    def test_cancel_leaves_counter_alone(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        order = client.post(ORDER_BASE, json={'eventId': event['id'], 'quantity': 4}).json()

        response = client.post(f'{ORDER_BASE}/{order["id"]}/cancel')

        assert response.status_code == 200
        assert response.json()['status'] == 'cancelled'
        assert _remaining(client, event['id'])['ticketsRemaining'] == 10

    def test_cancelled_order_cannot_complete(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        order = client.post(ORDER_BASE, json={'eventId': event['id'], 'quantity': 4}).json()
        client.post(f'{ORDER_BASE}/{order["id"]}/cancel')

        response = client.post(f'{ORDER_BASE}/{order["id"]}/complete')

        assert response.status_code == 400
        assert response.json()['detail'] == 'Cannot complete a cancelled order'

    def test_unknown_order_is_404(self, client: TestClient) -> None:
        response = client.post(f'{ORDER_BASE}/{uuid7()}/complete')

        assert response.status_code == 404


@pytest.mark.integration
class TestStripeWebhookApi:
    def test_checkout_completed_records_sale(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        body = checkout_completed_payload(event_id=event['id'], quantity=3)

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 200
        ack = response.json()
        assert ack['received'] is True
        assert ack['handled'] is True
        assert ack['eventType'] == 'checkout.session.completed'
        assert ack['duplicate'] is False
        assert ack['ticketsRemaining'] == 7

    def test_redelivery_is_acknowledged_without_effect(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        body = checkout_completed_payload(event_id=event['id'], quantity=3)

        first = post_signed_webhook(client, STRIPE_WEBHOOK, body)
        second = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert first.json()['duplicate'] is False
        assert second.status_code == 200
        assert second.json()['duplicate'] is True
        assert second.json()['orderId'] == first.json()['orderId']
        assert _remaining(client, event['id'])['ticketsRemaining'] == 7

    def test_paid_checkout_beyond_remaining_clamps(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=2)
        body = checkout_completed_payload(event_id=event['id'], quantity=5)

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 200
        assert response.json()['ticketsRemaining'] == 0
        assert response.json()['soldOut'] is True

    def test_bad_signature_is_rejected(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        body = checkout_completed_payload(event_id=event['id'], quantity=3)

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body, secret='whsec_wrong')

        assert response.status_code == 400
        assert _remaining(client, event['id'])['ticketsRemaining'] == 10

    def test_missing_signature_header_is_rejected(self, client: TestClient) -> None:
        response = client.post(STRIPE_WEBHOOK, content=b'{}')

        assert response.status_code == 400
        assert response.json()['detail'] == 'Missing Stripe-Signature header'

    def test_missing_quantity_is_rejected(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        body = checkout_completed_payload(event_id=event['id'], quantity=None)

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Missing quantity in metadata'
        assert _remaining(client, event['id'])['ticketsRemaining'] == 10

    def test_unhandled_event_type_is_acknowledged(self, client: TestClient) -> None:
        body = {'id': 'evt_other', 'type': 'customer.created', 'data': {'object': {}}}

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 200
        assert response.json()['handled'] is False
        assert response.json()['eventType'] == 'customer.created'

    def test_checkout_finalizes_pending_order_for_session(self, client: TestClient) -> None:
        """
        Given: A pending order of 3 opened for checkout session cs_pending_001
        When: The paid checkout for that session arrives
        Then: That order is completed and the counter drops to 7
        """
        event = create_event(client, tickets_total=10)
        pending = client.post(
            ORDER_BASE,
            json={'eventId': event['id'], 'quantity': 3, 'externalSessionId': 'cs_pending_001'},
        ).json()
        body = checkout_completed_payload(
            event_id=event['id'], quantity=3, session_id='cs_pending_001'
        )

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 200
        assert response.json()['duplicate'] is False
        assert response.json()['orderId'] == pending['id']
        assert response.json()['ticketsRemaining'] == 7
        assert _remaining(client, event['id'])['ticketsRemaining'] == 7

        completed = client.post(f'{ORDER_BASE}/{pending["id"]}/complete')
        assert completed.json()['order']['status'] == 'completed'
        assert completed.json()['ticketsRemaining'] == 7

    def test_checkout_for_cancelled_order_is_rejected(self, client: TestClient) -> None:
        event = create_event(client, tickets_total=10)
        pending = client.post(
            ORDER_BASE,
            json={'eventId': event['id'], 'quantity': 3, 'externalSessionId': 'cs_cancel_001'},
        ).json()
        client.post(f'{ORDER_BASE}/{pending["id"]}/cancel')
        body = checkout_completed_payload(
            event_id=event['id'], quantity=3, session_id='cs_cancel_001'
        )

        response = post_signed_webhook(client, STRIPE_WEBHOOK, body)

        assert response.status_code == 400
        assert response.json()['detail'] == 'Cannot complete a cancelled order'
        assert _remaining(client, event['id'])['ticketsRemaining'] == 10

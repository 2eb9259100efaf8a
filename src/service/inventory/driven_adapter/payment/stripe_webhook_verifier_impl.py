"""
Stripe Webhook Verifier

Checks the ``Stripe-Signature`` header (HMAC-SHA256 over ``{timestamp}.{body}``
with the endpoint secret, timestamp tolerance from settings) and decodes the
verified body to a plain dict for the domain parser.
"""

from typing import Any, Dict, Optional

import orjson
import stripe

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import WebhookSignatureError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.app.interface.i_payment_webhook_verifier import (
    IPaymentWebhookVerifier,
)


class StripeWebhookVerifierImpl(IPaymentWebhookVerifier):
    def __init__(self, *, webhook_secret: Optional[str] = None, tolerance: Optional[int] = None):
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET.get_secret_value()
        self.tolerance = settings.STRIPE_WEBHOOK_TOLERANCE if tolerance is None else tolerance

    @Logger.io(truncate_content=True)
    def verify(self, *, payload: bytes, signature_header: str) -> Dict[str, Any]:
        if not signature_header:
            raise WebhookSignatureError('Missing Stripe-Signature header')

        try:
            body = payload.decode('utf-8')
            stripe.WebhookSignature.verify_header(
                body, signature_header, self.webhook_secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f'Webhook signature verification failed: {e}') from e
        except UnicodeDecodeError as e:
            raise WebhookSignatureError('Webhook payload is not valid UTF-8') from e

        try:
            event = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise WebhookSignatureError(f'Invalid webhook payload: {e}') from e

        if not isinstance(event, dict):
            raise WebhookSignatureError('Invalid webhook payload: expected a JSON object')
        return event

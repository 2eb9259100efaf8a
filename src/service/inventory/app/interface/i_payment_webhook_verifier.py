from abc import ABC, abstractmethod
from typing import Any, Dict


class IPaymentWebhookVerifier(ABC):
    @abstractmethod
    def verify(self, *, payload: bytes, signature_header: str) -> Dict[str, Any]:
        """
        Check the provider signature and decode the body

        Raises:
            WebhookSignatureError: missing/invalid signature or undecodable body
        """
        pass

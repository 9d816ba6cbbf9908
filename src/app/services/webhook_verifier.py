from abc import ABC, abstractmethod
from typing import Optional


class WebhookVerificationError(Exception):
    """Delivery is not authentic; never retried"""


class WebhookVerifier(ABC):
    @abstractmethod
    def verify(self, payload: bytes, signature: Optional[str]) -> None:
        """
        Authenticate a raw delivery body against its signature header.

        Raises:
            WebhookVerificationError: missing signature or secret, or mismatch
        """
        pass

"""Payment gateway interface.

Gateways must be swappable; services never talk to a provider SDK directly.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntent:
    """Provider-neutral view of a payment intent."""

    id: str
    amount: int
    currency: str
    status: str
    client_secret: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGateway(ABC):
    """Interface for payment provider operations."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        ...

    @abstractmethod
    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    def refund(
        self, payment_intent_id: str, amount: int, metadata: Mapping[str, str]
    ) -> str | None:
        """Refund a payment intent and return the provider refund id.

        Returns None when the charge had already been refunded.

        Raises:
            PaymentProviderError: If the provider rejects the request.
        """
        ...

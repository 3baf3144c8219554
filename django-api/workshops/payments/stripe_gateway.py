"""Stripe implementation of the PaymentGateway."""

import logging
from collections.abc import Mapping

import stripe

from workshops.domain.errors import PaymentProviderError
from workshops.payments.interfaces import PaymentGateway, PaymentIntent

logger = logging.getLogger(__name__)

# Stripe only accepts duplicate, fraudulent or requested_by_customer.
REFUND_REASON = "requested_by_customer"


def _to_payment_intent(intent: stripe.PaymentIntent) -> PaymentIntent:
    return PaymentIntent(
        id=intent.id,
        amount=intent.amount,
        currency=intent.currency,
        status=intent.status,
        client_secret=intent.client_secret,
        metadata=dict(intent.metadata or {}),
    )


class StripePaymentGateway(PaymentGateway):
    """Payment gateway backed by the Stripe API."""

    def __init__(self, secret_key: str | None) -> None:
        if secret_key:
            stripe.api_key = secret_key
            if secret_key.startswith("sk_test_"):
                logger.info("Stripe initialized in test mode")
            else:
                logger.info("Stripe initialized in live mode")
        else:
            logger.warning("No Stripe API key configured")

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        params = {
            "amount": amount,
            "currency": currency,
            "metadata": dict(metadata),
            "payment_method_types": ["card", "link"],
        }
        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as exc:
            logger.error("Failed to create Stripe payment intent: %s", exc)
            raise PaymentProviderError(str(exc)) from exc
        return _to_payment_intent(intent)

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as exc:
            logger.error(
                "Failed to retrieve Stripe payment intent %s: %s", payment_intent_id, exc
            )
            raise PaymentProviderError(str(exc)) from exc
        return _to_payment_intent(intent)

    def refund(
        self, payment_intent_id: str, amount: int, metadata: Mapping[str, str]
    ) -> str | None:
        try:
            refund = stripe.Refund.create(
                payment_intent=payment_intent_id,
                amount=amount,
                reason=REFUND_REASON,
                metadata=dict(metadata),
            )
        except stripe.InvalidRequestError as exc:
            if exc.code == "charge_already_refunded":
                logger.info("Payment intent %s was already refunded", payment_intent_id)
                return None
            logger.error("Failed to create Stripe refund: %s", exc)
            raise PaymentProviderError(str(exc)) from exc
        except stripe.StripeError as exc:
            logger.error("Failed to create Stripe refund: %s", exc)
            raise PaymentProviderError(str(exc)) from exc
        return refund.id

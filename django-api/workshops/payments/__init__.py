from workshops.payments.interfaces import PaymentGateway, PaymentIntent

__all__ = ["PaymentGateway", "PaymentIntent"]

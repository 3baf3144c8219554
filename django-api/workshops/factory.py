"""Wiring of services to their concrete dependencies.

This is the only module that imports the Django store and the Stripe gateway.
"""

from django.conf import settings

from workshops.payments.interfaces import PaymentGateway
from workshops.payments.stripe_gateway import StripePaymentGateway
from workshops.services.attendance_service import AttendanceService
from workshops.services.refund_service import RefundService
from workshops.services.registration_service import RegistrationService
from workshops.services.workshop_service import WorkshopService
from workshops.stores.django_store import DjangoWorkshopStore


def get_payment_gateway() -> PaymentGateway:
    return StripePaymentGateway(settings.STRIPE_SECRET_KEY)


def build_workshop_service() -> WorkshopService:
    return WorkshopService(DjangoWorkshopStore(), get_payment_gateway())


def build_registration_service() -> RegistrationService:
    return RegistrationService(
        DjangoWorkshopStore(),
        get_payment_gateway(),
        currency=settings.WORKSHOP_CURRENCY,
    )


def build_refund_service() -> RefundService:
    return RefundService(DjangoWorkshopStore(), get_payment_gateway())


def build_attendance_service() -> AttendanceService:
    return AttendanceService(DjangoWorkshopStore())

"""Refund service - per-registration refunds and the shared issuing step."""

import logging
from datetime import datetime
from uuid import UUID

from django.utils import timezone

from workshops.domain import (
    Refund,
    RefundEligibility,
    RefundStatus,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Workshop,
    WorkshopId,
    check_refund_eligibility,
)
from workshops.domain.errors import RefundAlreadyRequestedError, RefundNotEligibleError
from workshops.payments.interfaces import PaymentGateway
from workshops.services.common import Clock, load_registration, load_workshop, parse_id
from workshops.stores.interfaces import WorkshopStore

logger = logging.getLogger(__name__)


def issue_refund(
    store: WorkshopStore,
    gateway: PaymentGateway,
    registration: Registration,
    reason: str,
    requested_by: UUID | None,
    now: datetime,
) -> Refund:
    """Record a refund, mark the registration refunded and pay it back.

    Must run inside a transaction: a provider failure raises
    PaymentProviderError and the caller's rollback discards the records.
    """
    refund = store.create_refund(
        registration.id, registration.amount_paid, reason, requested_by
    )
    logger.info(
        "Refunding %s %s for registration %s (%s)",
        registration.amount_paid,
        registration.currency.upper(),
        registration.id,
        reason,
    )
    store.update_registration(registration.id, {"status": RegistrationStatus.REFUNDED})

    if registration.amount_paid.amount == 0:
        return store.update_refund(
            refund.id, {"status": RefundStatus.COMPLETED, "completed_at": now}
        )
    if registration.payment_intent_id is None:
        # Paid outside the provider; settled by hand.
        return refund

    stripe_refund_id = gateway.refund(
        registration.payment_intent_id,
        registration.amount_paid.amount,
        metadata={
            "workshop_id": str(registration.workshop_id),
            "registration_id": str(registration.id),
            "reason": reason,
        },
    )
    processed = {"processed_at": now, "processed_by": requested_by}
    if stripe_refund_id is None:
        return store.update_refund(
            refund.id,
            {"status": RefundStatus.COMPLETED, "completed_at": now, **processed},
        )
    return store.update_refund(
        refund.id,
        {
            "status": RefundStatus.PROCESSING,
            "stripe_refund_id": stripe_refund_id,
            **processed,
        },
    )


class RefundService:
    """Service for workshop refunds."""

    def __init__(
        self,
        store: WorkshopStore,
        gateway: PaymentGateway,
        clock: Clock = timezone.now,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._clock = clock

    def list_refunds(self, workshop_id: str) -> list[Refund]:
        """Return refunds for a workshop, newest first.

        Raises:
            InvalidIdError: If the workshop_id is not a valid UUID.
            WorkshopNotFoundError: If the workshop does not exist.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        load_workshop(self._store, wid)
        return self._store.list_refunds(wid)

    def check_eligibility(
        self, workshop_id: str, registration_id: str
    ) -> RefundEligibility:
        """Evaluate refund eligibility at the current instant.

        The answer is advisory; process_refund re-evaluates it.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        rid = parse_id(registration_id, RegistrationId, "registration id")
        workshop = load_workshop(self._store, wid)
        registration = load_registration(self._store, wid, rid)
        return self._evaluate(workshop, registration)

    def process_refund(
        self,
        workshop_id: str,
        registration_id: str,
        reason: str,
        requested_by: UUID | None,
    ) -> Refund:
        """Refund a registration if the policy allows it right now.

        Raises:
            InvalidIdError: If an identifier is not a valid UUID.
            WorkshopNotFoundError: If the workshop does not exist.
            RegistrationNotFoundError: If the registration is not in the workshop.
            RefundNotEligibleError: If the eligibility policy rejects the refund.
            RefundAlreadyRequestedError: If a refund record already exists.
            PaymentProviderError: If the provider refund fails.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        rid = parse_id(registration_id, RegistrationId, "registration id")
        logger.info("Processing refund for registration %s in workshop %s", rid, wid)

        with self._store.atomic():
            # Same lock as workshop cancellation, so bulk and single refunds serialise.
            workshop = load_workshop(self._store, wid, for_update=True)
            registration = load_registration(self._store, wid, rid, for_update=True)

            eligibility = self._evaluate(workshop, registration)
            if not eligibility.is_eligible:
                logger.info("Refund rejected for %s: %s", rid, eligibility.reason)
                raise RefundNotEligibleError(eligibility.reason or "Refund not eligible")

            if self._store.get_refund_for_registration(rid) is not None:
                raise RefundAlreadyRequestedError()

            refund = issue_refund(
                self._store,
                self._gateway,
                registration,
                reason,
                requested_by,
                self._clock(),
            )

        logger.info("Refund %s created with status %s", refund.id, refund.status.value)
        return refund

    def _evaluate(
        self, workshop: Workshop, registration: Registration
    ) -> RefundEligibility:
        return check_refund_eligibility(
            start_date=workshop.start_date,
            refund_window_days=workshop.refund_window_days,
            workshop_status=workshop.status,
            registration_status=registration.status,
            now=self._clock(),
        )

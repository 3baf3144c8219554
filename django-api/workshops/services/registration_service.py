"""Registration service - attendees, self-registration and interest.

Every capacity-affecting write re-reads the occupancy under the workshop
row lock before asking the admission policy.
"""

import logging
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from django.utils import timezone

from workshops.domain import (
    Interest,
    Member,
    MemberId,
    Money,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Workshop,
    WorkshopId,
    WorkshopStatus,
    should_admit,
)
from workshops.domain.errors import (
    AlreadyRegisteredError,
    AttendeeAlreadyCancelledError,
    DomainError,
    DuplicateAttendeeError,
    InvalidWorkshopStateError,
    MemberNotFoundError,
    PaymentNotCompletedError,
    RegistrationNotFoundError,
    WorkshopFullError,
)
from workshops.payments.interfaces import PaymentGateway
from workshops.services.common import Clock, load_registration, load_workshop, parse_id
from workshops.stores.interfaces import WorkshopStore

logger = logging.getLogger(__name__)

OPEN_FOR_ATTENDEES = frozenset({WorkshopStatus.PLANNED, WorkshopStatus.PUBLISHED})


@dataclass(frozen=True)
class InterestToggle:
    """Result of toggling interest on a workshop."""

    interest: Interest | None
    action: Literal["expressed", "withdrawn"]
    message: str


@dataclass(frozen=True)
class Checkout:
    """What a member needs to finish registering.

    Free workshops are confirmed straight away and carry the registration;
    priced ones carry a payment intent to complete on the client.
    """

    amount: int
    currency: str
    payment_intent_id: str | None = None
    client_secret: str | None = None
    registration: Registration | None = None


class RegistrationService:
    """Service for workshop registrations."""

    def __init__(
        self,
        store: WorkshopStore,
        gateway: PaymentGateway,
        clock: Clock = timezone.now,
        currency: str = "eur",
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._clock = clock
        self._currency = currency

    def list_attendees(
        self, workshop_id: str, status: RegistrationStatus | None = None
    ) -> list[Registration]:
        """Return registrations of a workshop, oldest first."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        load_workshop(self._store, wid)
        statuses = [status] if status is not None else None
        return self._store.list_registrations(wid, statuses)

    def add_attendee(
        self, workshop_id: str, member_id: str, priority: int = 1
    ) -> Registration:
        """Invite a member to a workshop on a coordinator's behalf.

        Raises:
            InvalidIdError: If an identifier is not a valid UUID.
            WorkshopNotFoundError: If the workshop does not exist.
            InvalidWorkshopStateError: If the workshop is finished or cancelled.
            MemberNotFoundError: If the member profile does not exist.
            DuplicateAttendeeError: If the member is already registered.
            WorkshopFullError: If a non-priority attendee finds no free seat.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        mid = parse_id(member_id, MemberId, "user profile id")
        logger.info("Adding attendee %s to workshop %s (priority %d)", mid, wid, priority)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            if workshop.status not in OPEN_FOR_ATTENDEES:
                raise InvalidWorkshopStateError(
                    f"Cannot add attendees to a {workshop.status.value} workshop"
                )
            if self._store.get_member(mid) is None:
                raise MemberNotFoundError(str(mid))
            if self._store.find_registration(wid, mid) is not None:
                raise DuplicateAttendeeError()
            if not self._admits(workshop, is_priority=priority != 0):
                raise WorkshopFullError()

            return self._store.create_registration(
                wid,
                mid,
                status=RegistrationStatus.INVITED,
                priority=priority,
                currency=self._currency,
            )

    def cancel_attendee(self, workshop_id: str, registration_id: str) -> Registration:
        """Cancel an attendee without refunding them."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        rid = parse_id(registration_id, RegistrationId, "attendee id")
        logger.info("Cancelling attendee %s in workshop %s", rid, wid)

        with self._store.atomic():
            load_workshop(self._store, wid, for_update=True)
            registration = load_registration(self._store, wid, rid, for_update=True)
            if not registration.is_active:
                raise AttendeeAlreadyCancelledError()
            return self._cancel(registration)

    def toggle_interest(self, workshop_id: str, user_id: UUID) -> InterestToggle:
        """Express or withdraw interest in a planned workshop."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Toggling interest of %s in workshop %s", user_id, wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid)
            if workshop.status is not WorkshopStatus.PLANNED:
                raise InvalidWorkshopStateError(
                    "Can only express interest in planned workshops"
                )
            existing = self._store.get_interest(wid, user_id)
            if existing is not None:
                self._store.remove_interest(existing.id)
                return InterestToggle(None, "withdrawn", "Interest withdrawn successfully")
            interest = self._store.add_interest(wid, user_id)
            return InterestToggle(interest, "expressed", "Interest expressed successfully")

    def start_registration(self, workshop_id: str, user_id: UUID) -> Checkout:
        """Begin a member's own registration for a published workshop.

        A member whose earlier registration was cancelled may register again;
        the cancelled record is reactivated once the seat is confirmed.

        Raises:
            InvalidWorkshopStateError: If the workshop is not published.
            MemberNotFoundError: If the caller has no member profile.
            AlreadyRegisteredError: If the member already has a registration.
            WorkshopFullError: If there is no free seat.
            PaymentProviderError: If the payment intent cannot be created.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Starting registration of %s for workshop %s", user_id, wid)

        with self._store.atomic():
            workshop, member, previous = self._lock_for_registration(wid, user_id)
            self._check_registration_open(workshop, previous)
            amount = workshop.price_member.amount
            if amount == 0:
                registration = self._confirm(
                    workshop, member, previous, currency=self._currency
                )
                logger.info("Free workshop %s: registration %s confirmed", wid, registration.id)
                return Checkout(amount=0, currency=self._currency, registration=registration)

        intent = self._gateway.create_payment_intent(
            amount,
            self._currency,
            metadata={
                "workshop_id": str(wid),
                "workshop_title": workshop.title,
                "user_id": str(user_id),
                "type": "workshop_registration",
            },
        )
        return Checkout(
            amount=amount,
            currency=self._currency,
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
        )

    def complete_registration(
        self, workshop_id: str, user_id: UUID, payment_intent_id: str
    ) -> Registration:
        """Confirm a registration once its payment has succeeded.

        Every check is made again under the lock. When one of them fails the
        payment is refunded before the error is raised. Completing the same
        payment twice returns the registration it already confirmed.

        Raises:
            PaymentNotCompletedError: If the payment did not succeed or was
                made for another workshop or member.
            InvalidWorkshopStateError: If the workshop left the published state.
            AlreadyRegisteredError: If the member was registered meanwhile.
            WorkshopFullError: If the workshop filled up meanwhile.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info(
            "Completing registration of %s for workshop %s with %s",
            user_id,
            wid,
            payment_intent_id,
        )

        intent = self._gateway.retrieve_payment_intent(payment_intent_id)
        if not intent.succeeded:
            raise PaymentNotCompletedError()
        if intent.metadata.get("workshop_id") != str(wid):
            raise PaymentNotCompletedError("Payment intent does not match workshop")
        if intent.metadata.get("user_id") != str(user_id):
            raise PaymentNotCompletedError("Payment intent does not match member")

        try:
            with self._store.atomic():
                workshop, member, previous = self._lock_for_registration(wid, user_id)
                if previous is not None and previous.payment_intent_id == intent.id:
                    logger.info(
                        "Payment %s already recorded on registration %s",
                        intent.id,
                        previous.id,
                    )
                    return previous
                self._check_registration_open(workshop, previous)
                return self._confirm(
                    workshop,
                    member,
                    previous,
                    amount_paid=Money(intent.amount),
                    currency=intent.currency,
                    payment_intent_id=intent.id,
                )
        except DomainError as exc:
            logger.warning(
                "Registration for workshop %s failed after payment %s (%s), refunding",
                wid,
                intent.id,
                exc.code.value,
            )
            self._gateway.refund(
                intent.id,
                intent.amount,
                metadata={"workshop_id": str(wid), "reason": exc.code.value.lower()},
            )
            raise

    def cancel_registration(self, workshop_id: str, user_id: UUID) -> Registration:
        """Cancel the caller's own active registration."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Member %s cancelling registration for workshop %s", user_id, wid)

        with self._store.atomic():
            load_workshop(self._store, wid, for_update=True)
            member = self._member_for_user(user_id)
            registration = self._store.find_registration(wid, member.id)
            if registration is None or not registration.is_active:
                raise RegistrationNotFoundError(str(member.id))
            return self._cancel(registration)

    def _lock_for_registration(
        self, wid: WorkshopId, user_id: UUID
    ) -> tuple[Workshop, Member, Registration | None]:
        workshop = load_workshop(self._store, wid, for_update=True)
        member = self._member_for_user(user_id)
        return workshop, member, self._store.find_registration(wid, member.id)

    def _check_registration_open(
        self, workshop: Workshop, previous: Registration | None
    ) -> None:
        if workshop.status is not WorkshopStatus.PUBLISHED:
            raise InvalidWorkshopStateError("Workshop not available for registration")
        if previous is not None and previous.status is not RegistrationStatus.CANCELLED:
            raise AlreadyRegisteredError()
        if not self._admits(workshop, is_priority=False):
            raise WorkshopFullError()

    def _confirm(
        self,
        workshop: Workshop,
        member: Member,
        previous: Registration | None,
        *,
        amount_paid: Money = Money(0),
        currency: str,
        payment_intent_id: str | None = None,
    ) -> Registration:
        now = self._clock()
        if previous is None:
            return self._store.create_registration(
                workshop.id,
                member.id,
                status=RegistrationStatus.CONFIRMED,
                amount_paid=amount_paid,
                currency=currency,
                payment_intent_id=payment_intent_id,
                confirmed_at=now,
            )
        logger.info("Reactivating cancelled registration %s", previous.id)
        return self._store.update_registration(
            previous.id,
            {
                "status": RegistrationStatus.CONFIRMED,
                "priority": 0,
                "amount_paid": amount_paid,
                "currency": currency,
                "payment_intent_id": payment_intent_id,
                "confirmed_at": now,
                "cancelled_at": None,
                "attendance_status": None,
                "attendance_marked_at": None,
                "attendance_marked_by": None,
                "attendance_notes": None,
            },
        )

    def _member_for_user(self, user_id: UUID) -> Member:
        member = self._store.get_member_by_user(user_id)
        if member is None:
            raise MemberNotFoundError(str(user_id))
        return member

    def _admits(self, workshop: Workshop, *, is_priority: bool) -> bool:
        return should_admit(
            current_non_priority_count=self._store.count_active_non_priority(workshop.id),
            capacity=workshop.capacity.value,
            is_priority=is_priority,
        )

    def _cancel(self, registration: Registration) -> Registration:
        return self._store.update_registration(
            registration.id,
            {"status": RegistrationStatus.CANCELLED, "cancelled_at": self._clock()},
        )

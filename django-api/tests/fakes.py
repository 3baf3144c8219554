"""In-memory stand-ins for the store and the payment gateway."""

import uuid
from collections.abc import Collection, Mapping
from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from workshops.domain import (
    Capacity,
    Interest,
    Member,
    MemberId,
    Money,
    Refund,
    RefundStatus,
    RefundWindow,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Workshop,
    WorkshopId,
    WorkshopStatus,
)
from workshops.domain.errors import (
    DuplicateAttendeeError,
    PaymentProviderError,
    RefundAlreadyRequestedError,
)
from workshops.payments.interfaces import PaymentGateway, PaymentIntent
from workshops.stores.interfaces import WorkshopStore

NOW = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


def _workshop_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    fields = dict(values)
    if "capacity" in fields:
        fields["capacity"] = Capacity(fields["capacity"])
    if "price_member" in fields:
        fields["price_member"] = Money(fields["price_member"])
    if "price_non_member" in fields:
        price = fields["price_non_member"]
        fields["price_non_member"] = Money(price) if price is not None else None
    if "refund_window_days" in fields:
        days = fields.pop("refund_window_days")
        fields["refund_window"] = RefundWindow(days) if days is not None else None
    return fields


class InMemoryWorkshopStore(WorkshopStore):
    """Dict-backed store. Transactions are not rolled back."""

    def __init__(self, clock: FixedClock | None = None) -> None:
        self.clock = clock or FixedClock()
        self.workshops: dict[WorkshopId, Workshop] = {}
        self.members: dict[MemberId, Member] = {}
        self.registrations: dict[RegistrationId, Registration] = {}
        self.refunds: dict[UUID, Refund] = {}
        self.interests: dict[UUID, Interest] = {}

    def atomic(self) -> AbstractContextManager[None]:
        return nullcontext()

    # Seeding helpers

    def add_member(self, first_name: str = "Ada", user_id: UUID | None = None) -> Member:
        member = Member(
            id=MemberId(uuid.uuid4()),
            user_id=user_id,
            first_name=first_name,
            last_name="Fencer",
            email=f"{first_name.lower()}@example.com",
        )
        self.members[member.id] = member
        return member

    def add_workshop(self, **values: Any) -> Workshop:
        defaults = {
            "title": "Longsword fundamentals",
            "location": "Main hall",
            "start_date": self.clock.now + timedelta(days=10),
            "end_date": self.clock.now + timedelta(days=10, hours=3),
            "capacity": 2,
            "price_member": 2500,
            "refund_window_days": 3,
            "status": WorkshopStatus.PUBLISHED,
        }
        return self.create_workshop({**defaults, **values}, created_by=None)

    # Workshops

    def list_workshops(
        self, statuses: Collection[WorkshopStatus] | None = None
    ) -> list[Workshop]:
        workshops = sorted(self.workshops.values(), key=lambda w: w.start_date)
        if statuses is None:
            return workshops
        return [w for w in workshops if w.status in statuses]

    def get_workshop(
        self, workshop_id: WorkshopId, *, for_update: bool = False
    ) -> Workshop | None:
        return self.workshops.get(workshop_id)

    def create_workshop(
        self, values: Mapping[str, Any], created_by: UUID | None
    ) -> Workshop:
        fields = {
            "description": "",
            "price_non_member": None,
            "is_public": False,
            "refund_window": None,
            **_workshop_fields(values),
        }
        workshop = Workshop(
            id=WorkshopId(uuid.uuid4()),
            created_by=created_by,
            created_at=self.clock.now,
            updated_at=self.clock.now,
            **fields,
        )
        self.workshops[workshop.id] = workshop
        return workshop

    def update_workshop(
        self, workshop_id: WorkshopId, values: Mapping[str, Any]
    ) -> Workshop:
        workshop = replace(
            self.workshops[workshop_id],
            updated_at=self.clock.now,
            **_workshop_fields(values),
        )
        self.workshops[workshop_id] = workshop
        return workshop

    def delete_workshop(self, workshop_id: WorkshopId) -> None:
        del self.workshops[workshop_id]

    # Members

    def get_member(self, member_id: MemberId) -> Member | None:
        return self.members.get(member_id)

    def get_member_by_user(self, user_id: UUID) -> Member | None:
        return next((m for m in self.members.values() if m.user_id == user_id), None)

    # Registrations

    def list_registrations(
        self,
        workshop_id: WorkshopId,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        return [
            r
            for r in self.registrations.values()
            if r.workshop_id == workshop_id and (statuses is None or r.status in statuses)
        ]

    def count_registrations(self, workshop_id: WorkshopId) -> int:
        return len(self.list_registrations(workshop_id))

    def count_active_non_priority(self, workshop_id: WorkshopId) -> int:
        return sum(
            1
            for r in self.list_registrations(workshop_id, RegistrationStatus.active())
            if r.priority == 0
        )

    def get_registration(
        self, registration_id: RegistrationId, *, for_update: bool = False
    ) -> Registration | None:
        return self.registrations.get(registration_id)

    def find_registration(
        self, workshop_id: WorkshopId, member_id: MemberId
    ) -> Registration | None:
        return next(
            (
                r
                for r in self.registrations.values()
                if r.workshop_id == workshop_id and r.member_id == member_id
            ),
            None,
        )

    def create_registration(
        self,
        workshop_id: WorkshopId,
        member_id: MemberId,
        *,
        status: RegistrationStatus,
        priority: int = 0,
        amount_paid: Money = Money(0),
        currency: str = "eur",
        payment_intent_id: str | None = None,
        confirmed_at: datetime | None = None,
    ) -> Registration:
        if self.find_registration(workshop_id, member_id) is not None:
            raise DuplicateAttendeeError()
        registration = Registration(
            id=RegistrationId(uuid.uuid4()),
            workshop_id=workshop_id,
            member_id=member_id,
            status=status,
            priority=priority,
            amount_paid=amount_paid,
            currency=currency,
            payment_intent_id=payment_intent_id,
            attendance_status=None,
            attendance_marked_at=None,
            attendance_marked_by=None,
            attendance_notes=None,
            registered_at=self.clock.now,
            confirmed_at=confirmed_at,
            cancelled_at=None,
        )
        self.registrations[registration.id] = registration
        return registration

    def update_registration(
        self, registration_id: RegistrationId, values: Mapping[str, Any]
    ) -> Registration:
        registration = replace(self.registrations[registration_id], **values)
        self.registrations[registration_id] = registration
        return registration

    # Refunds

    def get_refund_for_registration(
        self, registration_id: RegistrationId
    ) -> Refund | None:
        return next(
            (r for r in self.refunds.values() if r.registration_id == registration_id),
            None,
        )

    def create_refund(
        self,
        registration_id: RegistrationId,
        amount: Money,
        reason: str,
        requested_by: UUID | None,
    ) -> Refund:
        if self.get_refund_for_registration(registration_id) is not None:
            raise RefundAlreadyRequestedError()
        refund = Refund(
            id=uuid.uuid4(),
            registration_id=registration_id,
            amount=amount,
            reason=reason,
            status=RefundStatus.PENDING,
            stripe_refund_id=None,
            requested_at=self.clock.now,
            processed_at=None,
            completed_at=None,
            requested_by=requested_by,
            processed_by=None,
        )
        self.refunds[refund.id] = refund
        return refund

    def update_refund(self, refund_id: UUID, values: Mapping[str, Any]) -> Refund:
        refund = replace(self.refunds[refund_id], **values)
        self.refunds[refund_id] = refund
        return refund

    def list_refunds(self, workshop_id: WorkshopId) -> list[Refund]:
        return [
            refund
            for refund in reversed(list(self.refunds.values()))
            if self.registrations[refund.registration_id].workshop_id == workshop_id
        ]

    # Interest

    def get_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest | None:
        return next(
            (
                i
                for i in self.interests.values()
                if i.workshop_id == workshop_id and i.user_id == user_id
            ),
            None,
        )

    def add_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest:
        interest = Interest(
            id=uuid.uuid4(),
            workshop_id=workshop_id,
            user_id=user_id,
            created_at=self.clock.now,
        )
        self.interests[interest.id] = interest
        return interest

    def remove_interest(self, interest_id: UUID) -> None:
        del self.interests[interest_id]


class FakePaymentGateway(PaymentGateway):
    """Records calls instead of talking to a provider."""

    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}
        self.refunds: list[tuple[str, int, dict]] = []
        self.already_refunded: set[str] = set()
        self.fail_refunds = False

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = PaymentIntent(
            id=intent_id,
            amount=amount,
            currency=currency,
            status="requires_payment_method",
            client_secret=f"{intent_id}_secret",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def succeed(self, payment_intent_id: str) -> PaymentIntent:
        intent = replace(self.intents[payment_intent_id], status="succeeded")
        self.intents[payment_intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            return self.intents[payment_intent_id]
        except KeyError:
            raise PaymentProviderError(f"No such payment_intent: {payment_intent_id}")

    def refund(
        self, payment_intent_id: str, amount: int, metadata: Mapping[str, str]
    ) -> str | None:
        if self.fail_refunds:
            raise PaymentProviderError("card_declined")
        self.refunds.append((payment_intent_id, amount, dict(metadata)))
        if payment_intent_id in self.already_refunded:
            return None
        return f"re_test_{len(self.refunds)}"

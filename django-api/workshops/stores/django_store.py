"""Django ORM implementation of the WorkshopStore."""

from collections.abc import Collection, Mapping
from contextlib import AbstractContextManager
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from django.db import IntegrityError, transaction

from workshops import models as orm
from workshops.domain import (
    AttendanceStatus,
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
from workshops.domain.errors import DuplicateAttendeeError, RefundAlreadyRequestedError
from workshops.stores.interfaces import WorkshopStore

ACTIVE_STATUSES = [status.value for status in RegistrationStatus.active()]


def _columns(values: Mapping[str, Any]) -> dict[str, Any]:
    columns = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, Money):
            value = value.amount
        columns[key] = value
    return columns


def _to_workshop(row: orm.Workshop) -> Workshop:
    return Workshop(
        id=WorkshopId(row.id),
        title=row.title,
        description=row.description,
        location=row.location,
        start_date=row.start_date,
        end_date=row.end_date,
        capacity=Capacity(row.capacity),
        price_member=Money(row.price_member),
        price_non_member=(
            Money(row.price_non_member) if row.price_non_member is not None else None
        ),
        is_public=row.is_public,
        refund_window=(
            RefundWindow(row.refund_window_days)
            if row.refund_window_days is not None
            else None
        ),
        status=WorkshopStatus(row.status),
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_member(row: orm.MemberProfile) -> Member:
    return Member(
        id=MemberId(row.id),
        user_id=row.user_id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
    )


def _to_registration(row: orm.Registration) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        workshop_id=WorkshopId(row.workshop_id),
        member_id=MemberId(row.member_id),
        status=RegistrationStatus(row.status),
        priority=row.priority,
        amount_paid=Money(row.amount_paid),
        currency=row.currency,
        payment_intent_id=row.payment_intent_id,
        attendance_status=(
            AttendanceStatus(row.attendance_status) if row.attendance_status else None
        ),
        attendance_marked_at=row.attendance_marked_at,
        attendance_marked_by=row.attendance_marked_by,
        attendance_notes=row.attendance_notes,
        registered_at=row.registered_at,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
    )


def _to_refund(row: orm.Refund) -> Refund:
    return Refund(
        id=row.id,
        registration_id=RegistrationId(row.registration_id),
        amount=Money(row.amount),
        reason=row.reason,
        status=RefundStatus(row.status),
        stripe_refund_id=row.stripe_refund_id,
        requested_at=row.requested_at,
        processed_at=row.processed_at,
        completed_at=row.completed_at,
        requested_by=row.requested_by,
        processed_by=row.processed_by,
    )


def _to_interest(row: orm.WorkshopInterest) -> Interest:
    return Interest(
        id=row.id,
        workshop_id=WorkshopId(row.workshop_id),
        user_id=row.user_id,
        created_at=row.created_at,
    )


class DjangoWorkshopStore(WorkshopStore):
    """PostgreSQL-backed workshop store using Django ORM."""

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    def list_workshops(
        self, statuses: Collection[WorkshopStatus] | None = None
    ) -> list[Workshop]:
        queryset = orm.Workshop.objects.order_by("start_date")
        if statuses is not None:
            queryset = queryset.filter(status__in=[s.value for s in statuses])
        return [_to_workshop(row) for row in queryset]

    def get_workshop(
        self, workshop_id: WorkshopId, *, for_update: bool = False
    ) -> Workshop | None:
        queryset = orm.Workshop.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=workshop_id.value).first()
        return _to_workshop(row) if row is not None else None

    def create_workshop(
        self, values: Mapping[str, Any], created_by: UUID | None
    ) -> Workshop:
        row = orm.Workshop.objects.create(created_by=created_by, **_columns(values))
        return _to_workshop(row)

    def update_workshop(
        self, workshop_id: WorkshopId, values: Mapping[str, Any]
    ) -> Workshop:
        row = orm.Workshop.objects.get(pk=workshop_id.value)
        for field, value in _columns(values).items():
            setattr(row, field, value)
        row.save()
        return _to_workshop(row)

    def delete_workshop(self, workshop_id: WorkshopId) -> None:
        orm.Workshop.objects.filter(pk=workshop_id.value).delete()

    def get_member(self, member_id: MemberId) -> Member | None:
        row = orm.MemberProfile.objects.filter(pk=member_id.value).first()
        return _to_member(row) if row is not None else None

    def get_member_by_user(self, user_id: UUID) -> Member | None:
        row = orm.MemberProfile.objects.filter(user_id=user_id).first()
        return _to_member(row) if row is not None else None

    def list_registrations(
        self,
        workshop_id: WorkshopId,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        queryset = orm.Registration.objects.filter(
            workshop_id=workshop_id.value
        ).order_by("registered_at")
        if statuses is not None:
            queryset = queryset.filter(status__in=[s.value for s in statuses])
        return [_to_registration(row) for row in queryset]

    def count_registrations(self, workshop_id: WorkshopId) -> int:
        return orm.Registration.objects.filter(workshop_id=workshop_id.value).count()

    def count_active_non_priority(self, workshop_id: WorkshopId) -> int:
        return orm.Registration.objects.filter(
            workshop_id=workshop_id.value,
            priority=0,
            status__in=ACTIVE_STATUSES,
        ).count()

    def get_registration(
        self, registration_id: RegistrationId, *, for_update: bool = False
    ) -> Registration | None:
        queryset = orm.Registration.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=registration_id.value).first()
        return _to_registration(row) if row is not None else None

    def find_registration(
        self, workshop_id: WorkshopId, member_id: MemberId
    ) -> Registration | None:
        row = orm.Registration.objects.filter(
            workshop_id=workshop_id.value, member_id=member_id.value
        ).first()
        return _to_registration(row) if row is not None else None

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
        try:
            with transaction.atomic():
                row = orm.Registration.objects.create(
                    workshop_id=workshop_id.value,
                    member_id=member_id.value,
                    status=status.value,
                    priority=priority,
                    amount_paid=amount_paid.amount,
                    currency=currency,
                    payment_intent_id=payment_intent_id,
                    confirmed_at=confirmed_at,
                )
        except IntegrityError as exc:
            raise DuplicateAttendeeError() from exc
        return _to_registration(row)

    def update_registration(
        self, registration_id: RegistrationId, values: Mapping[str, Any]
    ) -> Registration:
        row = orm.Registration.objects.get(pk=registration_id.value)
        for field, value in _columns(values).items():
            setattr(row, field, value)
        row.save()
        return _to_registration(row)

    def get_refund_for_registration(
        self, registration_id: RegistrationId
    ) -> Refund | None:
        row = orm.Refund.objects.filter(registration_id=registration_id.value).first()
        return _to_refund(row) if row is not None else None

    def create_refund(
        self,
        registration_id: RegistrationId,
        amount: Money,
        reason: str,
        requested_by: UUID | None,
    ) -> Refund:
        try:
            with transaction.atomic():
                row = orm.Refund.objects.create(
                    registration_id=registration_id.value,
                    amount=amount.amount,
                    reason=reason,
                    status=RefundStatus.PENDING.value,
                    requested_by=requested_by,
                )
        except IntegrityError as exc:
            raise RefundAlreadyRequestedError() from exc
        return _to_refund(row)

    def update_refund(self, refund_id: UUID, values: Mapping[str, Any]) -> Refund:
        row = orm.Refund.objects.get(pk=refund_id)
        for field, value in _columns(values).items():
            setattr(row, field, value)
        row.save()
        return _to_refund(row)

    def list_refunds(self, workshop_id: WorkshopId) -> list[Refund]:
        queryset = orm.Refund.objects.filter(
            registration__workshop_id=workshop_id.value
        ).order_by("-requested_at")
        return [_to_refund(row) for row in queryset]

    def get_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest | None:
        row = orm.WorkshopInterest.objects.filter(
            workshop_id=workshop_id.value, user_id=user_id
        ).first()
        return _to_interest(row) if row is not None else None

    def add_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest:
        row = orm.WorkshopInterest.objects.create(
            workshop_id=workshop_id.value, user_id=user_id
        )
        return _to_interest(row)

    def remove_interest(self, interest_id: UUID) -> None:
        orm.WorkshopInterest.objects.filter(pk=interest_id).delete()

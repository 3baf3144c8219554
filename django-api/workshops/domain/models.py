"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in workshops/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from workshops.domain.value_objects import (
    Capacity,
    MemberId,
    Money,
    RefundWindow,
    RegistrationId,
    WorkshopId,
)


class WorkshopStatus(Enum):
    """Workshop lifecycle states."""

    PLANNED = "planned"
    PUBLISHED = "published"
    FINISHED = "finished"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "WorkshopStatus") -> bool:
        return target in _WORKSHOP_TRANSITIONS[self]


_WORKSHOP_TRANSITIONS: dict[WorkshopStatus, frozenset[WorkshopStatus]] = {
    WorkshopStatus.PLANNED: frozenset(
        {WorkshopStatus.PUBLISHED, WorkshopStatus.CANCELLED}
    ),
    WorkshopStatus.PUBLISHED: frozenset(
        {WorkshopStatus.FINISHED, WorkshopStatus.CANCELLED}
    ),
    WorkshopStatus.FINISHED: frozenset(),
    WorkshopStatus.CANCELLED: frozenset(),
}


class RegistrationStatus(Enum):
    """Registration lifecycle states."""

    INVITED = "invited"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def active(cls) -> frozenset["RegistrationStatus"]:
        """Statuses that occupy a seat."""
        return frozenset({cls.INVITED, cls.PENDING, cls.CONFIRMED})


class AttendanceStatus(Enum):
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    EXCUSED = "excused"


class RefundStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Workshop:
    """Domain representation of a Workshop."""

    id: WorkshopId
    title: str
    description: str
    location: str
    start_date: datetime
    end_date: datetime
    capacity: Capacity
    price_member: Money
    price_non_member: Money | None
    is_public: bool
    refund_window: RefundWindow | None
    status: WorkshopStatus
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    @property
    def refund_window_days(self) -> int | None:
        return self.refund_window.days if self.refund_window is not None else None


@dataclass(frozen=True)
class Member:
    """Domain representation of a club member profile."""

    id: MemberId
    user_id: UUID | None
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Registration:
    """Domain representation of an attendee's registration."""

    id: RegistrationId
    workshop_id: WorkshopId
    member_id: MemberId
    status: RegistrationStatus
    priority: int
    amount_paid: Money
    currency: str
    payment_intent_id: str | None
    attendance_status: AttendanceStatus | None
    attendance_marked_at: datetime | None
    attendance_marked_by: UUID | None
    attendance_notes: str | None
    registered_at: datetime
    confirmed_at: datetime | None
    cancelled_at: datetime | None

    @property
    def is_priority(self) -> bool:
        return self.priority != 0

    @property
    def is_active(self) -> bool:
        return self.status in RegistrationStatus.active()


@dataclass(frozen=True)
class Refund:
    """Domain representation of a Refund."""

    id: UUID
    registration_id: RegistrationId
    amount: Money
    reason: str
    status: RefundStatus
    stripe_refund_id: str | None
    requested_at: datetime
    processed_at: datetime | None
    completed_at: datetime | None
    requested_by: UUID | None
    processed_by: UUID | None


@dataclass(frozen=True)
class Interest:
    """A member's interest in a planned workshop."""

    id: UUID
    workshop_id: WorkshopId
    user_id: UUID
    created_at: datetime


@dataclass(frozen=True)
class AttendanceUpdate:
    """One attendance change requested by a coordinator."""

    registration_id: RegistrationId
    attendance_status: AttendanceStatus
    notes: str | None = None

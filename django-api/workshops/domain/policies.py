"""Admission and refund eligibility rules.

Both policies are pure: they take snapshots (and the current instant) and
return decisions. Reading the snapshot consistently is the caller's job.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from workshops.domain.models import RegistrationStatus, WorkshopStatus


def should_admit(current_non_priority_count: int, capacity: int, is_priority: bool) -> bool:
    """Decide whether a new registration gets a seat.

    Priority registrations are always admitted, even past capacity.
    Everyone else needs a free seat.
    """
    if is_priority:
        return True
    return current_non_priority_count < capacity


@dataclass(frozen=True)
class RefundEligibility:
    """Outcome of a refund eligibility check."""

    is_eligible: bool
    reason: str | None = None
    days_until_deadline: int | None = None

    @classmethod
    def rejected(cls, reason: str) -> "RefundEligibility":
        return cls(is_eligible=False, reason=reason)


WORKSHOP_FINISHED = "Workshop has already finished"
WORKSHOP_CANCELLED = "Workshop was cancelled"
REGISTRATION_PROCESSED = "Registration already processed"
NO_REFUND_WINDOW = "No refund window configured for this workshop"
DEADLINE_PASSED = "Refund deadline has passed"


def check_refund_eligibility(
    start_date: datetime,
    refund_window_days: int | None,
    workshop_status: WorkshopStatus,
    registration_status: RegistrationStatus,
    now: datetime,
) -> RefundEligibility:
    """Decide whether cancelling a registration qualifies for a refund.

    Rules are checked in order and the first match wins. Cancelled workshops
    are refunded in bulk when they are cancelled, never through this path.
    The result is only valid for ``now``.
    """
    if workshop_status is WorkshopStatus.FINISHED:
        return RefundEligibility.rejected(WORKSHOP_FINISHED)

    if workshop_status is WorkshopStatus.CANCELLED:
        return RefundEligibility.rejected(WORKSHOP_CANCELLED)

    if registration_status in (RegistrationStatus.REFUNDED, RegistrationStatus.CANCELLED):
        return RefundEligibility.rejected(REGISTRATION_PROCESSED)

    if refund_window_days is None:
        return RefundEligibility.rejected(NO_REFUND_WINDOW)

    deadline = start_date - timedelta(days=refund_window_days)
    if now >= deadline:
        return RefundEligibility.rejected(DEADLINE_PASSED)

    return RefundEligibility(
        is_eligible=True,
        days_until_deadline=max((deadline - now).days, 0),
    )

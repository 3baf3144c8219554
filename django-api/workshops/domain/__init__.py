from workshops.domain.models import (
    AttendanceStatus,
    AttendanceUpdate,
    Interest,
    Member,
    Refund,
    RefundStatus,
    Registration,
    RegistrationStatus,
    Workshop,
    WorkshopStatus,
)
from workshops.domain.policies import RefundEligibility, check_refund_eligibility, should_admit
from workshops.domain.value_objects import (
    Capacity,
    MemberId,
    Money,
    RefundWindow,
    RegistrationId,
    WorkshopId,
)

__all__ = [
    "Workshop",
    "Registration",
    "Refund",
    "Member",
    "Interest",
    "AttendanceUpdate",
    "WorkshopStatus",
    "RegistrationStatus",
    "AttendanceStatus",
    "RefundStatus",
    "WorkshopId",
    "RegistrationId",
    "MemberId",
    "Money",
    "Capacity",
    "RefundWindow",
    "RefundEligibility",
    "check_refund_eligibility",
    "should_admit",
]

from workshops.handlers.views import (
    AttendanceView,
    AttendeeCancelView,
    AttendeeListView,
    InterestView,
    RefundEligibilityView,
    RefundListView,
    RegisterCompleteView,
    RegisterView,
    WorkshopCancelView,
    WorkshopDetailView,
    WorkshopFinishView,
    WorkshopListView,
    WorkshopPublishView,
)

__all__ = [
    "WorkshopListView",
    "WorkshopDetailView",
    "WorkshopPublishView",
    "WorkshopFinishView",
    "WorkshopCancelView",
    "AttendeeListView",
    "AttendeeCancelView",
    "AttendanceView",
    "RefundListView",
    "RefundEligibilityView",
    "InterestView",
    "RegisterView",
    "RegisterCompleteView",
]

from django.urls import path

from workshops.handlers import (
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

urlpatterns = [
    path("workshops", WorkshopListView.as_view(), name="workshop-list"),
    path(
        "workshops/<str:workshop_id>",
        WorkshopDetailView.as_view(),
        name="workshop-detail",
    ),
    path(
        "workshops/<str:workshop_id>/publish",
        WorkshopPublishView.as_view(),
        name="workshop-publish",
    ),
    path(
        "workshops/<str:workshop_id>/finish",
        WorkshopFinishView.as_view(),
        name="workshop-finish",
    ),
    path(
        "workshops/<str:workshop_id>/cancel",
        WorkshopCancelView.as_view(),
        name="workshop-cancel",
    ),
    path(
        "workshops/<str:workshop_id>/attendees",
        AttendeeListView.as_view(),
        name="attendee-list",
    ),
    path(
        "workshops/<str:workshop_id>/attendees/<str:attendee_id>/cancel",
        AttendeeCancelView.as_view(),
        name="attendee-cancel",
    ),
    path(
        "workshops/<str:workshop_id>/attendance",
        AttendanceView.as_view(),
        name="attendance",
    ),
    path(
        "workshops/<str:workshop_id>/refunds",
        RefundListView.as_view(),
        name="refund-list",
    ),
    path(
        "workshops/<str:workshop_id>/refunds/eligibility/<str:registration_id>",
        RefundEligibilityView.as_view(),
        name="refund-eligibility",
    ),
    path(
        "workshops/<str:workshop_id>/interest",
        InterestView.as_view(),
        name="workshop-interest",
    ),
    path(
        "workshops/<str:workshop_id>/register",
        RegisterView.as_view(),
        name="workshop-register",
    ),
    path(
        "workshops/<str:workshop_id>/register/complete",
        RegisterCompleteView.as_view(),
        name="workshop-register-complete",
    ),
]

"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models


class WorkshopStatus(models.TextChoices):
    PLANNED = "planned"
    PUBLISHED = "published"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class RegistrationStatus(models.TextChoices):
    INVITED = "invited"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class AttendanceStatus(models.TextChoices):
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    EXCUSED = "excused"


class RefundStatus(models.TextChoices):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class MemberProfile(models.Model):
    """Persistence model for club member profiles."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(unique=True, null=True, blank=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Workshop(models.Model):
    """Persistence model for workshops."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    capacity = models.PositiveIntegerField()
    price_member = models.PositiveIntegerField(default=0)
    price_non_member = models.PositiveIntegerField(null=True, blank=True)
    is_public = models.BooleanField(default=False)
    refund_window_days = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=WorkshopStatus.choices, default=WorkshopStatus.PLANNED
    )
    created_by = models.UUIDField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["start_date"]),
        ]

    def __str__(self) -> str:
        return f"{self.title} - {self.start_date}"


class Registration(models.Model):
    """Persistence model for workshop attendees."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    workshop = models.ForeignKey(
        Workshop, on_delete=models.CASCADE, related_name="registrations"
    )
    member = models.ForeignKey(
        MemberProfile, on_delete=models.PROTECT, related_name="registrations"
    )
    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.INVITED,
    )
    priority = models.PositiveSmallIntegerField(default=0)
    amount_paid = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="eur")
    payment_intent_id = models.CharField(max_length=255, null=True, blank=True)
    attendance_status = models.CharField(
        max_length=20, choices=AttendanceStatus.choices, null=True, blank=True
    )
    attendance_marked_at = models.DateTimeField(null=True, blank=True)
    attendance_marked_by = models.UUIDField(null=True, blank=True)
    attendance_notes = models.TextField(null=True, blank=True)
    registered_at = models.DateTimeField(auto_now_add=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["registered_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["workshop", "member"], name="unique_member_per_workshop"
            ),
        ]
        indexes = [
            models.Index(fields=["workshop", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.member} @ {self.workshop.title} ({self.status})"


class Refund(models.Model):
    """Persistence model for refunds. At most one per registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration = models.OneToOneField(
        Registration, on_delete=models.PROTECT, related_name="refund"
    )
    amount = models.PositiveIntegerField()
    reason = models.CharField(max_length=500)
    status = models.CharField(
        max_length=20, choices=RefundStatus.choices, default=RefundStatus.PENDING
    )
    stripe_refund_id = models.CharField(max_length=255, null=True, blank=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    requested_by = models.UUIDField(null=True, blank=True)
    processed_by = models.UUIDField(null=True, blank=True)

    class Meta:
        ordering = ["-requested_at"]

    def __str__(self) -> str:
        return f"Refund {self.amount} for {self.registration_id} ({self.status})"


class WorkshopInterest(models.Model):
    """Persistence model for interest in planned workshops."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    workshop = models.ForeignKey(
        Workshop, on_delete=models.CASCADE, related_name="interests"
    )
    user_id = models.UUIDField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["workshop", "user_id"], name="unique_interest_per_user"
            ),
        ]

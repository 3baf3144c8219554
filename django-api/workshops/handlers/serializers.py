"""Serializers for request validation and for rendering domain models.

Input serializers only check request shape; business rules live in services.
Output serializers read domain dataclasses, never ORM rows.
"""

from django.utils import timezone
from rest_framework import serializers

from workshops.domain import AttendanceStatus, RegistrationStatus, WorkshopStatus

MAX_TEXT_LENGTH = 500


# Input


class WorkshopWriteSerializer(serializers.Serializer):
    """Fields accepted when creating or updating a workshop."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(max_length=255)
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    capacity = serializers.IntegerField(min_value=1)
    price_member = serializers.IntegerField(min_value=0)
    price_non_member = serializers.IntegerField(
        min_value=0, required=False, allow_null=True, default=None
    )
    is_public = serializers.BooleanField(required=False, default=False)
    refund_window_days = serializers.IntegerField(
        min_value=0, required=False, allow_null=True, default=None
    )

    def validate_start_date(self, value):
        if not self.partial and timezone.localdate(value) <= timezone.localdate():
            raise serializers.ValidationError(
                "Workshop start date cannot be in the past or today"
            )
        return value

    def validate(self, attrs):
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start is not None and end is not None and end <= start:
            raise serializers.ValidationError(
                {"end_date": "End date must be after start date"}
            )
        return attrs


class AttendeeCreateSerializer(serializers.Serializer):
    user_profile_id = serializers.UUIDField()
    priority = serializers.IntegerField(
        min_value=0, max_value=32767, required=False, default=1
    )


class AttendanceItemSerializer(serializers.Serializer):
    registration_id = serializers.UUIDField()
    attendance_status = serializers.ChoiceField(
        choices=[status.value for status in AttendanceStatus]
    )
    notes = serializers.CharField(
        max_length=MAX_TEXT_LENGTH, required=False, allow_blank=True, allow_null=True
    )


class AttendanceUpdateSerializer(serializers.Serializer):
    attendance_updates = AttendanceItemSerializer(many=True, allow_empty=False)


class RefundCreateSerializer(serializers.Serializer):
    registration_id = serializers.UUIDField()
    reason = serializers.CharField(min_length=1, max_length=MAX_TEXT_LENGTH)


class CompleteRegistrationSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)


class AttendeeStatusQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[status.value for status in RegistrationStatus], required=False
    )


class WorkshopStatusQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[status.value for status in WorkshopStatus], required=False
    )


# Output


class WorkshopSerializer(serializers.Serializer):
    """Serializer for the Workshop domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    capacity = serializers.IntegerField(source="capacity.value")
    price_member = serializers.IntegerField(source="price_member.amount")
    price_non_member = serializers.SerializerMethodField()
    is_public = serializers.BooleanField()
    refund_window_days = serializers.IntegerField(allow_null=True)
    status = serializers.CharField(source="status.value")
    created_by = serializers.UUIDField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_price_non_member(self, workshop) -> int | None:
        if workshop.price_non_member is None:
            return None
        return workshop.price_non_member.amount


class RegistrationSerializer(serializers.Serializer):
    """Serializer for the Registration domain model."""

    id = serializers.UUIDField(source="id.value")
    workshop_id = serializers.UUIDField(source="workshop_id.value")
    user_profile_id = serializers.UUIDField(source="member_id.value")
    status = serializers.CharField(source="status.value")
    priority = serializers.IntegerField()
    amount_paid = serializers.IntegerField(source="amount_paid.amount")
    currency = serializers.CharField()
    payment_intent_id = serializers.CharField(allow_null=True)
    attendance_status = serializers.SerializerMethodField()
    attendance_notes = serializers.CharField(allow_null=True)
    attendance_marked_at = serializers.DateTimeField(allow_null=True)
    attendance_marked_by = serializers.UUIDField(allow_null=True)
    registered_at = serializers.DateTimeField()
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)

    def get_attendance_status(self, registration) -> str | None:
        if registration.attendance_status is None:
            return None
        return registration.attendance_status.value


class RefundSerializer(serializers.Serializer):
    """Serializer for the Refund domain model."""

    id = serializers.UUIDField()
    registration_id = serializers.UUIDField(source="registration_id.value")
    amount = serializers.IntegerField(source="amount.amount")
    reason = serializers.CharField()
    status = serializers.CharField(source="status.value")
    stripe_refund_id = serializers.CharField(allow_null=True)
    requested_at = serializers.DateTimeField()
    processed_at = serializers.DateTimeField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)
    requested_by = serializers.UUIDField(allow_null=True)
    processed_by = serializers.UUIDField(allow_null=True)


class RefundEligibilitySerializer(serializers.Serializer):
    is_eligible = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    days_until_deadline = serializers.IntegerField(allow_null=True)


class InterestSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    workshop_id = serializers.UUIDField(source="workshop_id.value")
    user_id = serializers.UUIDField()
    created_at = serializers.DateTimeField()

"""Domain error codes for the workshops module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    WORKSHOP_NOT_FOUND = "WORKSHOP_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    INVALID_WORKSHOP_STATE = "INVALID_WORKSHOP_STATE"
    INVALID_WORKSHOP_DATES = "INVALID_WORKSHOP_DATES"
    WORKSHOP_NOT_STARTED = "WORKSHOP_NOT_STARTED"
    WORKSHOP_FULL = "WORKSHOP_FULL"
    DUPLICATE_ATTENDEE = "DUPLICATE_ATTENDEE"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    ATTENDEE_ALREADY_CANCELLED = "ATTENDEE_ALREADY_CANCELLED"
    REFUND_NOT_ELIGIBLE = "REFUND_NOT_ELIGIBLE"
    REFUND_ALREADY_REQUESTED = "REFUND_ALREADY_REQUESTED"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"
    PAYMENT_PROVIDER_ERROR = "PAYMENT_PROVIDER_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, field: str = "id") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {field} format",
        )
        self.field = field


class WorkshopNotFoundError(DomainError):
    """Raised when a workshop is not found."""

    def __init__(self, workshop_id: str) -> None:
        super().__init__(
            code=ErrorCode.WORKSHOP_NOT_FOUND,
            message="Workshop not found",
        )
        self.workshop_id = workshop_id


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found in the given workshop."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class MemberNotFoundError(DomainError):
    """Raised when a member profile is not found."""

    def __init__(self, member_id: str) -> None:
        super().__init__(
            code=ErrorCode.MEMBER_NOT_FOUND,
            message="User profile not found",
        )
        self.member_id = member_id


class InvalidWorkshopStateError(DomainError):
    """Raised when an operation is not allowed in the workshop's status."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_WORKSHOP_STATE, message=message)


class InvalidWorkshopDatesError(DomainError):
    """Raised when a workshop's start and end dates do not fit together."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_WORKSHOP_DATES, message=message)


class WorkshopNotStartedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.WORKSHOP_NOT_STARTED,
            message="Cannot update attendance for a workshop that has not started yet",
        )


class WorkshopFullError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.WORKSHOP_FULL, message="Workshop is full")


class DuplicateAttendeeError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_ATTENDEE,
            message="User is already an attendee of this workshop",
        )


class AlreadyRegisteredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="Already registered for this workshop",
        )


class AttendeeAlreadyCancelledError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ATTENDEE_ALREADY_CANCELLED,
            message="Attendee already cancelled",
        )


class RefundNotEligibleError(DomainError):
    """Raised when the refund eligibility policy rejects a refund."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.REFUND_NOT_ELIGIBLE, message=reason)


class RefundAlreadyRequestedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REFUND_ALREADY_REQUESTED,
            message="Refund already requested for this registration",
        )


class PaymentNotCompletedError(DomainError):
    """Raised when a payment intent cannot back a registration."""

    def __init__(self, message: str = "Payment not completed") -> None:
        super().__init__(code=ErrorCode.PAYMENT_NOT_COMPLETED, message=message)


class PaymentProviderError(DomainError):
    """Raised when the payment provider rejects or fails a request."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_PROVIDER_ERROR,
            message="Payment provider request failed",
        )
        self.detail = detail

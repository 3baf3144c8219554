"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Write methods take mappings keyed by domain field names. Enum values are
passed as domain enums. Capacity is a plain integer; money may be a plain
integer or a `Money`.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection, Mapping
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any
from uuid import UUID

from workshops.domain import (
    Interest,
    Member,
    MemberId,
    Money,
    Refund,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Workshop,
    WorkshopId,
    WorkshopStatus,
)


class WorkshopStore(ABC):
    """Interface for workshop persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager wrapping its body in one transaction."""
        ...

    # Workshops

    @abstractmethod
    def list_workshops(
        self, statuses: Collection[WorkshopStatus] | None = None
    ) -> list[Workshop]:
        """Return workshops ordered by start_date ascending."""
        ...

    @abstractmethod
    def get_workshop(
        self, workshop_id: WorkshopId, *, for_update: bool = False
    ) -> Workshop | None:
        """Return a workshop by ID, or None if not found.

        With ``for_update`` the row stays locked until the surrounding
        transaction ends.
        """
        ...

    @abstractmethod
    def create_workshop(
        self, values: Mapping[str, Any], created_by: UUID | None
    ) -> Workshop:
        ...

    @abstractmethod
    def update_workshop(
        self, workshop_id: WorkshopId, values: Mapping[str, Any]
    ) -> Workshop:
        ...

    @abstractmethod
    def delete_workshop(self, workshop_id: WorkshopId) -> None:
        ...

    # Members

    @abstractmethod
    def get_member(self, member_id: MemberId) -> Member | None:
        ...

    @abstractmethod
    def get_member_by_user(self, user_id: UUID) -> Member | None:
        """Return the member profile owned by an auth platform user."""
        ...

    # Registrations

    @abstractmethod
    def list_registrations(
        self,
        workshop_id: WorkshopId,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        """Return registrations of a workshop ordered by registered_at."""
        ...

    @abstractmethod
    def count_registrations(self, workshop_id: WorkshopId) -> int:
        """Count every registration of a workshop, whatever its status."""
        ...

    @abstractmethod
    def count_active_non_priority(self, workshop_id: WorkshopId) -> int:
        """Count active registrations without priority."""
        ...

    @abstractmethod
    def get_registration(
        self, registration_id: RegistrationId, *, for_update: bool = False
    ) -> Registration | None:
        ...

    @abstractmethod
    def find_registration(
        self, workshop_id: WorkshopId, member_id: MemberId
    ) -> Registration | None:
        ...

    @abstractmethod
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
        ...

    @abstractmethod
    def update_registration(
        self, registration_id: RegistrationId, values: Mapping[str, Any]
    ) -> Registration:
        ...

    # Refunds

    @abstractmethod
    def get_refund_for_registration(
        self, registration_id: RegistrationId
    ) -> Refund | None:
        ...

    @abstractmethod
    def create_refund(
        self,
        registration_id: RegistrationId,
        amount: Money,
        reason: str,
        requested_by: UUID | None,
    ) -> Refund:
        """Create a pending refund. Storage rejects a second one."""
        ...

    @abstractmethod
    def update_refund(self, refund_id: UUID, values: Mapping[str, Any]) -> Refund:
        ...

    @abstractmethod
    def list_refunds(self, workshop_id: WorkshopId) -> list[Refund]:
        """Return refunds of a workshop, newest first."""
        ...

    # Interest

    @abstractmethod
    def get_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest | None:
        ...

    @abstractmethod
    def add_interest(self, workshop_id: WorkshopId, user_id: UUID) -> Interest:
        ...

    @abstractmethod
    def remove_interest(self, interest_id: UUID) -> None:
        ...

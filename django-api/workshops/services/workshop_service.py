"""Workshop service - all workshop lifecycle logic lives here.

Services:
- Depend only on interfaces (stores, payment gateways)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from django.utils import timezone

from workshops.domain import RegistrationStatus, Workshop, WorkshopId, WorkshopStatus
from workshops.domain.errors import InvalidWorkshopDatesError, InvalidWorkshopStateError
from workshops.payments.interfaces import PaymentGateway
from workshops.services.common import Clock, load_workshop, parse_id
from workshops.services.refund_service import issue_refund
from workshops.stores.interfaces import WorkshopStore

logger = logging.getLogger(__name__)

CANCELLATION_REASON = "Workshop cancelled"

MEMBER_VISIBLE_STATUSES = frozenset({WorkshopStatus.PLANNED, WorkshopStatus.PUBLISHED})
EDITABLE_STATUSES = frozenset({WorkshopStatus.PLANNED, WorkshopStatus.PUBLISHED})
PRICE_FIELDS = frozenset({"price_member", "price_non_member"})


class WorkshopService:
    """Service for workshop catalog and lifecycle operations."""

    def __init__(
        self,
        store: WorkshopStore,
        gateway: PaymentGateway,
        clock: Clock = timezone.now,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._clock = clock

    def list_workshops(
        self, status: WorkshopStatus | None = None, *, include_all: bool = False
    ) -> list[Workshop]:
        """Return workshops ordered by start date.

        Members only see planned and published workshops; coordinators
        (``include_all``) see every status.
        """
        visible = None if include_all else MEMBER_VISIBLE_STATUSES
        if status is None:
            return self._store.list_workshops(visible)
        if visible is not None and status not in visible:
            return []
        return self._store.list_workshops([status])

    def get_workshop(self, workshop_id: str) -> Workshop:
        """Return a workshop by ID.

        Raises:
            InvalidIdError: If the workshop_id is not a valid UUID.
            WorkshopNotFoundError: If the workshop does not exist.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        return load_workshop(self._store, wid)

    def create_workshop(
        self, values: Mapping[str, Any], created_by: UUID | None
    ) -> Workshop:
        """Create a workshop in the planned state."""
        logger.info("Creating workshop %r", values.get("title"))
        workshop = self._store.create_workshop(
            {**values, "status": WorkshopStatus.PLANNED}, created_by
        )
        logger.info("Workshop %s created", workshop.id)
        return workshop

    def update_workshop(self, workshop_id: str, values: Mapping[str, Any]) -> Workshop:
        """Update a planned or published workshop.

        Prices stay fixed once a published workshop has registrations. Dates
        are checked against the stored ones, so a partial update cannot leave
        the workshop ending before it starts.

        Raises:
            InvalidWorkshopStateError: If the workshop can no longer be edited.
            InvalidWorkshopDatesError: If the resulting dates are inconsistent
                or a new start date is not in the future.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Updating workshop %s fields %s", wid, sorted(values))

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            if workshop.status not in EDITABLE_STATUSES:
                raise InvalidWorkshopStateError(
                    f"Workshop is {workshop.status.value} and cannot be edited"
                )
            if (
                PRICE_FIELDS & values.keys()
                and workshop.status is not WorkshopStatus.PLANNED
                and self._store.count_registrations(wid) > 0
            ):
                raise InvalidWorkshopStateError(
                    "Pricing cannot be changed once attendees have registered"
                )
            self._check_dates(workshop, values)
            return self._store.update_workshop(wid, values)

    def delete_workshop(self, workshop_id: str) -> None:
        """Delete a workshop that was never published."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Deleting workshop %s", wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            if workshop.status is not WorkshopStatus.PLANNED:
                raise InvalidWorkshopStateError(
                    f"Workshop is {workshop.status.value} and cannot be deleted. "
                    "Only planned workshops can be deleted."
                )
            self._store.delete_workshop(wid)

    def publish_workshop(self, workshop_id: str) -> Workshop:
        """Open a planned workshop for registration."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Publishing workshop %s", wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            self._ensure_transition(workshop, WorkshopStatus.PUBLISHED, "published")
            return self._store.update_workshop(wid, {"status": WorkshopStatus.PUBLISHED})

    def finish_workshop(self, workshop_id: str) -> Workshop:
        """Mark a published workshop as finished.

        Raises:
            InvalidWorkshopStateError: If the workshop is not published, has
                not started yet, or attendees are still invited or pending.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Finishing workshop %s", wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            self._ensure_transition(workshop, WorkshopStatus.FINISHED, "finished")
            if workshop.start_date > self._clock():
                raise InvalidWorkshopStateError(
                    "Workshop cannot be finished before it has started"
                )
            undecided = self._store.list_registrations(
                wid, [RegistrationStatus.INVITED, RegistrationStatus.PENDING]
            )
            if undecided:
                raise InvalidWorkshopStateError(
                    "Workshop cannot be finished while there are attendees "
                    "with pending or invited status"
                )
            return self._store.update_workshop(wid, {"status": WorkshopStatus.FINISHED})

    def cancel_workshop(self, workshop_id: str, cancelled_by: UUID | None) -> Workshop:
        """Cancel a workshop and refund every paid active registration.

        Runs under the workshop lock shared with per-registration refunds.
        Registrations that already have a refund record are left alone and
        unpaid active registrations are cancelled. If any provider refund
        fails nothing is committed and the cancellation can be retried.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Cancelling workshop %s", wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid, for_update=True)
            self._ensure_transition(workshop, WorkshopStatus.CANCELLED, "cancelled")
            now = self._clock()

            refunded = 0
            for registration in self._store.list_registrations(
                wid, RegistrationStatus.active()
            ):
                if self._store.get_refund_for_registration(registration.id) is not None:
                    continue
                if registration.amount_paid.amount == 0:
                    self._store.update_registration(
                        registration.id,
                        {"status": RegistrationStatus.CANCELLED, "cancelled_at": now},
                    )
                    continue
                issue_refund(
                    self._store,
                    self._gateway,
                    registration,
                    CANCELLATION_REASON,
                    cancelled_by,
                    now,
                )
                refunded += 1

            cancelled = self._store.update_workshop(
                wid, {"status": WorkshopStatus.CANCELLED}
            )

        logger.info("Workshop %s cancelled, %d registrations refunded", wid, refunded)
        return cancelled

    def _ensure_transition(
        self, workshop: Workshop, target: WorkshopStatus, verb: str
    ) -> None:
        if not workshop.status.can_transition_to(target):
            raise InvalidWorkshopStateError(
                f"Workshop is {workshop.status.value} and cannot be {verb}"
            )

    def _check_dates(self, workshop: Workshop, values: Mapping[str, Any]) -> None:
        start = values.get("start_date", workshop.start_date)
        end = values.get("end_date", workshop.end_date)
        if end <= start:
            raise InvalidWorkshopDatesError("End date must be after start date")
        if (
            "start_date" in values
            and start != workshop.start_date
            and timezone.localdate(start) <= timezone.localdate(self._clock())
        ):
            raise InvalidWorkshopDatesError(
                "Workshop start date cannot be in the past or today"
            )

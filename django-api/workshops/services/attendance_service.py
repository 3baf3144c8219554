"""Attendance service - marking who showed up to a workshop."""

import logging
from collections.abc import Sequence
from uuid import UUID

from django.utils import timezone

from workshops.domain import (
    AttendanceUpdate,
    Registration,
    RegistrationStatus,
    WorkshopId,
)
from workshops.domain.errors import WorkshopNotStartedError
from workshops.services.common import Clock, load_workshop, parse_id
from workshops.stores.interfaces import WorkshopStore

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service for workshop attendance."""

    def __init__(self, store: WorkshopStore, clock: Clock = timezone.now) -> None:
        self._store = store
        self._clock = clock

    def get_attendance(self, workshop_id: str) -> list[Registration]:
        """Return confirmed registrations with their attendance fields."""
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        load_workshop(self._store, wid)
        return self._store.list_registrations(wid, [RegistrationStatus.CONFIRMED])

    def update_attendance(
        self,
        workshop_id: str,
        updates: Sequence[AttendanceUpdate],
        marked_by: UUID | None,
    ) -> list[Registration]:
        """Apply attendance updates once the workshop has started.

        Updates for registrations outside the workshop are skipped.

        Raises:
            WorkshopNotStartedError: If the workshop start is still ahead.
        """
        wid = parse_id(workshop_id, WorkshopId, "workshop id")
        logger.info("Updating attendance of %d registrations in %s", len(updates), wid)

        with self._store.atomic():
            workshop = load_workshop(self._store, wid)
            now = self._clock()
            if workshop.start_date > now:
                raise WorkshopNotStartedError()

            updated = []
            for update in updates:
                registration = self._store.get_registration(update.registration_id)
                if registration is None or registration.workshop_id != wid:
                    logger.warning(
                        "Skipping attendance for %s: not in workshop %s",
                        update.registration_id,
                        wid,
                    )
                    continue
                updated.append(
                    self._store.update_registration(
                        registration.id,
                        {
                            "attendance_status": update.attendance_status,
                            "attendance_notes": update.notes,
                            "attendance_marked_at": now,
                            "attendance_marked_by": marked_by,
                        },
                    )
                )
        return updated

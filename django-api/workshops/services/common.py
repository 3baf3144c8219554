"""Lookups shared by the workshop services."""

from collections.abc import Callable
from datetime import datetime
from typing import TypeVar
from uuid import UUID

from workshops.domain import MemberId, Registration, RegistrationId, Workshop, WorkshopId
from workshops.domain.errors import (
    InvalidIdError,
    RegistrationNotFoundError,
    WorkshopNotFoundError,
)
from workshops.stores.interfaces import WorkshopStore

Clock = Callable[[], datetime]

IdT = TypeVar("IdT", WorkshopId, RegistrationId, MemberId)


def parse_id(value: str | UUID, id_type: type[IdT], field: str) -> IdT:
    """Parse a raw identifier, raising InvalidIdError when malformed."""
    try:
        return id_type.from_string(str(value))
    except ValueError as exc:
        raise InvalidIdError(field) from exc


def load_workshop(
    store: WorkshopStore, workshop_id: WorkshopId, *, for_update: bool = False
) -> Workshop:
    workshop = store.get_workshop(workshop_id, for_update=for_update)
    if workshop is None:
        raise WorkshopNotFoundError(str(workshop_id))
    return workshop


def load_registration(
    store: WorkshopStore,
    workshop_id: WorkshopId,
    registration_id: RegistrationId,
    *,
    for_update: bool = False,
) -> Registration:
    """Return a registration that belongs to the given workshop."""
    registration = store.get_registration(registration_id, for_update=for_update)
    if registration is None or registration.workshop_id != workshop_id:
        raise RegistrationNotFoundError(str(registration_id))
    return registration

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import Depends

from backend.app.core.config import Settings, settings
from backend.app.core.errors import ValidationError
from backend.app.db.store import ReservationStore, get_store
from backend.app.models.reservation import Reservation, ReservationStatus
from backend.app.services import time_policy
from backend.app.services.codes import next_code, next_id
from backend.app.services.notifier import Notifier, get_notifier

logger = structlog.get_logger(__name__)

MIN_PEOPLE = 1
MAX_PEOPLE = 20
ACCEPTED_MESSAGE = "Reservation received. We will contact you to confirm."

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ValidatedReservation:
    name: str
    phone: str
    email: str
    people: int
    starts_at: datetime
    notes: str


@dataclass(frozen=True)
class ReservationAccepted:
    code: str
    message: str


def _coerce_people(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def validate_reservation(data: Mapping[str, Any], now: datetime, app_settings: Settings) -> ValidatedReservation:
    """Check a raw submission rule by rule and stop at the first failure.

    The order is fixed so that a given payload always yields the same message.
    """
    name = data.get("name")
    if not isinstance(name, str) or len(name.strip()) < 2:
        raise ValidationError("name", "Invalid name.")

    phone = data.get("phone")
    if not isinstance(phone, str) or len(phone.strip()) < 6:
        raise ValidationError("phone", "Invalid phone.")

    people = _coerce_people(data.get("people"))
    if people is None or not MIN_PEOPLE <= people <= MAX_PEOPLE:
        raise ValidationError("people", f"Invalid number of people ({MIN_PEOPLE}-{MAX_PEOPLE}).")

    date_value, time_value = data.get("date"), data.get("time")
    if not date_value or not time_value:
        raise ValidationError("date", "Date and time are required.")
    if not isinstance(date_value, str) or not isinstance(time_value, str):
        raise ValidationError("date", "Invalid date or time.")
    try:
        wall_clock = datetime.strptime(f"{date_value.strip()}T{time_value.strip()}", "%Y-%m-%dT%H:%M")
    except ValueError:
        raise ValidationError("date", "Invalid date or time.") from None
    starts_at = wall_clock.replace(tzinfo=app_settings.tz)

    verdict = time_policy.evaluate(
        starts_at,
        app_settings.open_days,
        app_settings.OPEN_TIME,
        app_settings.CLOSE_TIME,
        now=now,
        tz=app_settings.tz,
    )
    if verdict is time_policy.Admission.PAST:
        raise ValidationError("date", "Date/time must be in the future.")
    if verdict is time_policy.Admission.DAY_CLOSED:
        raise ValidationError("date", "We are closed on that day.")
    if verdict is time_policy.Admission.HOURS_CLOSED:
        raise ValidationError(
            "time", f"Time out of range ({app_settings.OPEN_TIME}-{app_settings.CLOSE_TIME})."
        )

    email = data.get("email")
    if email is None or email == "":
        email = ""
    elif not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("email", "Invalid email.")

    notes = data.get("notes")
    return ValidatedReservation(
        name=name.strip(),
        phone=phone.strip(),
        email=email.strip(),
        people=people,
        starts_at=starts_at.astimezone(timezone.utc),
        notes=str(notes).strip() if notes else "",
    )


class ReservationService:
    """Accept reservation requests: validate, persist, then notify in the background."""

    def __init__(
        self,
        store: ReservationStore,
        notifier: Notifier,
        app_settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.settings = app_settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def submit(self, data: Mapping[str, Any]) -> ReservationAccepted:
        """Raises ``ValidationError`` for bad input and ``StorageError`` if the record cannot be saved."""
        now = self._clock()
        try:
            valid = validate_reservation(data, now, self.settings)
        except ValidationError as exc:
            logger.info("Reservation rejected", field=exc.field, reason=exc.reason)
            raise

        record = Reservation(
            id=next_id(),
            code=next_code(),
            created_at=now,
            name=valid.name,
            phone=valid.phone,
            email=valid.email,
            people=valid.people,
            starts_at=valid.starts_at,
            notes=valid.notes,
            status=ReservationStatus.PENDING.value,
        )
        await self.store.append(record)
        logger.info("Reservation accepted", code=record.code, people=record.people, starts_at=record.starts_at.isoformat())

        self.notifier.dispatch(record)
        return ReservationAccepted(code=record.code, message=ACCEPTED_MESSAGE)


def get_reservation_service(
    store: ReservationStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
) -> ReservationService:
    return ReservationService(store, notifier, settings)

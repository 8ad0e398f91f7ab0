"""Reservation record as persisted in the reservations file."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SEATED = "seated"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class Reservation(BaseModel):
    """An accepted table reservation.

    Records are frozen once built. The JSON keys (``createdAt``, ``datetime``)
    are kept as aliases so the file layout stays stable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    code: str
    created_at: datetime = Field(alias="createdAt")
    name: str
    phone: str
    email: str = ""
    people: int = Field(ge=1, le=20)
    starts_at: datetime = Field(alias="datetime")
    notes: str = ""
    # Free text: staff set other states by hand
    status: str = ReservationStatus.PENDING.value

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

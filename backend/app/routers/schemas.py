from typing import Any

from pydantic import BaseModel, ConfigDict


class ReservationIn(BaseModel):
    # Fields stay untyped here; the service checks them in a fixed order
    # and reports the first failure.
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    phone: Any = None
    email: Any = None
    people: Any = None
    date: Any = None  # "YYYY-MM-DD"
    time: Any = None  # "HH:MM", local to TIMEZONE
    notes: Any = None


class ReservationOut(BaseModel):
    ok: bool = True
    message: str
    code: str


class ErrorOut(BaseModel):
    ok: bool = False
    error: str

from pydantic import field_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from app.services.slot_allocator import WEEKDAYS, AvailabilityWindow, DoctorAvailability


def _validate_days(days: list[str]) -> list[str]:
    out: list[str] = []
    for day in days:
        name = day.strip().capitalize()
        if name not in WEEKDAYS:
            raise ValueError(f"Unknown weekday {day!r}, expected one of: {', '.join(WEEKDAYS)}")
        if name not in out:
            out.append(name)
    return out


def _validate_windows(windows: list[str]) -> list[str]:
    # Stored canonicalised; order is kept because auto-assignment searches in it
    return [str(AvailabilityWindow.parse(w)) for w in windows]


class DoctorBase(SQLModel):
    name: str = Field(index=True)
    department: str | None = None
    email: str | None = Field(default=None, unique=True)
    phone: str | None = None


class Doctor(DoctorBase, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)
    available_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    available_time: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)

    def availability(self) -> DoctorAvailability:
        return DoctorAvailability.from_descriptor(self.available_days or [], self.available_time or [])


class DoctorCreate(DoctorBase):
    name: str = Field(min_length=1)
    available_days: list[str] = []
    available_time: list[str] = []
    user_id: int | None = None

    @field_validator("available_days")
    @classmethod
    def check_days(cls, v: list[str]) -> list[str]:
        return _validate_days(v)

    @field_validator("available_time")
    @classmethod
    def check_windows(cls, v: list[str]) -> list[str]:
        return _validate_windows(v)


class DoctorUpdate(SQLModel):
    name: str | None = None
    department: str | None = None
    email: str | None = None
    phone: str | None = None
    available_days: list[str] | None = None
    available_time: list[str] | None = None
    user_id: int | None = None

    @field_validator("available_days")
    @classmethod
    def check_days(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _validate_days(v)

    @field_validator("available_time")
    @classmethod
    def check_windows(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _validate_windows(v)


class DoctorPublic(DoctorBase):
    id: int
    available_days: list[str]
    available_time: list[str]
    user_id: int | None = None

from datetime import UTC, date, datetime
from typing import Literal

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

AppointmentStatus = Literal["Booked", "Completed", "Cancelled", "Scheduled"]


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # no double booking: one appointment per doctor, day and canonical start time
    __table_args__ = (
        UniqueConstraint("doctor_id", "appointment_date", "time", name="uq_appointments_doctor_date_time"),
    )
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    patient_name: str
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    appointment_date: date = Field(index=True)
    time: str  # canonical "H:MM AM|PM"
    status: str = "Booked"
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AppointmentPublic(SQLModel):
    id: int
    patient_id: int
    patient_name: str
    doctor_id: int
    date: str  # YYYY-MM-DD
    time: str
    status: str


class AppointmentStatusUpdate(SQLModel):
    status: AppointmentStatus

from datetime import UTC, datetime
from typing import Literal

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

PaymentStatus = Literal["pending", "paid", "failed"]


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class Billing(SQLModel, table=True):
    __tablename__ = "billings"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_billings_amount_non_negative"),)
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    patient_name: str
    appointment_id: int | None = Field(default=None, foreign_key="appointments.id")
    amount: float
    payment_status: str = "pending"
    details: str = ""
    created_at: datetime = Field(default_factory=_utc_naive_now)
    updated_at: datetime = Field(default_factory=_utc_naive_now)


class BillingCreate(SQLModel):
    patient_id: int
    appointment_id: int | None = None
    amount: float = Field(ge=0)
    payment_status: PaymentStatus = "pending"
    details: str = ""


class BillingPublic(SQLModel):
    id: int
    patient_id: int
    patient_name: str
    appointment_id: int | None = None
    appointment_date: str | None = None
    appointment_time: str | None = None
    amount: float
    payment_status: str
    details: str
    created_at: datetime

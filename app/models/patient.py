from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class PatientBase(SQLModel):
    name: str = Field(min_length=1, index=True)
    age: int = Field(ge=0, le=150)
    gender: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    place: str | None = None


class Patient(PatientBase, table=True):
    __tablename__ = "patients"
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)


class PatientCreate(PatientBase):
    pass


class PatientPublic(PatientBase):
    id: int

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment
from app.models.doctor import Doctor
from app.models.patient import Patient, PatientCreate
from app.services.doctor_service import get_doctor, get_taken_times
from app.services.patient_service import create_patient, get_patient
from app.services.slot_allocator import (
    FAILURE_MESSAGES,
    AllocationFailure,
    BookingRequest,
    MalformedTimeString,
    allocate,
    failure_message,
    format_time,
    parse_time,
)

logger = logging.getLogger(__name__)

# One refreshed allocation after a unique-constraint race on (doctor, date, time)
MAX_BOOKING_ATTEMPTS = 2


class BookingRejected(Exception):
    """A booking the caller must be told about; `failure` is set for allocator decisions."""

    def __init__(self, message: str, failure: AllocationFailure | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.failure = failure


@dataclass
class BookingCommand:
    doctor_id: int
    date: date
    time: str | None = None
    patient_id: int | None = None
    patient: PatientCreate | None = None


def utc_today() -> date:
    return datetime.now(UTC).date()


async def _resolve_patient(session: AsyncSession, command: BookingCommand) -> Patient:
    if command.patient_id is not None:
        patient = await get_patient(session, command.patient_id)
        if not patient:
            raise BookingRejected("Patient not found")
        return patient
    if command.patient is not None:
        return await create_patient(session, command.patient)
    raise BookingRejected("Patient details are required")


async def _insert_appointment(session: AsyncSession, appointment: Appointment) -> Appointment:
    """Insert inside a savepoint so a unique violation only undoes this row."""
    async with session.begin_nested():
        session.add(appointment)
    await session.refresh(appointment)
    return appointment


async def book_appointment(
    session: AsyncSession, command: BookingCommand, today: date | None = None
) -> tuple[Appointment, Doctor]:
    """Resolve patient and doctor, allocate a slot, and persist the appointment.

    Raises BookingRejected for every business-rule rejection. If the insert hits
    the (doctor, date, time) unique constraint, the taken set is re-read and
    allocation runs once more.
    """
    today = today or utc_today()
    if command.date < today:
        raise BookingRejected(
            FAILURE_MESSAGES[AllocationFailure.PAST_DATE_REJECTED],
            AllocationFailure.PAST_DATE_REJECTED,
        )
    try:
        requested_time = parse_time(command.time) if command.time else None
    except MalformedTimeString as e:
        raise BookingRejected(str(e)) from e

    patient = await _resolve_patient(session, command)
    doctor = await get_doctor(session, command.doctor_id)
    if not doctor:
        raise BookingRejected("Doctor not found")
    availability = doctor.availability()

    for attempt in range(1, MAX_BOOKING_ATTEMPTS + 1):
        taken = await get_taken_times(session, doctor.id, command.date)
        request = BookingRequest(
            date=command.date,
            availability=availability,
            taken=taken,
            requested_time=requested_time,
        )
        result = allocate(request, today)
        if not result.ok:
            logger.info(
                "Booking rejected doctor_id=%s date=%s time=%s: %s",
                doctor.id, command.date, command.time, result.failure.value,
            )
            raise BookingRejected(failure_message(result.failure, request), result.failure)

        slot_time = format_time(result.time)
        appointment = Appointment(
            patient_id=patient.id,
            patient_name=patient.name,
            doctor_id=doctor.id,
            appointment_date=command.date,
            time=slot_time,
        )
        try:
            appointment = await _insert_appointment(session, appointment)
        except IntegrityError:
            logger.warning(
                "Slot %s on %s for doctor_id=%s taken concurrently (attempt %d/%d)",
                slot_time, command.date, doctor.id, attempt, MAX_BOOKING_ATTEMPTS,
            )
            continue
        logger.info(
            "Appointment booked id=%s doctor_id=%s date=%s time=%s",
            appointment.id, doctor.id, command.date, appointment.time,
        )
        return appointment, doctor

    raise BookingRejected(
        FAILURE_MESSAGES[AllocationFailure.SLOT_ALREADY_BOOKED],
        AllocationFailure.SLOT_ALREADY_BOOKED,
    )


def _time_key(time_str: str) -> int:
    try:
        return parse_time(time_str)
    except MalformedTimeString:
        return -1


async def list_appointments_grouped(session: AsyncSession) -> list[dict[str, Any]]:
    """Appointments grouped by (doctor, date), groups by date, slots by time."""
    result = await session.execute(
        select(Appointment, Doctor, Patient)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .join(Patient, Appointment.patient_id == Patient.id)
    )
    groups: dict[tuple[int, date], dict[str, Any]] = {}
    for appointment, doctor, patient in result.all():
        key = (doctor.id, appointment.appointment_date)
        group = groups.setdefault(
            key,
            {
                "doctor_id": doctor.id,
                "doctor_name": doctor.name,
                "total_appointments": 0,
                "date": appointment.appointment_date.isoformat(),
                "slots": [],
            },
        )
        group["total_appointments"] += 1
        group["slots"].append(
            {
                "appointment_id": appointment.id,
                "time": appointment.time,
                "status": appointment.status,
                "patient": {
                    "id": patient.id,
                    "name": patient.name,
                    "age": patient.age,
                    "gender": patient.gender,
                    "phone": patient.phone,
                },
            }
        )
    ordered = sorted(groups.values(), key=lambda g: (g["date"], g["doctor_name"], g["doctor_id"]))
    for group in ordered:
        group["slots"].sort(key=lambda s: _time_key(s["time"]))
    return ordered


async def list_appointments_by_doctor(session: AsyncSession) -> list[dict[str, Any]]:
    result = await session.execute(
        select(Appointment, Doctor)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .order_by(Doctor.id, Appointment.appointment_date, Appointment.id)
    )
    by_doctor: dict[int, dict[str, Any]] = {}
    for appointment, doctor in result.all():
        entry = by_doctor.setdefault(
            doctor.id, {"doctor_id": doctor.id, "doctor_name": doctor.name, "appointments": []}
        )
        entry["appointments"].append(
            {
                "id": appointment.id,
                "patient_id": appointment.patient_id,
                "date": appointment.appointment_date.isoformat(),
                "time": appointment.time,
            }
        )
    return list(by_doctor.values())


async def list_appointments_for_doctor(session: AsyncSession, doctor_id: int) -> list[Appointment]:
    result = await session.execute(
        select(Appointment).where(Appointment.doctor_id == doctor_id)
    )
    appointments = list(result.scalars().all())
    appointments.sort(key=lambda a: (a.appointment_date, _time_key(a.time)))
    return appointments


async def update_appointment_status(
    session: AsyncSession, appointment_id: int, status: str
) -> Appointment | None:
    appointment = await session.get(Appointment, appointment_id)
    if not appointment:
        return None
    appointment.status = status
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    return appointment


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    return await session.get(Appointment, appointment_id)


async def get_appointments_on_date(
    session: AsyncSession, d: date, limit: int
) -> tuple[int, list[tuple[Appointment, Patient, Doctor]]]:
    """Count of appointments on `d` and the most recently booked `limit` of them."""
    count_result = await session.execute(
        select(func.count()).select_from(Appointment).where(Appointment.appointment_date == d)
    )
    rows = await session.execute(
        select(Appointment, Patient, Doctor)
        .join(Patient, Appointment.patient_id == Patient.id)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .where(Appointment.appointment_date == d)
        .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        .limit(limit)
    )
    return count_result.scalar_one(), [tuple(r) for r in rows.all()]

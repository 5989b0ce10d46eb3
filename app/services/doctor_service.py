from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment
from app.models.doctor import Doctor, DoctorCreate, DoctorUpdate
from app.services.slot_allocator import day_of_week, list_slots, parse_time

_REQUIRED_FIELDS = ("name", "available_days", "available_time")


async def create_doctor(session: AsyncSession, data: DoctorCreate) -> Doctor:
    doctor = Doctor.model_validate(data)
    session.add(doctor)
    await session.flush()
    await session.refresh(doctor)
    return doctor


async def get_doctor(session: AsyncSession, doctor_id: int) -> Doctor | None:
    return await session.get(Doctor, doctor_id)


async def list_doctors(session: AsyncSession) -> list[Doctor]:
    result = await session.execute(select(Doctor).order_by(Doctor.id))
    return list(result.scalars().all())


async def update_doctor(session: AsyncSession, doctor: Doctor, data: DoctorUpdate) -> Doctor:
    for key, value in data.model_dump(exclude_unset=True).items():
        if key in _REQUIRED_FIELDS and value is None:
            continue
        setattr(doctor, key, value)
    session.add(doctor)
    await session.flush()
    await session.refresh(doctor)
    return doctor


async def count_doctors(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Doctor))
    return result.scalar_one()


async def get_taken_times(session: AsyncSession, doctor_id: int, d: date) -> frozenset[int]:
    """Start minutes already booked for the doctor on that day."""
    result = await session.execute(
        select(Appointment.time).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == d,
        )
    )
    return frozenset(parse_time(row[0]) for row in result.all())


async def get_slots_for_date(
    session: AsyncSession, doctor: Doctor, d: date
) -> tuple[bool, list[tuple[int, bool]]]:
    """Returns (doctor works that weekday, [(slot_start, available)])."""
    availability = doctor.availability()
    if day_of_week(d) not in availability.weekdays:
        return False, []
    taken = await get_taken_times(session, doctor.id, d)
    return True, list_slots(availability.windows, taken)

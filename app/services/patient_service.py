from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.patient import Patient, PatientCreate


async def create_patient(session: AsyncSession, data: PatientCreate) -> Patient:
    patient = Patient.model_validate(data)
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    return patient


async def get_patient(session: AsyncSession, patient_id: int) -> Patient | None:
    return await session.get(Patient, patient_id)


async def list_patients(session: AsyncSession) -> list[Patient]:
    result = await session.execute(select(Patient).order_by(Patient.id))
    return list(result.scalars().all())


async def count_patients(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Patient))
    return result.scalar_one()

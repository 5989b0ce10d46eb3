from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_session
from app.models.patient import PatientCreate, PatientPublic
from app.models.user import User
from app.services.patient_service import create_patient, get_patient, list_patients

router = APIRouter(prefix="/patients", tags=["patients"])


@router.post("", response_model=PatientPublic, status_code=status.HTTP_201_CREATED)
async def register_patient(
    body: PatientCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> PatientPublic:
    patient = await create_patient(session, body)
    return PatientPublic.model_validate(patient)


@router.get("", response_model=list[PatientPublic])
async def get_patients(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[PatientPublic]:
    return [PatientPublic.model_validate(p) for p in await list_patients(session)]


@router.get("/{patient_id}", response_model=PatientPublic)
async def get_patient_by_id(
    patient_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> PatientPublic:
    patient = await get_patient(session, patient_id)
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return PatientPublic.model_validate(patient)

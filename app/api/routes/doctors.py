from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_roles
from app.api.schemas.appointment import DoctorSlotsResponse, SlotInfo
from app.core.db import get_session
from app.models.doctor import Doctor, DoctorCreate, DoctorPublic, DoctorUpdate
from app.models.user import User
from app.services.doctor_service import (
    create_doctor,
    get_doctor,
    get_slots_for_date,
    list_doctors,
    update_doctor,
)
from app.services.slot_allocator import day_of_week, format_time

router = APIRouter(prefix="/doctors", tags=["doctors"])


async def _get_doctor_or_404(session: AsyncSession, doctor_id: int) -> Doctor:
    doctor = await get_doctor(session, doctor_id)
    if not doctor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return doctor


@router.post("", response_model=DoctorPublic, status_code=status.HTTP_201_CREATED)
async def register_doctor(
    body: DoctorCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> DoctorPublic:
    try:
        doctor = await create_doctor(session, body)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A doctor with this email already exists",
        )
    return DoctorPublic.model_validate(doctor)


@router.get("", response_model=list[DoctorPublic])
async def get_doctors(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[DoctorPublic]:
    return [DoctorPublic.model_validate(d) for d in await list_doctors(session)]


@router.get("/{doctor_id}", response_model=DoctorPublic)
async def get_doctor_by_id(
    doctor_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> DoctorPublic:
    return DoctorPublic.model_validate(await _get_doctor_or_404(session, doctor_id))


@router.put("/{doctor_id}", response_model=DoctorPublic)
async def edit_doctor(
    doctor_id: int,
    body: DoctorUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> DoctorPublic:
    doctor = await _get_doctor_or_404(session, doctor_id)
    try:
        doctor = await update_doctor(session, doctor, body)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A doctor with this email already exists",
        )
    return DoctorPublic.model_validate(doctor)


@router.get("/{doctor_id}/slots", response_model=DoctorSlotsResponse)
async def available_slots(
    doctor_id: int,
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> DoctorSlotsResponse:
    """Every 10-minute slot of the doctor's windows on that date, with availability."""
    doctor = await _get_doctor_or_404(session, doctor_id)
    works_that_day, slots = await get_slots_for_date(session, doctor, date_param)
    return DoctorSlotsResponse(
        date=date_param.isoformat(),
        day=day_of_week(date_param),
        available_day=works_that_day,
        slots=[SlotInfo(time=format_time(start), available=free) for start, free in slots],
    )

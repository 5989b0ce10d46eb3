import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_roles
from app.api.schemas.appointment import (
    AppointmentsResponse,
    BookAppointmentRequest,
    BookAppointmentResponse,
    DoctorAppointments,
)
from app.core.db import get_session
from app.models.appointment import Appointment, AppointmentPublic, AppointmentStatusUpdate
from app.models.user import STAFF_ROLES, User
from app.services.appointment_service import (
    BookingCommand,
    BookingRejected,
    book_appointment,
    list_appointments_by_doctor,
    list_appointments_for_doctor,
    list_appointments_grouped,
    update_appointment_status,
)
from app.services.doctor_service import get_doctor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic(
        id=a.id,
        patient_id=a.patient_id,
        patient_name=a.patient_name,
        doctor_id=a.doctor_id,
        date=a.appointment_date.isoformat(),
        time=a.time,
        status=a.status,
    )


@router.post("/book", response_model=BookAppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book(
    body: BookAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> BookAppointmentResponse:
    """Book at the requested time, or at the doctor's next free slot when `time` is omitted."""
    command = BookingCommand(
        doctor_id=body.doctor_id,
        date=body.date,
        time=body.time,
        patient_id=body.patient_id,
        patient=body.patient,
    )
    try:
        appointment, doctor = await book_appointment(session, command)
    except BookingRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    return BookAppointmentResponse(
        message="Appointment booked successfully",
        appointment=_to_public(appointment),
        doctor_name=doctor.name,
    )


@router.get("", response_model=AppointmentsResponse)
async def list_appointments(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(*STAFF_ROLES)),
) -> AppointmentsResponse:
    """Appointments grouped per doctor and day, with patient details for each slot."""
    groups = await list_appointments_grouped(session)
    return AppointmentsResponse.model_validate({"appointments": groups})


@router.get("/by-doctor", response_model=list[DoctorAppointments])
async def appointments_by_doctor(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[DoctorAppointments]:
    rows = await list_appointments_by_doctor(session)
    return [DoctorAppointments.model_validate(r) for r in rows]


@router.get("/doctor/{doctor_id}", response_model=list[AppointmentPublic])
async def appointments_for_doctor(
    doctor_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[AppointmentPublic]:
    if not await get_doctor(session, doctor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return [_to_public(a) for a in await list_appointments_for_doctor(session, doctor_id)]


@router.put("/update-status/{appointment_id}", response_model=AppointmentPublic)
async def update_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await update_appointment_status(session, appointment_id, body.status)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found",
        )
    logger.info("Appointment %s status -> %s by %s", appointment_id, body.status, current_user.email)
    return _to_public(appointment)

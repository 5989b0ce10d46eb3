from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.api.schemas.dashboard import CountResponse, RecentAppointment, TodayAppointmentsResponse
from app.core.config import settings
from app.core.db import get_session
from app.models.user import User
from app.services.appointment_service import get_appointments_on_date, utc_today
from app.services.doctor_service import count_doctors
from app.services.patient_service import count_patients

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/patients/count", response_model=CountResponse)
async def patient_count(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> CountResponse:
    return CountResponse(count=await count_patients(session))


@router.get("/doctors/count", response_model=CountResponse)
async def doctor_count(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> CountResponse:
    return CountResponse(count=await count_doctors(session))


@router.get("/appointments/today", response_model=TodayAppointmentsResponse)
async def today_appointments(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles("admin")),
) -> TodayAppointmentsResponse:
    """Today's (UTC) appointment count and the most recently booked ones."""
    count, rows = await get_appointments_on_date(
        session, utc_today(), settings.recent_appointments_limit
    )
    recent = [
        RecentAppointment(
            patient_name=patient.name or "Unknown",
            doctor_name=doctor.name or "Unknown",
            department=doctor.department or "Unknown",
            date=appointment.appointment_date.isoformat(),
            time=appointment.time,
        )
        for appointment, patient, doctor in rows
    ]
    return TodayAppointmentsResponse(count=count, recent=recent)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.core.db import get_session
from app.models.billing import BillingCreate, BillingPublic
from app.models.user import User
from app.services.appointment_service import get_appointment
from app.services.billing_service import create_billing, get_billing, list_billings
from app.services.patient_service import get_patient

router = APIRouter(prefix="/billing", tags=["billing"])

billing_staff = require_roles("admin", "reception")


@router.post("/create", response_model=BillingPublic, status_code=status.HTTP_201_CREATED)
async def create(
    body: BillingCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(billing_staff),
) -> BillingPublic:
    patient = await get_patient(session, body.patient_id)
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    appointment = None
    if body.appointment_id is not None:
        appointment = await get_appointment(session, body.appointment_id)
        if not appointment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return await create_billing(session, patient, body, appointment)


@router.get("", response_model=list[BillingPublic])
async def get_billings(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(billing_staff),
) -> list[BillingPublic]:
    return await list_billings(session)


@router.get("/patient/{patient_id}", response_model=list[BillingPublic])
async def get_billings_for_patient(
    patient_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(billing_staff),
) -> list[BillingPublic]:
    return await list_billings(session, patient_id=patient_id)


@router.get("/{billing_id}", response_model=BillingPublic)
async def get_billing_by_id(
    billing_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(billing_staff),
) -> BillingPublic:
    billing = await get_billing(session, billing_id)
    if not billing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Billing record not found")
    return billing

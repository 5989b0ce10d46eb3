from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment
from app.models.billing import Billing, BillingCreate, BillingPublic
from app.models.patient import Patient


def _to_public(billing: Billing, patient: Patient | None, appointment: Appointment | None) -> BillingPublic:
    return BillingPublic(
        id=billing.id,
        patient_id=billing.patient_id,
        patient_name=patient.name if patient else billing.patient_name,
        appointment_id=billing.appointment_id,
        appointment_date=appointment.appointment_date.isoformat() if appointment else None,
        appointment_time=appointment.time if appointment else None,
        amount=billing.amount,
        payment_status=billing.payment_status,
        details=billing.details,
        created_at=billing.created_at,
    )


def _billing_query():
    return (
        select(Billing, Patient, Appointment)
        .outerjoin(Patient, Billing.patient_id == Patient.id)
        .outerjoin(Appointment, Billing.appointment_id == Appointment.id)
        .order_by(Billing.created_at.desc(), Billing.id.desc())
    )


async def create_billing(
    session: AsyncSession, patient: Patient, data: BillingCreate, appointment: Appointment | None = None
) -> BillingPublic:
    billing = Billing(
        patient_id=patient.id,
        patient_name=patient.name,
        appointment_id=appointment.id if appointment else None,
        amount=data.amount,
        payment_status=data.payment_status,
        details=data.details,
    )
    session.add(billing)
    await session.flush()
    await session.refresh(billing)
    return _to_public(billing, patient, appointment)


async def list_billings(session: AsyncSession, patient_id: int | None = None) -> list[BillingPublic]:
    q = _billing_query()
    if patient_id is not None:
        q = q.where(Billing.patient_id == patient_id)
    result = await session.execute(q)
    return [_to_public(b, p, a) for b, p, a in result.all()]


async def get_billing(session: AsyncSession, billing_id: int) -> BillingPublic | None:
    result = await session.execute(_billing_query().where(Billing.id == billing_id))
    row = result.first()
    if not row:
        return None
    billing, patient, appointment = row
    return _to_public(billing, patient, appointment)

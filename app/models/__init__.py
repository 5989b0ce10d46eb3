from app.models.user import User, UserCreate, UserPublic
from app.models.patient import Patient, PatientCreate, PatientPublic
from app.models.doctor import Doctor, DoctorCreate, DoctorPublic, DoctorUpdate
from app.models.appointment import Appointment, AppointmentPublic, AppointmentStatusUpdate
from app.models.billing import Billing, BillingCreate, BillingPublic

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "Patient",
    "PatientCreate",
    "PatientPublic",
    "Doctor",
    "DoctorCreate",
    "DoctorPublic",
    "DoctorUpdate",
    "Appointment",
    "AppointmentPublic",
    "AppointmentStatusUpdate",
    "Billing",
    "BillingCreate",
    "BillingPublic",
]

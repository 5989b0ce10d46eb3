from datetime import date

from pydantic import BaseModel, model_validator

from app.models.appointment import AppointmentPublic
from app.models.patient import PatientCreate


class SlotInfo(BaseModel):
    time: str  # "H:MM AM|PM"
    available: bool


class DoctorSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    day: str
    available_day: bool
    slots: list[SlotInfo]


class BookAppointmentRequest(BaseModel):
    doctor_id: int
    date: date
    time: str | None = None  # omit to auto-assign the next free slot
    patient_id: int | None = None
    patient: PatientCreate | None = None

    @model_validator(mode="after")
    def check_patient(self) -> "BookAppointmentRequest":
        if self.patient_id is None and self.patient is None:
            raise ValueError("Patient details are required (patient_id or patient)")
        return self


class BookAppointmentResponse(BaseModel):
    message: str
    appointment: AppointmentPublic
    doctor_name: str


class PatientSummary(BaseModel):
    id: int
    name: str
    age: int
    gender: str
    phone: str


class ScheduledSlot(BaseModel):
    appointment_id: int
    time: str
    status: str
    patient: PatientSummary


class DoctorDaySchedule(BaseModel):
    doctor_id: int
    doctor_name: str
    total_appointments: int
    date: str
    slots: list[ScheduledSlot]


class AppointmentsResponse(BaseModel):
    appointments: list[DoctorDaySchedule]


class DoctorAppointment(BaseModel):
    id: int
    patient_id: int
    date: str
    time: str


class DoctorAppointments(BaseModel):
    doctor_id: int
    doctor_name: str
    appointments: list[DoctorAppointment]

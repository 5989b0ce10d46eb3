from pydantic import BaseModel


class CountResponse(BaseModel):
    count: int


class RecentAppointment(BaseModel):
    patient_name: str
    doctor_name: str
    department: str
    date: str
    time: str


class TodayAppointmentsResponse(BaseModel):
    count: int
    recent: list[RecentAppointment]

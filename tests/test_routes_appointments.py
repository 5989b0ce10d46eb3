"""Tests for /api/v1/appointments routes."""
from datetime import timedelta

import pytest

BOOK_URL = "/api/v1/appointments/book"


class TestBookAppointment:
    @pytest.mark.asyncio
    async def test_requires_auth(self, client, future_date):
        response = await client.post(BOOK_URL, json={"doctor_id": 1, "date": future_date().isoformat(), "patient_id": 1})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_auto_assign_with_new_patient(
        self, client, reception_headers, make_doctor, future_date, new_patient_payload
    ):
        doctor = await make_doctor()
        d = future_date()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": d.isoformat(), "patient": new_patient_payload},
            headers=reception_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Appointment booked successfully"
        assert data["doctor_name"] == doctor.name
        assert data["appointment"]["time"] == "9:00 AM"
        assert data["appointment"]["date"] == d.isoformat()
        assert data["appointment"]["patient_name"] == new_patient_payload["name"]

    @pytest.mark.asyncio
    async def test_sequential_bookings_fill_then_reject(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor(windows=["9:00 AM - 9:30 AM"])
        patient = await make_patient()
        payload = {"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id}

        times = []
        for _ in range(3):
            response = await client.post(BOOK_URL, json=payload, headers=reception_headers)
            assert response.status_code == 201
            times.append(response.json()["appointment"]["time"])
        assert times == ["9:00 AM", "9:10 AM", "9:20 AM"]

        response = await client.post(BOOK_URL, json=payload, headers=reception_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Appointments full for selected day"

    @pytest.mark.asyncio
    async def test_explicit_time_conflict(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        payload = {"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id}

        first = await client.post(BOOK_URL, json={**payload, "time": "9:10 AM"}, headers=reception_headers)
        assert first.status_code == 201
        second = await client.post(BOOK_URL, json={**payload, "time": "09:10 AM"}, headers=reception_headers)
        assert second.status_code == 400
        assert second.json()["detail"] == "Selected time is already booked"

    @pytest.mark.asyncio
    async def test_explicit_time_outside_windows(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id, "time": "4:00 PM"},
            headers=reception_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Selected time is not within doctor's available slots"

    @pytest.mark.asyncio
    async def test_malformed_time(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id, "time": "9am"},
            headers=reception_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_past_date(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        yesterday = future_date() - timedelta(days=8)
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": yesterday.isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot book an appointment for a past date"

    @pytest.mark.asyncio
    async def test_doctor_not_available_that_day(
        self, client, reception_headers, make_doctor, make_patient, future_date
    ):
        doctor = await make_doctor(days=["Monday"])
        patient = await make_patient()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date("Tuesday").isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Doctor not available on Tuesday. Available days: Monday"

    @pytest.mark.asyncio
    async def test_doctor_without_windows(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor(windows=[])
        patient = await make_patient()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Doctor's available time is not set"

    @pytest.mark.asyncio
    async def test_rejection_does_not_keep_new_patient(
        self, client, reception_headers, make_doctor, future_date, new_patient_payload
    ):
        doctor = await make_doctor(windows=[])
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient": new_patient_payload},
            headers=reception_headers,
        )
        assert response.status_code == 400
        patients = await client.get("/api/v1/patients", headers=reception_headers)
        assert patients.json() == []

    @pytest.mark.asyncio
    async def test_patient_details_required(self, client, reception_headers, make_doctor, future_date):
        doctor = await make_doctor()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat()},
            headers=reception_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_incomplete_patient_details(self, client, reception_headers, make_doctor, future_date):
        doctor = await make_doctor()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient": {"name": "No Phone"}},
            headers=reception_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_doctor(self, client, reception_headers, make_patient, future_date):
        patient = await make_patient()
        response = await client.post(
            BOOK_URL,
            json={"doctor_id": 404, "date": future_date().isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Doctor not found"


class TestListAppointments:
    @pytest.mark.asyncio
    async def test_grouped_by_doctor_and_date_with_sorted_slots(
        self, client, admin_headers, make_doctor, make_patient, future_date
    ):
        doctor = await make_doctor(windows=["9:00 AM - 12:00 PM"])
        patient = await make_patient()
        d = future_date()
        for t in ("11:00 AM", "9:30 AM", "10:00 AM"):
            response = await client.post(
                BOOK_URL,
                json={"doctor_id": doctor.id, "date": d.isoformat(), "patient_id": patient.id, "time": t},
                headers=admin_headers,
            )
            assert response.status_code == 201

        response = await client.get("/api/v1/appointments", headers=admin_headers)
        assert response.status_code == 200
        groups = response.json()["appointments"]
        assert len(groups) == 1
        group = groups[0]
        assert group["doctor_name"] == doctor.name
        assert group["total_appointments"] == 3
        assert group["date"] == d.isoformat()
        assert [s["time"] for s in group["slots"]] == ["9:30 AM", "10:00 AM", "11:00 AM"]
        assert group["slots"][0]["patient"]["name"] == patient.name

    @pytest.mark.asyncio
    async def test_by_doctor(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        response = await client.get("/api/v1/appointments/by-doctor", headers=reception_headers)
        assert response.status_code == 200
        data = response.json()
        assert data[0]["doctor_id"] == doctor.id
        assert data[0]["appointments"][0]["patient_id"] == patient.id

    @pytest.mark.asyncio
    async def test_for_doctor_sorted_by_date_then_time(
        self, client, reception_headers, make_doctor, make_patient, future_date
    ):
        doctor = await make_doctor(windows=["9:00 AM - 5:00 PM"])
        patient = await make_patient()
        d1 = future_date()
        d2 = d1 + timedelta(days=1)
        for d, t in ((d2, "9:00 AM"), (d1, "1:00 PM"), (d1, "10:00 AM")):
            await client.post(
                BOOK_URL,
                json={"doctor_id": doctor.id, "date": d.isoformat(), "patient_id": patient.id, "time": t},
                headers=reception_headers,
            )
        response = await client.get(f"/api/v1/appointments/doctor/{doctor.id}", headers=reception_headers)
        assert response.status_code == 200
        assert [(a["date"], a["time"]) for a in response.json()] == [
            (d1.isoformat(), "10:00 AM"),
            (d1.isoformat(), "1:00 PM"),
            (d2.isoformat(), "9:00 AM"),
        ]

    @pytest.mark.asyncio
    async def test_for_unknown_doctor(self, client, reception_headers):
        response = await client.get("/api/v1/appointments/doctor/999", headers=reception_headers)
        assert response.status_code == 404


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_update_status(self, client, reception_headers, make_doctor, make_patient, future_date):
        doctor = await make_doctor()
        patient = await make_patient()
        booked = await client.post(
            BOOK_URL,
            json={"doctor_id": doctor.id, "date": future_date().isoformat(), "patient_id": patient.id},
            headers=reception_headers,
        )
        appointment_id = booked.json()["appointment"]["id"]

        response = await client.put(
            f"/api/v1/appointments/update-status/{appointment_id}",
            json={"status": "Completed"},
            headers=reception_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Completed"

    @pytest.mark.asyncio
    async def test_invalid_status(self, client, reception_headers):
        response = await client.put(
            "/api/v1/appointments/update-status/1", json={"status": "Lost"}, headers=reception_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_appointment(self, client, reception_headers):
        response = await client.put(
            "/api/v1/appointments/update-status/999", json={"status": "Cancelled"}, headers=reception_headers
        )
        assert response.status_code == 404

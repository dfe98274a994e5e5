"""Appointment booking and consultation tests."""

from datetime import date, timedelta

from httpx import AsyncClient

from app.models.user import User, UserRole

APPOINTMENTS_URL = "/api/v1/appointments"


def booking(doctor_id: str, **overrides) -> dict:
    body = {
        "doctor_id": doctor_id,
        "appointment_date": (date.today() + timedelta(days=3)).isoformat(),
        "appointment_time": "09:30",
        "reason": "Persistent cough",
        "symptoms": ["cough"],
    }
    body.update(overrides)
    return body


async def book(client: AsyncClient, headers: dict, doctor_id: str, **overrides) -> dict:
    response = await client.post(
        APPOINTMENTS_URL, json=booking(doctor_id, **overrides), headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestBooking:
    """Tests for POST /appointments."""

    async def test_patient_books_pending_appointment(
        self,
        client: AsyncClient,
        patient_user: User,
        patient_headers: dict,
        doctor_user: User,
    ) -> None:
        data = await book(client, patient_headers, doctor_user.id)

        assert data["status"] == "pending"
        assert data["patient_id"] == patient_user.id
        assert data["doctor_id"] == doctor_user.id
        assert data["appointment_type"] == "consultation"
        assert data["duration_minutes"] == 30

    async def test_unknown_doctor(self, client: AsyncClient, patient_headers: dict) -> None:
        response = await client.post(
            APPOINTMENTS_URL,
            json=booking("00000000-0000-0000-0000-000000000000"),
            headers=patient_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Doctor not found or unavailable"

    async def test_inactive_doctor(
        self, client: AsyncClient, patient_headers: dict, user_factory
    ) -> None:
        doctor = await user_factory("away@carebridge.local", UserRole.DOCTOR, is_active=False)

        response = await client.post(
            APPOINTMENTS_URL, json=booking(doctor.id), headers=patient_headers
        )

        assert response.status_code == 404

    async def test_patient_id_is_not_a_doctor(
        self, client: AsyncClient, patient_headers: dict, other_patient: User
    ) -> None:
        response = await client.post(
            APPOINTMENTS_URL, json=booking(other_patient.id), headers=patient_headers
        )

        assert response.status_code == 404

    async def test_bad_time_format(
        self, client: AsyncClient, patient_headers: dict, doctor_user: User
    ) -> None:
        response = await client.post(
            APPOINTMENTS_URL,
            json=booking(doctor_user.id, appointment_time="9.30am"),
            headers=patient_headers,
        )

        assert response.status_code == 422

    async def test_doctor_cannot_book(
        self, client: AsyncClient, doctor_headers: dict, doctor_user: User
    ) -> None:
        response = await client.post(
            APPOINTMENTS_URL, json=booking(doctor_user.id), headers=doctor_headers
        )

        assert response.status_code == 403


class TestListing:
    """Tests for appointment and doctor listings."""

    async def test_mine_is_scoped_by_role(
        self,
        client: AsyncClient,
        patient_headers: dict,
        other_patient_headers: dict,
        doctor_headers: dict,
        admin_headers: dict,
        doctor_user: User,
    ) -> None:
        await book(client, patient_headers, doctor_user.id)
        await book(client, other_patient_headers, doctor_user.id, appointment_time="10:00")

        patient_view = await client.get(f"{APPOINTMENTS_URL}/mine", headers=patient_headers)
        doctor_view = await client.get(f"{APPOINTMENTS_URL}/mine", headers=doctor_headers)
        admin_view = await client.get(f"{APPOINTMENTS_URL}/mine", headers=admin_headers)

        assert len(patient_view.json()) == 1
        assert len(doctor_view.json()) == 2
        assert len(admin_view.json()) == 2

    async def test_doctors_lists_only_verified(
        self,
        client: AsyncClient,
        patient_headers: dict,
        doctor_user: User,
        user_factory,
    ) -> None:
        await user_factory("unverified@carebridge.local", UserRole.DOCTOR, is_verified=False)

        response = await client.get(f"{APPOINTMENTS_URL}/doctors", headers=patient_headers)

        assert response.status_code == 200
        doctors = response.json()
        assert [d["id"] for d in doctors] == [doctor_user.id]
        assert doctors[0]["specialization"] == "General Practice"
        assert "email" not in doctors[0]


class TestStatusAndPrescription:
    """Tests for status changes and prescriptions."""

    async def test_patient_cancels(
        self,
        client: AsyncClient,
        patient_user: User,
        patient_headers: dict,
        doctor_user: User,
    ) -> None:
        appointment = await book(client, patient_headers, doctor_user.id)

        response = await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/status",
            json={"status": "cancelled", "cancellation_reason": "Feeling better"},
            headers=patient_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["cancelled_by"] == patient_user.id
        assert data["cancellation_reason"] == "Feeling better"
        assert data["cancelled_at"] is not None

    async def test_outsider_cannot_change_status(
        self,
        client: AsyncClient,
        patient_headers: dict,
        other_patient_headers: dict,
        doctor_user: User,
    ) -> None:
        appointment = await book(client, patient_headers, doctor_user.id)

        response = await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/status",
            json={"status": "confirmed"},
            headers=other_patient_headers,
        )

        assert response.status_code == 403

    async def test_doctor_prescribes_and_completes(
        self,
        client: AsyncClient,
        patient_headers: dict,
        doctor_headers: dict,
        doctor_user: User,
    ) -> None:
        appointment = await book(client, patient_headers, doctor_user.id)

        response = await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/prescription",
            json={
                "medications": [{"name": "Paracetamol", "dosage": "500mg", "frequency": "4x daily"}],
                "advice": "Rest",
                "follow_up_date": (date.today() + timedelta(days=14)).isoformat(),
            },
            headers=doctor_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["prescription"]["medications"][0]["name"] == "Paracetamol"
        assert data["prescription"]["advice"] == "Rest"

    async def test_other_doctor_cannot_prescribe(
        self,
        client: AsyncClient,
        patient_headers: dict,
        doctor_user: User,
        user_factory,
        auth_for,
    ) -> None:
        appointment = await book(client, patient_headers, doctor_user.id)
        other_doctor = await user_factory(
            "other.doctor@carebridge.local", UserRole.DOCTOR, is_verified=True
        )

        response = await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/prescription",
            json={"medications": [], "advice": "Rest"},
            headers=auth_for(other_doctor),
        )

        assert response.status_code == 403

    async def test_cannot_prescribe_cancelled(
        self,
        client: AsyncClient,
        patient_headers: dict,
        doctor_headers: dict,
        doctor_user: User,
    ) -> None:
        appointment = await book(client, patient_headers, doctor_user.id)
        await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/status",
            json={"status": "cancelled"},
            headers=patient_headers,
        )

        response = await client.put(
            f"{APPOINTMENTS_URL}/{appointment['id']}/prescription",
            json={"advice": "Rest"},
            headers=doctor_headers,
        )

        assert response.status_code == 400

    async def test_unknown_appointment(
        self, client: AsyncClient, doctor_headers: dict
    ) -> None:
        response = await client.put(
            f"{APPOINTMENTS_URL}/00000000-0000-0000-0000-000000000000/status",
            json={"status": "confirmed"},
            headers=doctor_headers,
        )

        assert response.status_code == 404

from clinic_scheduler.models import Appointment


def book(client, headers, doctor_id, when="2025-06-01T09:00:00", **extra):
    payload = {"doctor_id": doctor_id, "appointment_time": when}
    payload.update(extra)
    return client.post("/api/v1/appointments", json=payload, headers=headers)


class TestAppointmentsAPI:

    def test_book_appointment(self, client, doctor, patient, patient_headers):
        response = book(client, patient_headers, doctor.id, notes="first visit")
        assert response.status_code == 201

        data = response.json()
        assert data["message"] == "Appointment booked successfully."
        appointment = data["appointment"]
        assert appointment["doctor_name"] == doctor.name
        assert appointment["patient_id"] == patient.id
        assert appointment["time_label"] == "09:00"
        assert appointment["appointment_date"] == "2025-06-01"
        assert appointment["status"] == 0
        assert appointment["status_name"] == "scheduled"
        assert "password_hash" not in str(appointment)

    def test_availability_reflects_booking(self, client, doctor, patient_headers):
        url = f"/api/v1/doctors/{doctor.id}/availability?date=2025-06-01"
        assert client.get(url).json()["available_times"] == ["09:00", "09:30", "10:00"]

        book(client, patient_headers, doctor.id)

        assert client.get(url).json()["available_times"] == ["09:30", "10:00"]

    def test_double_booking_conflict(self, client, doctor, patient_headers, other_patient_headers):
        assert book(client, patient_headers, doctor.id).status_code == 201

        response = book(client, other_patient_headers, doctor.id)
        assert response.status_code == 409

    def test_book_unknown_doctor(self, client, patient_headers):
        response = book(client, patient_headers, 999)
        assert response.status_code == 404
        assert response.json()["detail"] == "Doctor does not exist."

    def test_book_for_another_patient(self, client, doctor, patient_headers, other_patient):
        response = book(client, patient_headers, doctor.id, patient_id=other_patient.id)
        assert response.status_code == 403

    def test_book_requires_patient_token(self, client, doctor, doctor_headers):
        response = book(client, doctor_headers, doctor.id)
        assert response.status_code == 401

    def test_book_invalid_time(self, client, doctor, patient_headers):
        response = book(client, patient_headers, doctor.id, when="not-a-time")
        assert response.status_code == 422

    def test_update_appointment(self, client, doctor, patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            json={"doctor_id": doctor.id, "appointment_time": "2025-06-01T10:00:00"},
            headers=patient_headers,
        )
        assert response.status_code == 200
        assert response.json()["appointment"]["time_label"] == "10:00"

    def test_update_unknown_appointment(self, client, doctor, patient_headers):
        response = client.put(
            "/api/v1/appointments/999",
            json={"doctor_id": doctor.id, "appointment_time": "2025-06-01T10:00:00"},
            headers=patient_headers,
        )
        assert response.status_code == 404

    def test_update_invalid_doctor(self, client, doctor, patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            json={"doctor_id": 999, "appointment_time": "2025-06-01T10:00:00"},
            headers=patient_headers,
        )
        assert response.status_code == 400

    def test_update_by_other_patient(self, client, doctor, patient_headers, other_patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            json={"doctor_id": doctor.id, "appointment_time": "2025-06-01T10:00:00"},
            headers=other_patient_headers,
        )
        assert response.status_code == 403

    def test_cancel_by_other_patient_then_owner(self, client, db_session, doctor, patient_headers, other_patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=other_patient_headers)
        assert response.status_code == 403

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=patient_headers)
        assert response.status_code == 200
        assert db_session.query(Appointment).count() == 0

    def test_cancel_unknown_appointment(self, client, patient_headers):
        response = client.delete("/api/v1/appointments/999", headers=patient_headers)
        assert response.status_code == 404

    def test_doctor_day_listing(self, client, doctor, doctor_headers, patient_headers, other_patient_headers):
        book(client, patient_headers, doctor.id, when="2025-06-01T10:00:00")
        book(client, other_patient_headers, doctor.id, when="2025-06-01T09:00:00")

        response = client.get("/api/v1/appointments?date=2025-06-01", headers=doctor_headers)
        assert response.status_code == 200
        labels = [a["time_label"] for a in response.json()["appointments"]]
        assert labels == ["09:00", "10:00"]

        response = client.get(
            "/api/v1/appointments?date=2025-06-01&patient_name=patient q", headers=doctor_headers
        )
        names = [a["patient_name"] for a in response.json()["appointments"]]
        assert names == ["Patient Q"]

    def test_doctor_day_empty(self, client, doctor_headers):
        response = client.get("/api/v1/appointments?date=2025-06-02", headers=doctor_headers)
        assert response.status_code == 200
        assert response.json() == {"appointments": [], "message": "No appointments found for this date."}

    def test_doctor_day_requires_doctor_token(self, client, patient_headers):
        response = client.get("/api/v1/appointments?date=2025-06-01", headers=patient_headers)
        assert response.status_code == 401

    def test_change_status(self, client, doctor, doctor_headers, patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}/status", json={"status": 1}, headers=doctor_headers
        )
        assert response.status_code == 200

        listing = client.get("/api/v1/appointments?date=2025-06-01", headers=doctor_headers).json()
        assert listing["appointments"][0]["status"] == 1
        assert listing["appointments"][0]["status_name"] == "completed"

    def test_change_status_unknown_appointment(self, client, doctor_headers):
        response = client.patch("/api/v1/appointments/999/status", json={"status": 1}, headers=doctor_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Appointment not found."

    def test_change_status_rejects_unknown_code(self, client, doctor, doctor_headers, patient_headers):
        appointment_id = book(client, patient_headers, doctor.id).json()["appointment"]["id"]

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}/status", json={"status": 7}, headers=doctor_headers
        )
        assert response.status_code == 422

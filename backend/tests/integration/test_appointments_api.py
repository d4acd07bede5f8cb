"""
Integration tests for the appointment API endpoints.

Runs the booking scenario end to end through the FastAPI app and checks
who may see and change which appointment.
"""

import pytest
from datetime import datetime

from factories import (
    THURSDAY, auth_headers, create_payment, create_pet, create_slot, create_user,
    create_vet, error_code, iso_thursday, thursday_at,
)
from models import Appointment


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clinic(db_session):
    """Owner with two pets, a linked vet working Thursday 09:00-17:00, and an admin."""
    owner = create_user(db_session, "owner@example.com")
    vet_user = create_user(db_session, "vega@example.com", role="VET")
    admin = create_user(db_session, "admin@example.com", role="ADMIN")
    vet = create_vet(db_session, email="vega@example.com", user=vet_user)
    create_slot(db_session, vet, THURSDAY, 540, 1020)
    return {
        "owner": owner,
        "vet_user": vet_user,
        "admin": admin,
        "vet": vet,
        "rex": create_pet(db_session, owner, name="Rex"),
        "milo": create_pet(db_session, owner, name="Milo"),
    }


def _book(client, clinic, pet_key, start, end, user_key="owner"):
    return client.post(
        "/api/appointments",
        json={
            "pet_id": clinic[pet_key].id,
            "vet_id": clinic["vet"].id,
            "start_time": start,
            "end_time": end,
            "reason": "Annual checkup",
        },
        headers=auth_headers(clinic[user_key])
    )


class TestBookingScenario:

    def test_book_conflict_cancel_restore(self, client, clinic):
        owner_headers = auth_headers(clinic["owner"])

        response = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30))
        assert response.status_code == 201
        booked = response.json()
        assert booked["status"] == "BOOKED"
        assert booked["owner_id"] == clinic["owner"].id
        assert booked["reason"] == "Annual checkup"
        assert _parse(booked["start_time"]) == thursday_at(10)
        assert _parse(booked["end_time"]) == thursday_at(10, 30)

        response = _book(client, clinic, "milo", iso_thursday(10, 15), iso_thursday(10, 45))
        assert response.status_code == 409
        assert error_code(response) == "slot_conflict"

        response = client.patch(f"/api/appointments/{booked['id']}/cancel", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

        response = client.patch(f"/api/appointments/{booked['id']}/restore", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "BOOKED"

    def test_outside_availability(self, client, clinic):
        response = _book(client, clinic, "rex", iso_thursday(16, 45), iso_thursday(17, 15))

        assert response.status_code == 409
        assert error_code(response) == "outside_availability"

    def test_reschedule(self, client, clinic):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()

        response = client.patch(
            f"/api/appointments/{booked['id']}/reschedule",
            json={"start_time": iso_thursday(10, 15), "end_time": iso_thursday(10, 45)},
            headers=auth_headers(clinic["vet_user"])
        )

        assert response.status_code == 200
        assert _parse(response.json()["start_time"]) == thursday_at(10, 15)

    def test_invalid_body(self, client, clinic):
        response = _book(client, clinic, "rex", "tomorrow", iso_thursday(10, 30))

        assert response.status_code == 400
        assert error_code(response) == "invalid_input"

    def test_reason_too_long(self, client, clinic):
        response = client.post(
            "/api/appointments",
            json={
                "pet_id": clinic["rex"].id,
                "vet_id": clinic["vet"].id,
                "start_time": iso_thursday(10),
                "end_time": iso_thursday(10, 30),
                "reason": "x" * 501,
            },
            headers=auth_headers(clinic["owner"])
        )

        assert response.status_code == 422


class TestCompletion:

    def test_complete_requires_admin_and_payment(self, client, clinic, db_session):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        url = f"/api/appointments/{booked['id']}/complete"

        assert client.patch(url, headers=auth_headers(clinic["owner"])).status_code == 403
        assert client.patch(url, headers=auth_headers(clinic["vet_user"])).status_code == 403

        response = client.patch(url, headers=auth_headers(clinic["admin"]))
        assert response.status_code == 400
        assert error_code(response) == "payment_required"

        appointment = db_session.get(Appointment, booked["id"])
        create_payment(db_session, appointment)

        response = client.patch(url, headers=auth_headers(clinic["admin"]))
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"


class TestStatusEndpoint:

    def test_transitions(self, client, clinic):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        url = f"/api/appointments/{booked['id']}/status"
        owner_headers = auth_headers(clinic["owner"])

        response = client.post(url, json={"status": "cancelled"}, headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

        response = client.post(url, json={"status": "BOOKED"}, headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "BOOKED"

        response = client.post(url, json={"status": "COMPLETED"}, headers=owner_headers)
        assert response.status_code == 403

        response = client.post(url, json={"status": "NO_SHOW"}, headers=owner_headers)
        assert response.status_code == 400
        assert error_code(response) == "unsupported_transition"

    def test_vet_cannot_restore(self, client, clinic):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        vet_headers = auth_headers(clinic["vet_user"])

        response = client.post(f"/api/appointments/{booked['id']}/status", json={"status": "CANCELLED"},
                               headers=vet_headers)
        assert response.status_code == 200

        response = client.patch(f"/api/appointments/{booked['id']}/restore", headers=vet_headers)
        assert response.status_code == 403


class TestAuthorization:

    def test_requires_token(self, client, clinic):
        assert client.get("/api/appointments").status_code == 401

    def test_invalid_token(self, client, clinic):
        response = client.get("/api/appointments", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_suspended_user(self, client, clinic, db_session):
        suspended = create_user(db_session, "gone@example.com", suspended=True)

        response = client.get("/api/appointments", headers=auth_headers(suspended))

        assert response.status_code == 403
        assert error_code(response) == "forbidden"

    def test_owner_cannot_book_for_other_pet(self, client, clinic, db_session):
        stranger = create_user(db_session, "stranger@example.com")
        clinic["stranger"] = stranger

        response = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30), user_key="stranger")

        assert response.status_code == 403

    def test_vet_cannot_book(self, client, clinic):
        response = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30), user_key="vet_user")

        assert response.status_code == 403

    def test_admin_books_for_any_pet(self, client, clinic):
        response = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30), user_key="admin")

        assert response.status_code == 201

    def test_stranger_cannot_view_or_cancel(self, client, clinic, db_session):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        stranger_headers = auth_headers(create_user(db_session, "stranger@example.com"))

        assert client.get(f"/api/appointments/{booked['id']}", headers=stranger_headers).status_code == 403
        assert client.patch(f"/api/appointments/{booked['id']}/cancel", headers=stranger_headers).status_code == 403

    def test_other_vet_cannot_view(self, client, clinic, db_session):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        other_vet_user = create_user(db_session, "ortiz@example.com", role="VET")
        create_vet(db_session, name="Dr. Ortiz", user=other_vet_user)

        response = client.get(f"/api/appointments/{booked['id']}", headers=auth_headers(other_vet_user))

        assert response.status_code == 403

    def test_assigned_vet_and_owner_can_view(self, client, clinic):
        booked = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()

        for key in ("owner", "vet_user", "admin"):
            response = client.get(f"/api/appointments/{booked['id']}", headers=auth_headers(clinic[key]))
            assert response.status_code == 200
            assert response.json()["id"] == booked["id"]

    def test_unknown_appointment(self, client, clinic):
        response = client.get("/api/appointments/999", headers=auth_headers(clinic["admin"]))

        assert response.status_code == 404
        assert error_code(response) == "not_found"


class TestListing:

    def test_role_scoped_listing(self, client, clinic, db_session):
        other_owner = create_user(db_session, "other@example.com")
        other_pet = create_pet(db_session, other_owner, name="Luna")
        mine = _book(client, clinic, "rex", iso_thursday(10), iso_thursday(10, 30)).json()
        client.post(
            "/api/appointments",
            json={"pet_id": other_pet.id, "vet_id": clinic["vet"].id,
                  "start_time": iso_thursday(11), "end_time": iso_thursday(11, 30)},
            headers=auth_headers(other_owner)
        )

        # Owners only ever see their own pets, whatever filter they send
        response = client.get(
            "/api/appointments", params={"owner_id": other_owner.id}, headers=auth_headers(clinic["owner"])
        )
        assert response.status_code == 200
        assert [a["id"] for a in response.json()["appointments"]] == [mine["id"]]

        response = client.get("/api/appointments", headers=auth_headers(clinic["vet_user"]))
        assert response.json()["total"] == 2

        response = client.get(
            "/api/appointments", params={"status": "BOOKED", "page_size": 1}, headers=auth_headers(clinic["admin"])
        )
        body = response.json()
        assert body["total"] == 2
        assert body["page_size"] == 1
        assert len(body["appointments"]) == 1
        assert body["total_pages"] == 2
        assert body["has_prev"] is False
        assert body["has_next"] is True

        response = client.get(
            "/api/appointments", params={"page": 2, "page_size": 1}, headers=auth_headers(clinic["admin"])
        )
        body = response.json()
        assert body["has_prev"] is True
        assert body["has_next"] is False

    def test_vet_without_profile_forbidden(self, client, clinic, db_session):
        unlinked = create_user(db_session, "unlinked@example.com", role="VET")

        response = client.get("/api/appointments", headers=auth_headers(unlinked))

        assert response.status_code == 403

    def test_vet_resolved_by_email(self, client, clinic, db_session):
        email_user = create_user(db_session, "Ortiz@Example.com", role="VET")
        create_vet(db_session, name="Dr. Ortiz", email="ortiz@example.com")

        response = client.get("/api/appointments", headers=auth_headers(email_user))

        assert response.status_code == 200
        assert response.json()["total"] == 0
        assert response.json()["total_pages"] == 1
        assert response.json()["has_next"] is False

    def test_invalid_status_filter(self, client, clinic):
        response = client.get(
            "/api/appointments", params={"status": "PENDING"}, headers=auth_headers(clinic["admin"])
        )

        assert response.status_code == 400
        assert error_code(response) == "invalid_input"

"""Integration tests for the workshop catalog and lifecycle endpoints.

Run with: pytest tests/test_workshops_api.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from workshops import models as orm


def workshop_payload(**overrides) -> dict:
    start = timezone.now() + timedelta(days=14)
    payload = {
        "title": "Sabre footwork",
        "description": "Two hours of footwork drills",
        "location": "Main hall",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=2)).isoformat(),
        "capacity": 12,
        "price_member": 1500,
        "price_non_member": 2500,
        "refund_window_days": 5,
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestWorkshopList:
    """Tests for GET, POST /api/workshops"""

    def test_requires_authentication(self, api_client: APIClient):
        response = api_client.get("/api/workshops")
        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["code"] == "NOT_AUTHENTICATED"

    def test_members_see_planned_and_published(self, member_client, make_workshop):
        make_workshop(status=orm.WorkshopStatus.PLANNED)
        make_workshop(status=orm.WorkshopStatus.PUBLISHED)
        make_workshop(status=orm.WorkshopStatus.FINISHED)

        response = member_client.get("/api/workshops")

        assert response.status_code == 200
        statuses = {w["status"] for w in response.json()["workshops"]}
        assert statuses == {"planned", "published"}

    def test_coordinators_see_every_status(self, coordinator_client, make_workshop):
        make_workshop(status=orm.WorkshopStatus.CANCELLED)
        make_workshop(status=orm.WorkshopStatus.PUBLISHED)

        response = coordinator_client.get("/api/workshops?status=cancelled")

        assert [w["status"] for w in response.json()["workshops"]] == ["cancelled"]

    def test_ordered_by_start_date(self, coordinator_client, make_workshop):
        later = make_workshop(title="Later", start_date=timezone.now() + timedelta(days=20))
        sooner = make_workshop(title="Sooner", start_date=timezone.now() + timedelta(days=2))

        response = coordinator_client.get("/api/workshops")

        ids = [w["id"] for w in response.json()["workshops"]]
        assert ids == [str(sooner.id), str(later.id)]

    def test_invalid_status_filter(self, coordinator_client):
        response = coordinator_client.get("/api/workshops?status=archived")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_create_workshop(self, coordinator_client, coordinator_id):
        response = coordinator_client.post(
            "/api/workshops", workshop_payload(), format="json"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["workshop"]["status"] == "planned"
        assert body["workshop"]["price_non_member"] == 2500
        row = orm.Workshop.objects.get(pk=body["workshop"]["id"])
        assert row.created_by == coordinator_id
        assert row.refund_window_days == 5

    def test_create_requires_workshop_role(self, member_client):
        response = member_client.post("/api/workshops", workshop_payload(), format="json")
        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(days=-3)])
    def test_create_rejects_start_today_or_past(self, coordinator_client, offset):
        start = timezone.now() + offset
        payload = workshop_payload(
            start_date=start.isoformat(),
            end_date=(start + timedelta(hours=1)).isoformat(),
        )
        response = coordinator_client.post("/api/workshops", payload, format="json")
        assert response.status_code == 400
        assert "start_date" in response.json()["details"]

    def test_create_rejects_end_before_start(self, coordinator_client):
        start = timezone.now() + timedelta(days=14)
        payload = workshop_payload(end_date=(start - timedelta(hours=1)).isoformat())
        response = coordinator_client.post("/api/workshops", payload, format="json")
        assert response.status_code == 400
        assert "end_date" in response.json()["details"]

    @pytest.mark.parametrize(
        "field, value",
        [("capacity", 0), ("price_member", -1), ("refund_window_days", -2)],
    )
    def test_create_rejects_out_of_range_numbers(self, coordinator_client, field, value):
        payload = workshop_payload(**{field: value})
        response = coordinator_client.post("/api/workshops", payload, format="json")
        assert response.status_code == 400


@pytest.mark.django_db
class TestWorkshopDetail:
    """Tests for GET, PUT, DELETE /api/workshops/{id}"""

    def test_get_workshop_returns_details(self, member_client, make_workshop):
        workshop = make_workshop(capacity=6, price_member=2000)

        response = member_client.get(f"/api/workshops/{workshop.id}")

        assert response.status_code == 200
        data = response.json()["workshop"]
        assert data["id"] == str(workshop.id)
        assert data["capacity"] == 6
        assert data["price_member"] == 2000
        assert data["price_non_member"] is None

    def test_get_workshop_not_found(self, member_client):
        response = member_client.get(f"/api/workshops/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Workshop not found",
            "code": "WORKSHOP_NOT_FOUND",
        }

    def test_get_workshop_invalid_id_format(self, member_client):
        response = member_client.get("/api/workshops/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ID"

    def test_update_workshop(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)

        response = coordinator_client.put(
            f"/api/workshops/{workshop.id}", {"location": "Annex"}, format="json"
        )

        assert response.status_code == 200
        workshop.refresh_from_db()
        assert workshop.location == "Annex"

    def test_update_end_date_before_stored_start(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)
        stored_end = workshop.end_date

        response = coordinator_client.put(
            f"/api/workshops/{workshop.id}",
            {"end_date": (workshop.start_date - timedelta(hours=1)).isoformat()},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_WORKSHOP_DATES"
        workshop.refresh_from_db()
        assert workshop.end_date == stored_end

    def test_update_start_date_in_past(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)
        stored_start = workshop.start_date

        response = coordinator_client.put(
            f"/api/workshops/{workshop.id}",
            {"start_date": (timezone.now() - timedelta(days=2)).isoformat()},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_WORKSHOP_DATES"
        workshop.refresh_from_db()
        assert workshop.start_date == stored_start

    def test_update_price_after_registrations(
        self, coordinator_client, make_workshop, make_member
    ):
        workshop = make_workshop()
        orm.Registration.objects.create(
            workshop=workshop, member=make_member(), status="confirmed"
        )

        response = coordinator_client.put(
            f"/api/workshops/{workshop.id}", {"price_member": 9900}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_WORKSHOP_STATE"

    def test_delete_planned_workshop(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)
        response = coordinator_client.delete(f"/api/workshops/{workshop.id}")
        assert response.status_code == 200
        assert not orm.Workshop.objects.filter(pk=workshop.id).exists()

    def test_delete_published_workshop_rejected(self, coordinator_client, make_workshop):
        workshop = make_workshop()
        response = coordinator_client.delete(f"/api/workshops/{workshop.id}")
        assert response.status_code == 400
        assert orm.Workshop.objects.filter(pk=workshop.id).exists()


@pytest.mark.django_db
class TestWorkshopLifecycle:
    def test_publish(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)
        response = coordinator_client.post(f"/api/workshops/{workshop.id}/publish")
        assert response.status_code == 200
        assert response.json()["workshop"]["status"] == "published"

    def test_publish_requires_role(self, member_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.PLANNED)
        response = member_client.post(f"/api/workshops/{workshop.id}/publish")
        assert response.status_code == 403

    def test_finish_blocked_by_pending_attendee(
        self, coordinator_client, make_workshop, make_member
    ):
        workshop = make_workshop(start_date=timezone.now() - timedelta(hours=1))
        orm.Registration.objects.create(
            workshop=workshop, member=make_member(), status="pending"
        )
        response = coordinator_client.patch(f"/api/workshops/{workshop.id}/finish")
        assert response.status_code == 400

    def test_finish(self, coordinator_client, make_workshop):
        workshop = make_workshop(start_date=timezone.now() - timedelta(hours=1))
        response = coordinator_client.patch(f"/api/workshops/{workshop.id}/finish")
        assert response.status_code == 200
        assert response.json()["workshop"]["status"] == "finished"

    def test_finish_before_start_rejected(self, coordinator_client, make_workshop):
        workshop = make_workshop()
        response = coordinator_client.patch(f"/api/workshops/{workshop.id}/finish")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_WORKSHOP_STATE"
        workshop.refresh_from_db()
        assert workshop.status == "published"

    def test_cancel_refunds_paid_attendees(
        self, coordinator_client, make_workshop, make_member, payment_gateway
    ):
        workshop = make_workshop()
        paid = orm.Registration.objects.create(
            workshop=workshop,
            member=make_member("Paid"),
            status="confirmed",
            amount_paid=2500,
            payment_intent_id="pi_paid",
        )
        invited = orm.Registration.objects.create(
            workshop=workshop, member=make_member("Invited"), status="invited", priority=1
        )

        response = coordinator_client.post(f"/api/workshops/{workshop.id}/cancel")

        assert response.status_code == 200
        paid.refresh_from_db()
        invited.refresh_from_db()
        assert paid.status == "refunded"
        assert paid.refund.reason == "Workshop cancelled"
        assert paid.refund.status == "processing"
        assert invited.status == "cancelled"
        assert [call[0] for call in payment_gateway.refunds] == ["pi_paid"]

    def test_cancel_rolls_back_on_provider_failure(
        self, coordinator_client, make_workshop, make_member, payment_gateway
    ):
        workshop = make_workshop()
        paid = orm.Registration.objects.create(
            workshop=workshop,
            member=make_member(),
            status="confirmed",
            amount_paid=2500,
            payment_intent_id="pi_paid",
        )
        payment_gateway.fail_refunds = True

        response = coordinator_client.post(f"/api/workshops/{workshop.id}/cancel")

        assert response.status_code == 502
        assert response.json()["code"] == "PAYMENT_PROVIDER_ERROR"
        workshop.refresh_from_db()
        paid.refresh_from_db()
        assert workshop.status == "published"
        assert paid.status == "confirmed"
        assert not orm.Refund.objects.exists()

    def test_cancel_finished_workshop_rejected(self, coordinator_client, make_workshop):
        workshop = make_workshop(status=orm.WorkshopStatus.FINISHED)
        response = coordinator_client.post(f"/api/workshops/{workshop.id}/cancel")
        assert response.status_code == 400

"""API tests for /exhibitions."""

from datetime import timedelta

from ticketing.controller.helpers import utcnow


def _payload(days_ahead=5, **overrides):
    start = utcnow() + timedelta(days=days_ahead)
    payload = {
        "title": "Spring Art Fair",
        "description": "Galleries from across the region",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=3)).isoformat(),
        "venue": {"name": "Expo Centre", "city": "Pune", "country": "India"},
    }
    payload.update(overrides)
    return payload


class TestExhibitions:

    def test_create_with_events(self, client, staff, staff_headers, make_event):
        event = make_event()
        response = client.post("/api/v1/exhibitions/", headers=staff_headers,
                               json=_payload(event_ids=[event.id]))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["organizer_id"] == staff.id
        assert data["status"] == "upcoming"
        assert data["venue"]["name"] == "Expo Centre"
        assert [e["id"] for e in data["events"]] == [event.id]

    def test_unknown_event_id(self, client, staff_headers):
        response = client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload(event_ids=[404]))
        assert response.status_code == 404

    def test_customer_cannot_create(self, client, customer_headers):
        assert client.post("/api/v1/exhibitions/", headers=customer_headers, json=_payload()).status_code == 403

    def test_upcoming_is_ascending_and_future_only(self, client, staff_headers):
        client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload(20, title="Later"))
        client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload(2, title="Sooner"))
        client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload(-10, title="Past"))

        titles = [e["title"] for e in client.get("/api/v1/exhibitions/upcoming").json()["data"]]
        assert titles == ["Sooner", "Later"]

    def test_list_by_status(self, client, staff_headers):
        client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload(status="ongoing"))
        client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload())
        body = client.get("/api/v1/exhibitions/?status=ongoing").json()
        assert body["pagination"]["total_items"] == 1

    def test_update_and_delete(self, client, staff_headers, make_event):
        created = client.post("/api/v1/exhibitions/", headers=staff_headers, json=_payload()).json()["data"]
        event = make_event()

        updated = client.put(f"/api/v1/exhibitions/{created['id']}", headers=staff_headers,
                             json={"status": "ongoing", "event_ids": [event.id]})
        assert updated.json()["data"]["status"] == "ongoing"
        assert len(updated.json()["data"]["events"]) == 1

        assert client.delete(f"/api/v1/exhibitions/{created['id']}", headers=staff_headers).status_code == 200
        assert client.get(f"/api/v1/exhibitions/{created['id']}").status_code == 404
        assert client.get(f"/api/v1/events/{event.id}").json()["data"]["exhibition_id"] is None

    def test_missing_exhibition(self, client):
        assert client.get("/api/v1/exhibitions/123").status_code == 404

"""API tests for categories, events and shows."""

from datetime import timedelta

from ticketing.controller.helpers import utcnow
from ticketing.models.event_model import Show


def _event_payload(**overrides):
    start = utcnow() + timedelta(days=10)
    payload = {
        "title": "Indie Film Festival",
        "description": "Three days of film",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=2)).isoformat(),
        "venue": "Riverside Cinema",
        "price": 250,
        "capacity": 100,
        "status": "published",
        "tags": ["film"],
        "shows": [{"starts_at": start.isoformat(), "total_seats": 40}],
    }
    payload.update(overrides)
    return payload


class TestCategories:

    def test_category_titles_are_unique(self, client, staff_headers):
        first = client.post("/api/v1/categories/", headers=staff_headers, json={"title": "Music"})
        assert first.status_code == 201
        dup = client.post("/api/v1/categories/", headers=staff_headers, json={"title": "Music"})
        assert dup.status_code == 400

    def test_categories_are_public(self, client, staff_headers):
        client.post("/api/v1/categories/", headers=staff_headers, json={"title": "Theatre"})
        response = client.get("/api/v1/categories/")
        assert [c["title"] for c in response.json()["data"]] == ["Theatre"]

    def test_customer_cannot_create_category(self, client, customer_headers):
        response = client.post("/api/v1/categories/", headers=customer_headers, json={"title": "Music"})
        assert response.status_code == 403


class TestEvents:

    def test_staff_creates_event_with_shows(self, client, staff, staff_headers):
        response = client.post("/api/v1/events/", headers=staff_headers, json=_event_payload())

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["organizer_id"] == staff.id
        assert data["tickets_sold"] == 0
        assert len(data["shows"]) == 1
        assert data["shows"][0]["available_seats"] == 40

    def test_customer_cannot_create_event(self, client, customer_headers):
        assert client.post("/api/v1/events/", headers=customer_headers, json=_event_payload()).status_code == 403

    def test_end_before_start_is_rejected(self, client, staff_headers):
        start = utcnow() + timedelta(days=3)
        payload = _event_payload(start_date=start.isoformat(), end_date=(start - timedelta(days=1)).isoformat())
        assert client.post("/api/v1/events/", headers=staff_headers, json=payload).status_code == 400

    def test_unknown_category_is_rejected(self, client, staff_headers):
        response = client.post("/api/v1/events/", headers=staff_headers, json=_event_payload(category_id=77))
        assert response.status_code == 404

    def test_list_filters_by_status_and_orders_by_start(self, client, make_event):
        make_event("Later", starts_in=timedelta(days=20))
        make_event("Sooner", starts_in=timedelta(days=2))
        make_event("Hidden", status="draft")

        response = client.get("/api/v1/events/?status=published")
        titles = [e["title"] for e in response.json()["data"]]
        assert titles == ["Sooner", "Later"]
        assert response.json()["pagination"]["total_items"] == 2

    def test_get_event_includes_shows(self, client, make_event):
        event = make_event()
        response = client.get(f"/api/v1/events/{event.id}")
        assert response.status_code == 200
        assert len(response.json()["data"]["shows"]) == 1

    def test_missing_event(self, client):
        assert client.get("/api/v1/events/999").status_code == 404

    def test_update_event(self, client, staff_headers, make_event):
        event = make_event()
        response = client.put(f"/api/v1/events/{event.id}", headers=staff_headers, json={"price": 80})
        assert response.json()["data"]["price"] == 80

    def test_update_rejects_end_before_existing_start(self, client, staff_headers, make_event):
        event = make_event()
        end = (event.start_date - timedelta(days=1)).isoformat()
        response = client.put(f"/api/v1/events/{event.id}", headers=staff_headers, json={"end_date": end})
        assert response.status_code == 400

    def test_update_with_utc_offset(self, client, staff_headers, make_event):
        event = make_event()
        response = client.put(f"/api/v1/events/{event.id}", headers=staff_headers,
                              json={"end_date": "2099-01-01T10:00:00Z"})
        assert response.status_code == 200
        assert response.json()["data"]["end_date"] == "2099-01-01T10:00:00"

        shifted = client.put(f"/api/v1/events/{event.id}", headers=staff_headers,
                             json={"end_date": "2099-01-01T15:30:00+05:30"})
        assert shifted.json()["data"]["end_date"] == "2099-01-01T10:00:00"

    def test_create_with_mixed_offsets(self, client, staff_headers):
        response = client.post("/api/v1/events/", headers=staff_headers, json={
            "title": "Dawn Raga", "description": "Morning concert", "venue": "Hall",
            "start_date": "2099-05-01T06:00:00", "end_date": "2099-05-01T09:00:00+02:00",
            "capacity": 10, "shows": [{"starts_at": "2099-05-01T06:00:00Z", "total_seats": 10}],
        })
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["end_date"] == "2099-05-01T07:00:00"
        assert data["shows"][0]["starts_at"] == "2099-05-01T06:00:00"

    def test_delete_event(self, client, staff_headers, make_event):
        event = make_event()
        assert client.delete(f"/api/v1/events/{event.id}", headers=staff_headers).status_code == 200
        assert client.get(f"/api/v1/events/{event.id}").status_code == 404


class TestShows:

    def test_add_and_list_shows(self, client, staff_headers, make_event):
        event = make_event()
        starts = (utcnow() + timedelta(days=8)).isoformat()
        created = client.post(f"/api/v1/events/{event.id}/shows", headers=staff_headers,
                              json={"starts_at": starts, "total_seats": 5})
        assert created.status_code == 201

        shows = client.get(f"/api/v1/events/{event.id}/shows").json()["data"]
        assert len(shows) == 2

    def test_total_seats_cannot_drop_below_booked(self, client, staff_headers, make_event, db):
        event = make_event(seats=10)
        show = event.shows[0]
        show.booked_seats = 6
        db.commit()

        response = client.put(f"/api/v1/events/{event.id}/shows/{show.id}", headers=staff_headers,
                              json={"total_seats": 5})
        assert response.status_code == 400

    def test_show_with_bookings_cannot_be_deleted(self, client, staff_headers, make_event, db):
        event = make_event()
        show = event.shows[0]
        show.booked_seats = 1
        db.commit()

        response = client.delete(f"/api/v1/events/{event.id}/shows/{show.id}", headers=staff_headers)
        assert response.status_code == 400
        db.expire_all()
        assert db.get(Show, show.id) is not None

    def test_show_of_other_event_is_not_found(self, client, staff_headers, make_event):
        first, second = make_event("A"), make_event("B")
        other_show = second.shows[0].id
        response = client.delete(f"/api/v1/events/{first.id}/shows/{other_show}", headers=staff_headers)
        assert response.status_code == 404

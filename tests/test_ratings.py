"""API tests for event ratings."""

import pytest

from ticketing.controller.helpers import utcnow
from ticketing.models.event_model import Event
from ticketing.models.ticket_model import Ticket, TicketEvent

from conftest import headers_for


@pytest.fixture
def attend(db):
    """Gives a user a paid ticket with a verified line for the event."""
    def _attend(user, event):
        ticket = Ticket(ticket_number=f"TIX-T{user.id}{event.id}", purchased_by_id=user.id,
                        qr_code=f"qr-{user.id}-{event.id}", payment_status="completed", status="used")
        ticket.lines.append(TicketEvent(event_id=event.id, quantity=1, verified=True, verified_at=utcnow()))
        db.add(ticket)
        db.commit()
        return ticket
    return _attend


def _rate(client, headers, event, rating=4, review="Great"):
    return client.post(f"/api/v1/events/{event.id}/ratings", headers=headers,
                       json={"rating": rating, "review": review})


class TestRatings:

    def test_rating_requires_attendance(self, client, customer_headers, make_event):
        response = _rate(client, customer_headers, make_event())
        assert response.status_code == 403

    def test_unverified_ticket_is_not_attendance(self, client, customer, customer_headers, make_event, db):
        event = make_event()
        ticket = Ticket(ticket_number="TIX-U1", purchased_by_id=customer.id, qr_code="qr-u1",
                        payment_status="completed", status="active")
        ticket.lines.append(TicketEvent(event_id=event.id, quantity=1, verified=False))
        db.add(ticket)
        db.commit()
        assert _rate(client, customer_headers, event).status_code == 403

    def test_attendee_rates_and_average_updates(self, client, make_user, make_event, attend, db):
        event = make_event()
        first, second = make_user(), make_user()
        attend(first, event)
        attend(second, event)

        assert _rate(client, headers_for(first), event, rating=5).status_code == 201
        assert _rate(client, headers_for(second), event, rating=2).status_code == 201

        db.expire_all()
        assert db.get(Event, event.id).average_rating == 3.5

    def test_one_rating_per_user(self, client, customer, customer_headers, make_event, attend):
        event = make_event()
        attend(customer, event)
        _rate(client, customer_headers, event)
        assert _rate(client, customer_headers, event).status_code == 400

    def test_admin_may_rate_without_ticket(self, client, admin_headers, make_event):
        assert _rate(client, admin_headers, make_event()).status_code == 201

    def test_score_range(self, client, admin_headers, make_event):
        assert _rate(client, admin_headers, make_event(), rating=6).status_code == 400

    def test_update_and_delete_by_owner(self, client, customer, customer_headers, make_event, attend, db):
        event = make_event()
        attend(customer, event)
        rating_id = _rate(client, customer_headers, event, rating=4).json()["data"]["id"]

        updated = client.put(f"/api/v1/ratings/{rating_id}", headers=customer_headers, json={"rating": 1})
        assert updated.json()["data"]["rating"] == 1
        db.expire_all()
        assert db.get(Event, event.id).average_rating == 1.0

        assert client.delete(f"/api/v1/ratings/{rating_id}", headers=customer_headers).status_code == 200
        db.expire_all()
        assert db.get(Event, event.id).average_rating == 0

    def test_other_user_cannot_edit(self, client, customer, customer_headers, make_user, make_event, attend):
        event = make_event()
        attend(customer, event)
        rating_id = _rate(client, customer_headers, event).json()["data"]["id"]
        stranger = headers_for(make_user())

        assert client.put(f"/api/v1/ratings/{rating_id}", headers=stranger, json={"rating": 1}).status_code == 403
        assert client.delete(f"/api/v1/ratings/{rating_id}", headers=stranger).status_code == 403

    def test_public_event_ratings(self, client, admin_headers, make_event):
        event = make_event()
        _rate(client, admin_headers, event)
        body = client.get(f"/api/v1/events/{event.id}/ratings").json()
        assert body["pagination"]["total_items"] == 1

    def test_admin_lists_all_with_filters(self, client, admin_headers, customer_headers, make_event):
        first, second = make_event("A"), make_event("B")
        _rate(client, admin_headers, first, rating=5)
        _rate(client, admin_headers, second, rating=2)

        body = client.get("/api/v1/ratings/all?min_rating=4", headers=admin_headers).json()
        assert [r["event_id"] for r in body["data"]] == [first.id]
        assert client.get("/api/v1/ratings/all", headers=customer_headers).status_code == 403

"""API tests for /admin: user and event management, settings and analytics."""

from datetime import datetime, timedelta

import pytest

from ticketing.controller.analytics_controller import percent_change, resolve_time_range, subtract_months
from ticketing.controller.helpers import utcnow
from ticketing.errors import APIError
from ticketing.models.event_model import Category
from ticketing.models.ticket_model import Ticket, TicketEvent


def _ticket(db, user, event, amount, payment_status="completed", purchased=None, verified=False):
    ticket = Ticket(ticket_number=f"TIX-{db.query(Ticket).count() + 1:06d}-ABC", purchased_by_id=user.id,
                    qr_code=f"qr-{db.query(Ticket).count() + 1}", total_amount=amount,
                    payment_status=payment_status, purchase_date=purchased or utcnow())
    ticket.lines.append(TicketEvent(event_id=event.id, quantity=1, verified=verified,
                                    verified_at=utcnow() if verified else None))
    db.add(ticket)
    db.commit()
    return ticket


class TestAccess:

    def test_non_admins_are_rejected(self, client, staff_headers, customer_headers):
        assert client.get("/api/v1/admin/users", headers=staff_headers).status_code == 403
        assert client.get("/api/v1/admin/stats", headers=customer_headers).status_code == 403
        assert client.get("/api/v1/admin/settings").status_code == 401


class TestAdminUsers:

    def test_role_and_status(self, client, admin_headers, customer):
        role = client.put(f"/api/v1/admin/users/{customer.id}/role", headers=admin_headers, json={"role": "staff"})
        assert role.json()["data"]["role"] == "staff"

        status = client.put(f"/api/v1/admin/users/{customer.id}/status", headers=admin_headers,
                            json={"status": "suspended"})
        assert status.json()["data"]["status"] == "suspended"

    def test_invalid_role(self, client, admin_headers, customer):
        response = client.put(f"/api/v1/admin/users/{customer.id}/role", headers=admin_headers,
                              json={"role": "superuser"})
        assert response.status_code == 400

    def test_user_tickets(self, client, admin_headers, customer, make_event, db):
        _ticket(db, customer, make_event(), 100)
        body = client.get(f"/api/v1/admin/users/{customer.id}/tickets", headers=admin_headers).json()
        assert body["pagination"]["total_items"] == 1

    def test_create_user(self, client, admin_headers):
        response = client.post("/api/v1/admin/users", headers=admin_headers, json={
            "name": "Door Staff", "email": "door@example.com", "password": "secret123", "role": "staff",
        })
        assert response.status_code == 201
        assert response.json()["data"]["email_verified"] is True


class TestAdminEvents:

    def test_status_change_and_tickets(self, client, admin_headers, customer, make_event, db):
        event = make_event(status="draft")
        response = client.put(f"/api/v1/admin/events/{event.id}/status", headers=admin_headers,
                              json={"status": "published"})
        assert response.json()["data"]["status"] == "published"

        _ticket(db, customer, event, 100)
        tickets = client.get(f"/api/v1/admin/events/{event.id}/tickets", headers=admin_headers).json()
        assert tickets["pagination"]["total_items"] == 1

    def test_event_with_tickets_cannot_be_deleted(self, client, admin_headers, customer, make_event, db):
        event = make_event()
        _ticket(db, customer, event, 100)
        assert client.delete(f"/api/v1/admin/events/{event.id}", headers=admin_headers).status_code == 400


class TestSettings:

    def test_defaults_are_created(self, client, admin_headers):
        data = client.get("/api/v1/admin/settings", headers=admin_headers).json()["data"]
        assert data["enable_qr_scanning"] is True
        assert data["entry_pass_expiration_days"] == 30
        assert data["sms_provider"] == "none"

    def test_secrets_are_write_only(self, client, admin_headers):
        response = client.put("/api/v1/admin/settings", headers=admin_headers, json={
            "site_name": "Tickets Co", "email_password": "hunter2", "sms_api_secret": "s3cret",
        })
        data = response.json()["data"]
        assert data["site_name"] == "Tickets Co"
        assert "email_password" not in data
        assert "sms_api_secret" not in data

    def test_invalid_provider(self, client, admin_headers):
        response = client.put("/api/v1/admin/settings", headers=admin_headers, json={"sms_provider": "pigeon"})
        assert response.status_code == 400


class TestAnalyticsHelpers:

    def test_subtract_months_clamps_day(self):
        assert subtract_months(utcnow().replace(year=2026, month=3, day=31), 1).day == 28

    def test_percent_change(self):
        assert percent_change(150, 100) == 50.0
        assert percent_change(5, 0) == 100.0
        assert percent_change(0, 0) == 0.0

    def test_named_ranges(self):
        start, end = resolve_time_range("last7days")
        assert (end - start).days == 6
        with pytest.raises(APIError):
            resolve_time_range("fortnight")


class TestAnalytics:

    def test_stats(self, client, admin_headers, customer, make_event, db):
        event = make_event()
        _ticket(db, customer, event, 100)
        _ticket(db, customer, event, 50, payment_status="pending")

        data = client.get("/api/v1/admin/stats?time_range=last30days", headers=admin_headers).json()["data"]
        assert data["total_tickets"] == 2
        assert data["total_revenue"] == 100
        assert data["period_revenue"] == 100
        assert data["upcoming_events"] == 1
        assert data["ticket_status_distribution"] == {"active": 2}
        assert len(data["recent_tickets"]) == 2

    def test_stats_invalid_range(self, client, admin_headers):
        assert client.get("/api/v1/admin/stats?time_range=decade", headers=admin_headers).status_code == 400

    def test_revenue_fills_missing_days(self, client, admin_headers, customer, make_event, db):
        event = make_event()
        today = utcnow()
        _ticket(db, customer, event, 100, purchased=today)
        _ticket(db, customer, event, 40, purchased=today - timedelta(days=2))
        _ticket(db, customer, event, 30, purchased=today - timedelta(days=4))

        start = (today - timedelta(days=2)).date().isoformat()
        end = today.date().isoformat()
        data = client.get(f"/api/v1/admin/analytics/revenue?start_date={start}T00:00:00&end_date={end}T00:00:00",
                          headers=admin_headers).json()["data"]

        assert [row["revenue"] for row in data["data"]] == [40, 0, 100]
        assert data["summary"]["current_period"] == {"revenue": 140, "count": 2}
        assert data["summary"]["previous_period"]["count"] == 1

    def test_attendance(self, client, admin_headers, customer, make_event, db):
        event = make_event()
        _ticket(db, customer, event, 100, verified=True)
        _ticket(db, customer, event, 100, verified=False)

        data = client.get(f"/api/v1/admin/analytics/attendance?event_id={event.id}",
                          headers=admin_headers).json()["data"]
        assert data["events"][0]["total_attendance"] == 1
        assert data["daily_attendance"][0]["count"] == 1

    def test_user_registrations(self, client, admin_headers, make_user):
        make_user()
        make_user("staff")
        data = client.get("/api/v1/admin/analytics/users?group_by=month", headers=admin_headers).json()["data"]
        # admin fixture plus the two above
        assert data["summary"]["total"] == 3
        roles = {row["role"]: row["count"] for row in data["role_distribution"]}
        assert roles == {"admin": 1, "customer": 1, "staff": 1}

    def test_event_performance_sorting(self, client, admin_headers, make_event, db):
        busy = make_event("Busy", capacity=10)
        quiet = make_event("Quiet", capacity=100)
        busy.tickets_sold = 8
        quiet.tickets_sold = 10
        db.commit()

        by_percentage = client.get("/api/v1/admin/analytics/events?sort_by=percentage_sold",
                                   headers=admin_headers).json()["data"]
        assert by_percentage[0]["title"] == "Busy"
        assert by_percentage[0]["percentage_sold"] == 80.0

        by_sold = client.get("/api/v1/admin/analytics/events?sort_by=tickets_sold", headers=admin_headers).json()
        assert by_sold["data"][0]["title"] == "Quiet"

    def test_boundary_row_is_not_in_previous_period(self, client, admin_headers, customer, make_event, db):
        start = datetime(2026, 3, 10)
        _ticket(db, customer, make_event(), 70, purchased=start)

        url = "/api/v1/admin/analytics/revenue?start_date=2026-03-10T00:00:00&end_date=2026-03-12T00:00:00"
        data = client.get(url, headers=admin_headers).json()["data"]
        assert data["summary"]["current_period"]["count"] == 1
        assert data["summary"]["previous_period"]["count"] == 0

    def test_offset_query_dates(self, client, admin_headers, customer, make_event, db):
        _ticket(db, customer, make_event(), 70, purchased=datetime(2026, 3, 11, 12))
        url = "/api/v1/admin/analytics/revenue?start_date=2026-03-10T00:00:00Z&end_date=2026-03-12T00:00:00Z"
        response = client.get(url, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["summary"]["current_period"]["revenue"] == 70

    def test_event_revenue_uses_charged_amounts(self, client, admin_headers, customer, make_event, db):
        concert = make_event("Concert", price=100)
        workshop = make_event("Workshop", price=50)
        # Entry-pass booking: nothing charged
        _ticket(db, customer, concert, 0)
        # Discounted two-event ticket: 120 split 2:1 by list value
        bundle = Ticket(ticket_number="TIX-999999-BND", purchased_by_id=customer.id, qr_code="qr-bundle",
                        total_amount=120, payment_status="completed")
        bundle.lines.append(TicketEvent(event_id=concert.id, quantity=1))
        bundle.lines.append(TicketEvent(event_id=workshop.id, quantity=1))
        db.add(bundle)
        db.commit()

        data = client.get("/api/v1/admin/analytics/events", headers=admin_headers).json()["data"]
        revenue = {row["title"]: row["revenue"] for row in data}
        assert revenue == {"Concert": 80.0, "Workshop": 40.0}

    def test_event_performance_by_category(self, client, admin_headers, make_event, db):
        music = Category(title="Music")
        db.add(music)
        db.commit()
        jazz = make_event("Jazz")
        make_event("Chess")
        jazz.category_id = music.id
        db.commit()

        data = client.get(f"/api/v1/admin/analytics/events?category={music.id}",
                          headers=admin_headers).json()["data"]
        assert [row["title"] for row in data] == ["Jazz"]

    def test_invalid_group_by(self, client, admin_headers):
        response = client.get("/api/v1/admin/analytics/revenue?group_by=fortnight", headers=admin_headers)
        assert response.status_code == 400

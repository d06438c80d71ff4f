"""Pytest configuration and shared fixtures."""

import os
from datetime import timedelta

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SMTP_HOST"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient

from main import app
from ticketing.controller import mail_sender
from ticketing.controller.helpers import utcnow
from ticketing.database import Base, SessionLocal, engine
from ticketing.middleware.rate_limiter import reset_limits
from ticketing.models.event_model import Event, Show
from ticketing.models.user_model import User
from ticketing.security import create_access_token, generate_user_qr_code, hash_password

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    reset_limits()
    yield
    reset_limits()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def outbox(monkeypatch):
    """Captures mails instead of talking to an SMTP server."""
    sent = []

    async def fake_send_email(to, subject, text, html=None, qr_png=None):
        sent.append({"to": to, "subject": subject, "text": text, "html": html, "qr_png": qr_png})
        return True

    monkeypatch.setattr(mail_sender, "send_email", fake_send_email)
    return sent


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role="customer", status="active", email=None, email_verified=True):
        counter["n"] += 1
        user = User(
            name=f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password=hash_password(PASSWORD),
            role=role,
            status=status,
            email_verified=email_verified,
            qr_code=generate_user_qr_code(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def headers_for(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def staff(make_user):
    return make_user("staff")


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def staff_headers(staff):
    return headers_for(staff)


@pytest.fixture
def customer_headers(customer):
    return headers_for(customer)


@pytest.fixture
def make_event(db):
    def _make_event(title="Jazz Night", status="published", price=100.0, capacity=50, seats=10,
                    starts_in=timedelta(days=7), duration=timedelta(hours=3)):
        start = utcnow() + starts_in
        event = Event(
            title=title,
            description=f"{title} description",
            start_date=start,
            end_date=start + duration,
            venue="Main Hall",
            price=price,
            capacity=capacity,
            status=status,
        )
        event.shows.append(Show(starts_at=start, ends_at=start + duration, total_seats=seats, booked_seats=0))
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event

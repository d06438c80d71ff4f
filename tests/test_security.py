"""Unit tests for passwords, tokens, identifiers and QR payloads."""

import json
import re
from datetime import timedelta
from types import SimpleNamespace

import pytest

from migrate_user_qr_codes import migrate_user_qr_codes
from ticketing.controller.helpers import utcnow
from ticketing.controller.qr_code_service import build_ticket_payload, parse_qr_data, qr_data_url
from ticketing.errors import APIError
from ticketing.models.user_model import User
from ticketing.security import (create_access_token, create_refresh_token, decode_token, generate_ticket_number,
                                generate_ticket_qr_value, generate_user_qr_code, hash_password, hash_token,
                                issue_one_time_token, verify_password)


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_garbage_hash_does_not_verify(self):
        assert not verify_password("secret123", "not-a-bcrypt-hash")
        assert not verify_password("", None)


class TestTokens:

    def test_access_token_claims(self):
        payload = decode_token(create_access_token(7, "staff"))
        assert payload["id"] == 7
        assert payload["role"] == "staff"
        assert payload["type"] == "access"

    def test_refresh_token_is_not_an_access_token(self):
        refresh = create_refresh_token(7)
        assert decode_token(refresh, refresh=True)["id"] == 7
        with pytest.raises(APIError) as exc:
            decode_token(refresh)
        assert exc.value.status_code == 401

    def test_access_token_is_not_a_refresh_token(self):
        with pytest.raises(APIError):
            decode_token(create_access_token(7, "customer"), refresh=True)

    def test_tampered_token(self):
        with pytest.raises(APIError):
            decode_token(create_access_token(1, "admin") + "x")

    def test_one_time_token_stores_digest(self):
        raw, digest, expires = issue_one_time_token(timedelta(minutes=10))
        assert len(raw) == 40
        assert digest == hash_token(raw)
        assert digest != raw
        assert utcnow() < expires <= utcnow() + timedelta(minutes=10)


class TestIdentifiers:

    def test_ticket_number_format(self):
        assert re.fullmatch(r"TIX-\d{6}-[0-9A-F]{6}", generate_ticket_number())

    def test_user_qr_code_format(self):
        assert re.fullmatch(r"USER-[0-9a-f]{20}", generate_user_qr_code())

    def test_ticket_qr_values_are_unique(self):
        first = generate_ticket_qr_value("TIX-000001-ABCDEF", 1)
        second = generate_ticket_qr_value("TIX-000001-ABCDEF", 1)
        assert len(first) == 64
        assert first != second


class TestQrPayload:

    def test_payload_round_trips_through_parser(self):
        ticket = SimpleNamespace(id=12, ticket_number="TIX-123456-ABCDEF", qr_code="abc123")
        payload = build_ticket_payload(ticket)
        assert set(json.loads(payload)) == {"ticketId", "ticketNumber", "qrCodeValue", "timestamp"}
        assert parse_qr_data(payload) == (12, "abc123")

    def test_bare_value(self):
        assert parse_qr_data("  abc123 ") == (None, "abc123")
        assert parse_qr_data("12345") == (None, "12345")

    def test_non_numeric_ticket_id(self):
        assert parse_qr_data(json.dumps({"ticketId": "x", "qrCodeValue": "abc"})) == (None, "abc")

    def test_data_url(self):
        assert qr_data_url("hello").startswith("data:image/png;base64,")


class TestUserQrMigration:

    def test_only_missing_codes_are_assigned(self, db, make_user):
        keep = make_user()
        missing = make_user()
        blank = make_user()
        original = keep.qr_code
        missing.qr_code = None
        blank.qr_code = ""
        db.commit()

        summary = migrate_user_qr_codes(db)

        assert summary == {"total_users": 3, "updated": 2}
        assert db.get(User, keep.id).qr_code == original
        assert db.get(User, missing.id).qr_code.startswith("USER-")
        assert db.get(User, blank.id).qr_code.startswith("USER-")

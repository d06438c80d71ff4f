"""Rate limiting on the auth endpoints."""

from ticketing import constant_file

from conftest import PASSWORD


def _login(client, email, password):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestLoginLimiter:

    def test_sixth_attempt_is_rejected(self, client, customer):
        for _ in range(5):
            assert _login(client, customer.email, "wrong-password").status_code == 401

        response = _login(client, customer.email, PASSWORD)
        assert response.status_code == 429
        assert response.json()["success"] is False
        assert "login attempts" in response.json()["message"]

    def test_disabled_limiter_lets_requests_through(self, client, customer, monkeypatch):
        monkeypatch.setattr(constant_file, "rate_limit_enabled", False)
        for _ in range(7):
            _login(client, customer.email, "wrong-password")
        assert _login(client, customer.email, PASSWORD).status_code == 200


class TestSensitiveLimiter:

    def test_forgot_password_is_limited(self, client, customer, outbox):
        for _ in range(3):
            client.post("/api/v1/auth/forgotpassword", json={"email": customer.email})
        response = client.post("/api/v1/auth/forgotpassword", json={"email": customer.email})
        assert response.status_code == 429

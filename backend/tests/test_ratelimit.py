"""Tests for per-route rate limiting."""

import pytest
from fastapi.testclient import TestClient

from caixa.database import get_db
from caixa.main import create_app
from caixa.ratelimit import RateLimiter

PASSWORD = "secret1"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def limited_client(test_settings, db_session):
    """Client for an app with small limits on auth and deletes."""
    config = test_settings.model_copy(update={
        "rate_limit_enabled": True,
        "rate_limit_auth": 5,
        "rate_limit_strict": 2,
    })
    app = create_app(config, create_schema=False)
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client


class TestRateLimiter:
    """Test the sliding window counter."""

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(60, clock=FakeClock())
        assert [limiter.hit("k", 3) for _ in range(3)] == [None, None, None]
        assert limiter.hit("k", 3) == 60

    def test_keys_are_independent(self):
        limiter = RateLimiter(60, clock=FakeClock())
        assert limiter.hit("a", 1) is None
        assert limiter.hit("b", 1) is None
        assert limiter.hit("a", 1) is not None

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock)
        limiter.hit("k", 2)
        clock.now += 30
        limiter.hit("k", 2)

        clock.now += 20
        assert limiter.hit("k", 2) == 10

        clock.now += 11
        assert limiter.hit("k", 2) is None

    def test_idle_keys_are_swept(self):
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock)
        limiter.hit("old", 5)
        clock.now += 120
        limiter.hit("new", 5)
        assert set(limiter._hits) == {"new"}


class TestRateLimitedRoutes:
    """Test limits applied to the API."""

    def test_sixth_login_in_a_minute_is_rejected(self, limited_client):
        """Register counts too, so the sixth auth request is refused."""
        response = limited_client.post("/api/auth/register", json={
            "name": "Ana", "email": "ana@example.com", "password": PASSWORD,
        })
        assert response.status_code == 201

        credentials = {"email": "ana@example.com", "password": PASSWORD}
        for _ in range(4):
            assert limited_client.post("/api/auth/login", json=credentials).status_code == 200

        response = limited_client.post("/api/auth/login", json=credentials)
        assert response.status_code == 429
        assert response.json() == {
            "error": "Muitas tentativas de autenticação. Tente novamente em alguns minutos.",
            "code": "RATE_LIMITED",
        }
        assert int(response.headers["Retry-After"]) > 0

    def test_failed_logins_count(self, limited_client):
        credentials = {"email": "nobody@example.com", "password": "wrong-password"}
        statuses = [limited_client.post("/api/auth/login", json=credentials).status_code for _ in range(6)]
        assert statuses == [401] * 5 + [429]

    def test_deletes_are_limited_per_user(self, limited_client):
        def register(email):
            body = limited_client.post("/api/auth/register", json={
                "name": "User", "email": email, "password": PASSWORD,
            }).json()
            return {"Authorization": f"Bearer {body['token']}"}

        alice = register("alice@example.com")
        bob = register("bob@example.com")

        alice_ids = [
            limited_client.post("/api/companies", json={"name": f"Alice {i}"}, headers=alice).json()["id"]
            for i in range(3)
        ]
        bob_id = limited_client.post("/api/companies", json={"name": "Bob"}, headers=bob).json()["id"]

        statuses = [limited_client.delete(f"/api/companies/{cid}", headers=alice).status_code for cid in alice_ids]
        assert statuses == [200, 200, 429]
        assert limited_client.delete(f"/api/companies/{bob_id}", headers=bob).status_code == 200

    def test_limit_needs_authentication_first(self, limited_client):
        assert limited_client.delete("/api/companies/abc").status_code == 401

    def test_disabled_by_settings(self, client, register_user):
        """The default test settings switch limiting off."""
        register_user("ana@example.com")
        credentials = {"email": "ana@example.com", "password": PASSWORD}
        statuses = {client.post("/api/auth/login", json=credentials).status_code for _ in range(25)}
        assert statuses == {200}

"""Sign-in, sign-out, session timeout and lockout tests."""

from datetime import timedelta

from teapot.models import SecurityEvent, SessionToken
from teapot.services import login_throttle_service, session_service
from teapot.time_utils import utcnow

from conftest import PASSWORD, auth_headers


class TestLogin:

    def test_login_returns_role_and_landing_screen(self, client, seed):
        resp = client.post("/api/auth/login", json={"username": "stock_clerk", "password": PASSWORD})

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["token"]
        assert data["role"] == "inventory"
        assert data["landing_screen"] == "inventory"
        assert data["permissions"] == ["ADJUST_INVENTORY", "VIEW_INVENTORY"]

    def test_login_by_email(self, client, seed):
        resp = client.post("/api/auth/login", json={"email": "admin_user@teapot.test", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.get_json()["landing_screen"] == "dashboard"

    def test_customer_lands_on_purchases(self, client, seed):
        resp = client.post("/api/auth/login", json={"username": "counter_staff", "password": PASSWORD})
        assert resp.get_json()["landing_screen"] == "purchases"

    def test_wrong_password(self, client, seed):
        resp = client.post("/api/auth/login", json={"username": "stock_clerk", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_missing_fields(self, client, seed):
        resp = client.post("/api/auth/login", json={"username": "stock_clerk"})
        assert resp.status_code == 400

    def test_inactive_user_cannot_login(self, client, db_session, seed):
        seed["inventory"].is_active = False
        db_session.commit()

        resp = client.post("/api/auth/login", json={"username": "stock_clerk", "password": PASSWORD})
        assert resp.status_code == 401

    def test_lockout_after_repeated_failures(self, client, seed):
        for _ in range(login_throttle_service.MAX_FAILED_ATTEMPTS):
            client.post("/api/auth/login", json={"username": "stock_clerk", "password": "wrong"})

        resp = client.post("/api/auth/login", json={"username": "stock_clerk", "password": PASSWORD})
        assert resp.status_code == 429
        assert resp.get_json()["locked"] is True

        status = client.get("/api/auth/lockout-status/stock_clerk").get_json()
        assert status["locked"] is True


class TestSession:

    def test_me(self, client, admin_headers):
        resp = client.get("/api/auth/me", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["user"]["username"] == "admin_user"
        assert "MANAGE_USERS" in data["permissions"]

    def test_logout_revokes_token(self, client, admin_headers):
        resp = client.post("/api/auth/logout", headers=admin_headers)
        assert resp.status_code == 200

        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401
        assert client.post("/api/auth/logout", headers=admin_headers).status_code == 401

    def test_logout_without_token(self, client):
        assert client.post("/api/auth/logout").status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/me", headers=auth_headers("nope"))
        assert resp.status_code == 401


class TestSessionTimeouts:

    def _session_for(self, db_session, user):
        return db_session.query(SessionToken).filter_by(user_id=user.id).one()

    def test_idle_session_is_revoked(self, client, db_session, admin_headers, seed):
        session = self._session_for(db_session, seed["admin"])
        session.last_used_at = utcnow() - session_service.SESSION_IDLE_TIMEOUT - timedelta(minutes=1)
        db_session.commit()

        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401

        db_session.refresh(session)
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_recent_activity_keeps_session_alive(self, client, db_session, admin_headers, seed):
        session = self._session_for(db_session, seed["admin"])
        session.last_used_at = utcnow() - session_service.SESSION_IDLE_TIMEOUT + timedelta(minutes=5)
        db_session.commit()

        assert client.get("/api/auth/me", headers=admin_headers).status_code == 200

    def test_expired_session_is_rejected(self, client, db_session, admin_headers, seed):
        session = self._session_for(db_session, seed["admin"])
        session.created_at = utcnow() - session_service.SESSION_ABSOLUTE_TIMEOUT - timedelta(minutes=1)
        session.expires_at = utcnow() - timedelta(minutes=1)
        session.last_used_at = utcnow()
        db_session.commit()

        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401

    def test_new_session_lasts_24_hours(self, client, db_session, admin_headers, seed):
        session = self._session_for(db_session, seed["admin"])
        assert session.expires_at - session.created_at == session_service.SESSION_ABSOLUTE_TIMEOUT


class TestLockoutExpiry:

    def _fail(self, client, times):
        for _ in range(times):
            client.post("/api/auth/login", json={"username": "stock_clerk", "password": "wrong"})

    def _backdate_failures(self, db_session, delta):
        for event in db_session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").all():
            event.occurred_at = event.occurred_at - delta
        db_session.commit()

    def test_still_locked_inside_duration(self, client, db_session, seed):
        self._fail(client, login_throttle_service.MAX_FAILED_ATTEMPTS)
        self._backdate_failures(db_session, timedelta(minutes=14))

        locked, seconds_left = login_throttle_service.is_account_locked("stock_clerk")
        assert locked is True
        assert 0 < seconds_left <= 60

    def test_unlocks_after_window(self, client, db_session, seed):
        self._fail(client, login_throttle_service.MAX_FAILED_ATTEMPTS)
        self._backdate_failures(db_session, login_throttle_service.LOCKOUT_WINDOW + timedelta(minutes=1))

        resp = client.post("/api/auth/login", json={"username": "stock_clerk", "password": PASSWORD})
        assert resp.status_code == 200

    def test_unlocks_when_duration_ends_before_window(self, client, db_session, seed, monkeypatch):
        monkeypatch.setattr(login_throttle_service, "LOCKOUT_DURATION", timedelta(minutes=5))
        self._fail(client, login_throttle_service.MAX_FAILED_ATTEMPTS)
        self._backdate_failures(db_session, timedelta(minutes=10))

        assert login_throttle_service.is_account_locked("stock_clerk") == (False, None)
        status = client.get("/api/auth/lockout-status/stock_clerk").get_json()
        assert status["locked"] is False
        assert status["failed_attempts"] == login_throttle_service.MAX_FAILED_ATTEMPTS

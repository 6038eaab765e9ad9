# Overview: Pytest coverage for sign-in, sign-out and the request gate.

"""
Login and request gate tests.

Verifies:
- A REP may only sign in to the territory of their bound lorry
- ADMIN and VIEWER may pick any existing territory
- Bad input is 400; bad credentials and denied territories share one 401
- The gate redirects /, /login and /admin/... by session state
- Every request with a valid session re-issues the cookie
"""

from datetime import timedelta

import pytest

from shopmapper.extensions import db
from shopmapper.models import SecurityEvent, User
from shopmapper.services import auth_service
from shopmapper.services.token_service import SessionPayload, SessionUser, decode_session, encode_session
from shopmapper.time_utils import utcnow

from conftest import login, territory_id


def session_cookie(client):
    cookie = client.get_cookie("session")
    return cookie.value if cookie else None


class TestLoginStateMachine:
    def test_rep_home_territory_succeeds(self, app, client, seed):
        resp = login(client, "rep5", territory_id(seed, "Galle"))
        assert resp.status_code == 200

        body = resp.get_json()
        assert body["redirect"] == "/"
        assert body["session"]["territory_id"] == territory_id(seed, "Galle")
        assert body["session"]["user"]["lorry_id"] == seed["lorries"]["Lorry 5"].id

        payload = decode_session(session_cookie(client))
        assert payload.user.username == "rep5"
        assert payload.territory_id == territory_id(seed, "Galle")

    def test_rep_foreign_territory_denied(self, client, seed):
        resp = login(client, "rep5", territory_id(seed, "Habaraduwa"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials or territory"
        assert session_cookie(client) is None

    def test_rep_without_lorry_denied(self, client, seed):
        rep = db.session.get(User, seed["users"]["rep2"].id)
        rep.lorry_id = None
        db.session.commit()

        resp = login(client, "rep2", territory_id(seed, "Habaraduwa"))
        assert resp.status_code == 401

    @pytest.mark.parametrize("username", ["admin", "viewer"])
    @pytest.mark.parametrize("territory", ["Habaraduwa", "Galle"])
    def test_admin_and_viewer_any_territory(self, client, seed, username, territory):
        resp = login(client, username, territory_id(seed, territory))
        assert resp.status_code == 200

    def test_unknown_territory_denied(self, client, seed):
        resp = login(client, "admin", 999999)
        assert resp.status_code == 401

    def test_wrong_password_same_message(self, client, seed):
        resp = login(client, "admin", territory_id(seed, "Habaraduwa"), password="wrong-password")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials or territory"

    def test_unknown_user_same_message(self, client, seed):
        resp = login(client, "ghost", territory_id(seed, "Habaraduwa"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials or territory"

    @pytest.mark.parametrize(
        "form",
        [
            {"password": "password123", "territoryId": "1"},
            {"username": "admin", "territoryId": "1"},
            {"username": "admin", "password": "password123"},
            {"username": "admin", "password": "password123", "territoryId": "abc"},
            {"username": "admin", "password": "password123", "territoryId": "1.5"},
        ],
    )
    def test_invalid_input_is_400(self, client, seed, form):
        resp = client.post("/login", data=form)
        assert resp.status_code == 400
        assert session_cookie(client) is None

    def test_json_body_accepted(self, client, seed):
        resp = client.post("/login", json={
            "username": "viewer",
            "password": "password123",
            "territoryId": territory_id(seed, "Galle"),
        })
        assert resp.status_code == 200

    def test_login_records_last_login(self, client, seed):
        user_id = seed["users"]["viewer"].id
        login(client, "viewer", territory_id(seed, "Habaraduwa"))
        db.session.expire_all()
        assert db.session.get(User, user_id).last_login_at is not None

    def test_login_outcomes_are_audited(self, client, seed):
        login(client, "rep5", territory_id(seed, "Habaraduwa"))
        login(client, "rep5", territory_id(seed, "Galle"))

        denied = db.session.query(SecurityEvent).filter_by(event_type="LOGIN_DENIED").one()
        assert denied.action == auth_service.TERRITORY_DENIED
        succeeded = db.session.query(SecurityEvent).filter_by(event_type="LOGIN_SUCCEEDED").one()
        assert succeeded.territory_id == territory_id(seed, "Galle")

    def test_cookie_flags(self, client, seed):
        resp = login(client, "admin", territory_id(seed, "Habaraduwa"))
        header = resp.headers.get("Set-Cookie")
        assert header.startswith("session=")
        assert "HttpOnly" in header
        assert "SameSite=Lax" in header
        assert "Path=/" in header


class TestLoginService:
    def test_territory_allowed_rules(self, app, seed):
        rep = db.session.get(User, seed["users"]["rep1"].id)
        admin = db.session.get(User, seed["users"]["admin"].id)
        assert auth_service.territory_allowed(rep, territory_id(seed, "Habaraduwa"))
        assert not auth_service.territory_allowed(rep, territory_id(seed, "Galle"))
        assert auth_service.territory_allowed(admin, territory_id(seed, "Galle"))
        assert not auth_service.territory_allowed(admin, 999999)

    def test_password_rules(self, app):
        with pytest.raises(auth_service.PasswordValidationError):
            auth_service.hash_password("short")
        hashed = auth_service.hash_password("long-enough")
        assert auth_service.verify_password("long-enough", hashed)
        assert not auth_service.verify_password("long-enough!", hashed)
        assert not auth_service.verify_password("anything", "not-a-bcrypt-hash")


class TestLogout:
    def test_logout_clears_cookie(self, admin_client):
        assert session_cookie(admin_client) is not None
        resp = admin_client.post("/logout")
        assert resp.status_code == 200
        assert resp.get_json()["redirect"] == "/login"
        assert session_cookie(admin_client) is None
        assert admin_client.get("/api/me").status_code == 401


class TestRequestGate:
    def test_root_without_session_redirects_to_login(self, client, seed):
        resp = client.get("/")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/login")

    def test_login_with_session_redirects_home(self, admin_client):
        resp = admin_client.get("/login")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/")

    def test_login_page_lists_territories(self, client, seed):
        resp = client.get("/login")
        assert resp.status_code == 200
        names = [t["name"] for t in resp.get_json()["territories"]]
        assert names == ["Galle", "Habaraduwa"]

    @pytest.mark.parametrize("path", ["/admin/users", "/admin/logistics", "/admin/security-events"])
    def test_non_admin_redirected_from_admin(self, viewer_client, rep_client, path):
        for client in (viewer_client, rep_client):
            resp = client.get(path)
            assert resp.status_code == 302
            assert resp.headers["Location"].endswith("/")

    def test_anonymous_redirected_from_admin(self, client, seed):
        resp = client.get("/admin/users")
        assert resp.status_code == 302

    def test_admin_reaches_admin_pages(self, admin_client):
        users = admin_client.get("/admin/users")
        assert users.status_code == 200
        body = users.get_json()
        assert {"admin", "viewer", "rep1"} <= {u["username"] for u in body["users"]}
        rep1 = next(u for u in body["users"] if u["username"] == "rep1")
        assert rep1["lorry"]["name"] == "Lorry 1"

        logistics = admin_client.get("/admin/logistics")
        assert logistics.status_code == 200
        lorries = logistics.get_json()["lorries"]
        assert all(lorry["route_count"] == 1 for lorry in lorries)
        assert {lorry["territory"]["name"] for lorry in lorries} == {"Habaraduwa", "Galle"}

    def test_expired_cookie_is_no_session(self, app, client, seed):
        with app.test_request_context():
            expired = SessionPayload(
                user=SessionUser(id=1, username="admin", role="ADMIN", lorry_id=None),
                territory_id=territory_id(seed, "Habaraduwa"),
                expires=utcnow().replace(microsecond=0) - timedelta(seconds=5),
            )
            token = encode_session(expired)
        client.set_cookie("session", token)
        resp = client.get("/")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/login")


class TestSlidingRefresh:
    def test_every_request_reissues_cookie(self, admin_client):
        first = decode_session(session_cookie(admin_client))
        resp = admin_client.get("/health")
        assert "session=" in resp.headers.get("Set-Cookie", "")

        second = decode_session(session_cookie(admin_client))
        assert second.expires >= first.expires
        assert second.user == first.user
        assert second.territory_id == first.territory_id

    def test_no_cookie_without_session(self, client, seed):
        resp = client.get("/health")
        assert "Set-Cookie" not in resp.headers

    def test_refresh_does_not_override_logout(self, admin_client):
        resp = admin_client.post("/logout")
        cookies = resp.headers.getlist("Set-Cookie")
        assert len(cookies) == 1
        assert session_cookie(admin_client) is None

    def test_refresh_resumes_after_a_cookie_writing_request(self, app, admin_client, seed):
        other = app.test_client()
        assert login(other, "viewer", territory_id(seed, "Habaraduwa")).status_code == 200
        other.post("/logout")

        for _ in range(2):
            resp = admin_client.get("/api/me")
            assert resp.status_code == 200
            assert "session=" in resp.headers.get("Set-Cookie", "")

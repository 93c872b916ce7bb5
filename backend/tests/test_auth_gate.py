"""
Request authentication: sessions, API keys and the static key.
"""

from datetime import timedelta

from conftest import STATIC_API_KEY, USER_PASSWORD, bearer
from clinicacrm.core.security import create_access_token
from clinicacrm.models.base import utcnow
from clinicacrm.services.api_keys import generate_secret


class TestMissingCredentials:
    def test_no_credentials(self, client):
        response = client.get("/api/cases")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "unauthorized"
        assert "X-API-Key" in body["message"]
        assert response.headers["www-authenticate"] == "Bearer"

    def test_user_agent_is_not_a_credential(self, client):
        response = client.get(
            "/api/cases",
            headers={"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0"},
        )
        assert response.status_code == 401


class TestApiKeys:
    def test_valid_key(self, client, make_api_key):
        secret, _ = make_api_key(permissions=["read"])
        response = client.get("/api/cases", headers={"X-API-Key": secret})
        assert response.status_code == 200

    def test_malformed_key(self, client, db):
        response = client.get("/api/cases", headers={"X-API-Key": "not a key"})
        assert response.status_code == 401

    def test_unknown_key(self, client, db):
        response = client.get("/api/cases", headers={"X-API-Key": generate_secret()})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or missing API key"

    def test_missing_permission(self, client, make_api_key):
        secret, _ = make_api_key(permissions=["read"])
        response = client.post(
            "/api/cases",
            headers={"X-API-Key": secret},
            json={"first_name": "Anna", "last_name": "Neri", "channel": "WEB",
                  "origin": "Form", "clinic": "Milano"},
        )
        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "forbidden"
        assert body["details"] == {"reason": "insufficient"}

    def test_admin_key_can_write(self, client, make_api_key):
        secret, _ = make_api_key(permissions=["admin"])
        response = client.post(
            "/api/cases",
            headers={"X-API-Key": secret},
            json={"first_name": "Anna", "last_name": "Neri", "channel": "WEB",
                  "origin": "Form", "clinic": "Milano"},
        )
        assert response.status_code == 201

    def test_inactive_key(self, client, db, make_api_key):
        secret, record = make_api_key()
        record.is_active = False
        db.commit()
        response = client.get("/api/cases", headers={"X-API-Key": secret})
        assert response.status_code == 403
        assert response.json()["details"] == {"reason": "inactive"}

    def test_expired_key(self, client, make_api_key):
        secret, _ = make_api_key(expires_in_days=1, now=utcnow() - timedelta(days=10))
        response = client.get("/api/cases", headers={"X-API-Key": secret})
        assert response.status_code == 403
        assert response.json()["details"] == {"reason": "expired"}

    def test_usage_recorded(self, client, db, make_api_key):
        secret, record = make_api_key()
        client.get("/api/cases", headers={"X-API-Key": secret})
        client.get("/api/cases", headers={"X-API-Key": secret})
        db.refresh(record)
        assert record.usage_count == 2
        assert record.last_used is not None

    def test_rejected_key_usage_not_recorded(self, client, db, make_api_key):
        secret, record = make_api_key(permissions=["read"])
        client.delete("/api/cases?id=1", headers={"X-API-Key": secret})
        db.refresh(record)
        assert record.usage_count == 0

    def test_api_key_is_not_a_bearer_token(self, client, make_api_key):
        secret, _ = make_api_key()
        response = client.get("/api/cases", headers={"Authorization": f"Bearer {secret}"})
        assert response.status_code == 401

    def test_static_key(self, client, db):
        response = client.get("/api/cases", headers={"X-API-Key": STATIC_API_KEY})
        assert response.status_code == 200


class TestSessions:
    def test_bearer_session(self, client, auth_headers):
        response = client.get("/api/cases", headers=auth_headers)
        assert response.status_code == 200

    def test_invalid_token(self, client, db):
        response = client.get("/api/cases", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, user):
        token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-5))
        response = client.get("/api/cases", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_inactive_user(self, client, db, user):
        user.is_active = False
        db.commit()
        response = client.get("/api/cases", headers=bearer(user))
        assert response.status_code == 403

    def test_key_management_requires_session(self, client, make_api_key):
        secret, _ = make_api_key(permissions=["admin"])
        response = client.get("/api/api-keys", headers={"X-API-Key": secret})
        assert response.status_code == 401


class TestLogin:
    def test_login_and_me(self, client, user):
        response = client.post(
            "/api/auth/login",
            json={"email": "giulia.bianchi@clinic.it", "password": USER_PASSWORD},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["full_name"] == "Giulia Bianchi"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "giulia.bianchi@clinic.it"
        assert me.json()["last_login"] is not None

    def test_wrong_password(self, client, user):
        response = client.post(
            "/api/auth/login",
            json={"email": "giulia.bianchi@clinic.it", "password": "wrong"},
        )
        assert response.status_code == 401

    def test_inactive_user_cannot_login(self, client, db, user):
        user.is_active = False
        db.commit()
        response = client.post(
            "/api/auth/login",
            json={"email": "giulia.bianchi@clinic.it", "password": USER_PASSWORD},
        )
        assert response.status_code == 403


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "http_error"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

"""
API key management endpoint tests.
"""

from clinicacrm.models import ApiKey
from clinicacrm.services.api_keys import display_preview, hash_secret

from conftest import bearer


class TestCreate:
    def test_create_returns_plaintext_once(self, client, db, auth_headers):
        response = client.post("/api/api-keys", json={"name": "Centralino"}, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["permissions"] == ["read", "write"]
        assert body["expires_at"] is None
        assert "will not be shown again" in body["message"]

        stored = db.query(ApiKey).one()
        assert stored.key_hash == hash_secret(body["key"])
        assert stored.key_hash != body["key"]

        listing = client.get("/api/api-keys", headers=auth_headers).json()
        assert "key" not in listing[0]

    def test_new_key_authenticates(self, client, make_case, auth_headers):
        make_case()
        secret = client.post("/api/api-keys", json={"name": "Centralino"}, headers=auth_headers).json()["key"]
        response = client.get("/api/cases", headers={"X-API-Key": secret})
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_camel_case_fields(self, client, auth_headers):
        response = client.post(
            "/api/api-keys",
            json={"name": "Dialer", "expiresInDays": 30, "keyType": "prefixed", "permissions": ["read"]},
            headers=auth_headers,
        )
        body = response.json()
        assert response.status_code == 201
        assert body["key"].startswith("clinicacrm_")
        assert body["expires_at"] is not None
        assert body["permissions"] == ["read"]

    def test_name_required(self, client, auth_headers):
        for payload in ({}, {"name": "   "}):
            response = client.post("/api/api-keys", json=payload, headers=auth_headers)
            assert response.status_code == 400
            assert response.json()["message"] == "API key name is required"

    def test_unknown_permission(self, client, auth_headers):
        response = client.post(
            "/api/api-keys",
            json={"name": "Bad", "permissions": ["read", "superuser"]},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["details"]["allowed"] == ["read", "write", "admin"]

    def test_non_positive_expiry(self, client, auth_headers):
        response = client.post("/api/api-keys", json={"name": "Bad", "expiresInDays": 0}, headers=auth_headers)
        assert response.status_code == 400

    def test_huge_expiry(self, client, db, auth_headers):
        response = client.post(
            "/api/api-keys",
            json={"name": "Forever", "expiresInDays": 10_000_000},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert db.query(ApiKey).count() == 0

    def test_huge_expiry_on_update(self, client, make_api_key, auth_headers):
        _, record = make_api_key()
        response = client.put(
            "/api/api-keys",
            json={"id": str(record.id), "expiresInDays": 10_000_000},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_requires_session(self, client, db):
        response = client.post("/api/api-keys", json={"name": "Anon"})
        assert response.status_code == 401


class TestList:
    def test_own_keys_only(self, client, make_api_key, other_user, auth_headers):
        _, mine = make_api_key(name="Mia")
        make_api_key(name="Altrui", owner=other_user)

        response = client.get("/api/api-keys", headers=auth_headers)
        body = response.json()
        assert [k["name"] for k in body] == ["Mia"]
        assert body[0]["key_preview"] == display_preview(mine.key_hash)
        assert body[0]["usage_count"] == 0


class TestUpdate:
    def test_deactivate(self, client, make_api_key, auth_headers):
        secret, record = make_api_key()
        response = client.put(
            "/api/api-keys",
            json={"id": str(record.id), "is_active": False},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["name"] == "Call center"

        denied = client.get("/api/cases", headers={"X-API-Key": secret})
        assert denied.status_code == 403

    def test_clear_expiry(self, client, make_api_key, auth_headers):
        _, record = make_api_key(expires_in_days=5)
        response = client.put(
            "/api/api-keys",
            json={"id": str(record.id), "expiresInDays": None},
            headers=auth_headers,
        )
        assert response.json()["expires_at"] is None

    def test_rename_keeps_expiry(self, client, make_api_key, auth_headers):
        _, record = make_api_key(expires_in_days=5)
        response = client.put(
            "/api/api-keys",
            json={"id": str(record.id), "name": "Rinominata"},
            headers=auth_headers,
        )
        assert response.json()["name"] == "Rinominata"
        assert response.json()["expires_at"] is not None

    def test_other_users_key(self, client, make_api_key, other_user):
        _, record = make_api_key()
        response = client.put(
            "/api/api-keys",
            json={"id": str(record.id), "name": "Presa"},
            headers=bearer(other_user),
        )
        assert response.status_code == 404


class TestDelete:
    def test_delete(self, client, db, make_api_key, auth_headers):
        secret, record = make_api_key()
        response = client.delete(f"/api/api-keys?id={record.id}", headers=auth_headers)

        assert response.status_code == 200
        assert db.query(ApiKey).count() == 0
        assert client.get("/api/cases", headers={"X-API-Key": secret}).status_code == 401

    def test_other_users_key(self, client, db, make_api_key, other_user):
        _, record = make_api_key()
        response = client.delete(f"/api/api-keys?id={record.id}", headers=bearer(other_user))
        assert response.status_code == 404
        assert db.query(ApiKey).count() == 1

    def test_id_required(self, client, auth_headers):
        response = client.delete("/api/api-keys", headers=auth_headers)
        assert response.status_code == 400

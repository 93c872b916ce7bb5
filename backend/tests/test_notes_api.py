"""
Case notes endpoint tests.
"""

from clinicacrm.models import Note

from conftest import STATIC_API_KEY, at, bearer


class TestCreateNote:
    def test_create(self, client, make_case, user, auth_headers):
        case = make_case()
        response = client.post(
            "/api/notes",
            json={"case_id": case.id, "content": "  Paziente richiamato  "},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["case_id"] == case.id
        assert body["user_id"] == str(user.id)
        assert body["content"] == "Paziente richiamato"
        assert body["profiles"]["full_name"] == "Giulia Bianchi"

    def test_api_key_acts_as_owner(self, client, make_case, make_api_key, user):
        case = make_case()
        secret, _ = make_api_key()
        response = client.post(
            "/api/notes",
            json={"case_id": case.id, "content": "Dal centralino"},
            headers={"X-API-Key": secret},
        )
        assert response.status_code == 201
        assert response.json()["user_id"] == str(user.id)

    def test_static_key_cannot_author(self, client, make_case):
        case = make_case()
        response = client.post(
            "/api/notes",
            json={"case_id": case.id, "content": "Anonima"},
            headers={"X-API-Key": STATIC_API_KEY},
        )
        assert response.status_code == 403

    def test_unknown_case(self, client, auth_headers):
        response = client.post("/api/notes", json={"case_id": 999, "content": "x"}, headers=auth_headers)
        assert response.status_code == 404

    def test_blank_content(self, client, make_case, auth_headers):
        case = make_case()
        response = client.post("/api/notes", json={"case_id": case.id, "content": "   "}, headers=auth_headers)
        assert response.status_code == 400


class TestListNotes:
    def test_newest_first(self, client, db, make_case, user, auth_headers):
        case = make_case()
        other = make_case()
        db.add_all([
            Note(case_id=case.id, user_id=user.id, content="prima", created_at=at(1)),
            Note(case_id=case.id, user_id=user.id, content="terza", created_at=at(3)),
            Note(case_id=case.id, user_id=user.id, content="seconda", created_at=at(2)),
            Note(case_id=other.id, user_id=user.id, content="altro caso", created_at=at(4)),
        ])
        db.commit()

        response = client.get("/api/notes", params={"case_id": case.id}, headers=auth_headers)
        assert response.status_code == 200
        assert [n["content"] for n in response.json()] == ["terza", "seconda", "prima"]

    def test_case_id_required(self, client, auth_headers):
        response = client.get("/api/notes", headers=auth_headers)
        assert response.status_code == 400


class TestAuthorOnly:
    def _note(self, db, case, author):
        note = Note(case_id=case.id, user_id=author.id, content="originale")
        db.add(note)
        db.commit()
        return note

    def test_author_can_edit(self, client, db, make_case, user, auth_headers):
        note = self._note(db, make_case(), user)
        response = client.put("/api/notes", json={"id": note.id, "content": "modificata"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["content"] == "modificata"

    def test_other_user_cannot_edit(self, client, db, make_case, user, other_user):
        note = self._note(db, make_case(), user)
        response = client.put(
            "/api/notes",
            json={"id": note.id, "content": "modificata"},
            headers=bearer(other_user),
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Note not found or access denied"

    def test_other_user_cannot_delete(self, client, db, make_case, user, other_user):
        note = self._note(db, make_case(), user)
        response = client.delete(f"/api/notes?id={note.id}", headers=bearer(other_user))
        assert response.status_code == 404
        assert db.query(Note).count() == 1

    def test_author_can_delete(self, client, db, make_case, user, auth_headers):
        note = self._note(db, make_case(), user)
        response = client.delete(f"/api/notes?id={note.id}", headers=auth_headers)
        assert response.status_code == 200
        assert db.query(Note).count() == 0

    def test_delete_requires_id(self, client, auth_headers):
        response = client.delete("/api/notes", headers=auth_headers)
        assert response.status_code == 400

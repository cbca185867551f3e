"""End-to-end tests for ``/api/v1/users``."""

from __future__ import annotations

from authcore.repositories.user import UserRepository
from sqlalchemy.exc import IntegrityError

from tests.factories.user import UserFactory

USERS = "/api/v1/users"
MISSING_ID = "00000000-0000-4000-8000-000000000000"


class TestReadUsers:
    def test_list_is_public(self, client):
        UserFactory.create_batch(3)

        resp = client.get(f"{USERS}?limit=2")

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert len(data["users"]) == 2
        assert data["total"] == 3
        assert data["hasMore"] is True
        assert all("password_hash" not in u for u in data["users"])

    def test_get_user(self, client):
        user = UserFactory(name="Ann")

        resp = client.get(f"{USERS}/{user.id}")

        assert resp.status_code == 200
        assert resp.get_json()["data"]["name"] == "Ann"

    def test_list_marks_editable_rows(self, client, bearer):
        owner = UserFactory()
        other = UserFactory()
        admin = UserFactory(role="admin")

        anonymous = client.get(USERS).get_json()["meta"]["editableIds"]
        as_owner = client.get(USERS, headers=bearer(owner)).get_json()["meta"]["editableIds"]
        as_admin = client.get(USERS, headers=bearer(admin)).get_json()["meta"]["editableIds"]

        assert anonymous == []
        assert as_owner == [owner.id]
        assert set(as_admin) == {owner.id, other.id, admin.id}

    def test_get_user_reports_can_modify(self, client, bearer):
        owner = UserFactory()
        stranger = UserFactory()
        url = f"{USERS}/{owner.id}"

        assert client.get(url).get_json()["meta"]["canModify"] is False
        assert client.get(url, headers=bearer(owner)).get_json()["meta"]["canModify"] is True
        assert client.get(url, headers=bearer(stranger)).get_json()["meta"]["canModify"] is False

    def test_get_missing_user(self, client):
        resp = client.get(f"{USERS}/{MISSING_ID}")

        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "user_not_found"

    def test_get_non_uuid(self, client):
        resp = client.get(f"{USERS}/42")

        assert resp.status_code == 400


class TestUpdateUser:
    def test_owner_updates_profile(self, client, bearer):
        user = UserFactory(name="Ann")

        resp = client.put(f"{USERS}/{user.id}", json={"name": "Annie"}, headers=bearer(user))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["name"] == "Annie"
        assert resp.get_json()["message"] == "User updated successfully"

    def test_other_user_forbidden(self, client, bearer):
        owner = UserFactory()
        intruder = UserFactory()

        resp = client.put(f"{USERS}/{owner.id}", json={"name": "Hacked"}, headers=bearer(intruder))

        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "not_owner"

    def test_admin_updates_other(self, client, bearer):
        owner = UserFactory()
        admin = UserFactory(role="admin")

        resp = client.put(f"{USERS}/{owner.id}", json={"name": "Renamed"}, headers=bearer(admin))

        assert resp.status_code == 200

    def test_email_taken(self, client, bearer):
        UserFactory(email="taken@x.com")
        user = UserFactory()

        resp = client.put(f"{USERS}/{user.id}", json={"email": "taken@x.com"}, headers=bearer(user))

        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "email_taken"

    def test_unrelated_constraint_violation_is_a_conflict(self, client, bearer, monkeypatch):
        user = UserFactory()

        def _boom(self, user_id, fields):
            raise IntegrityError("UPDATE users", {}, Exception("CHECK constraint failed: ck_users_role"))

        monkeypatch.setattr(UserRepository, "update_fields", _boom)

        resp = client.put(f"{USERS}/{user.id}", json={"name": "Annie"}, headers=bearer(user))

        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "conflict"

    def test_requires_token(self, client):
        user = UserFactory()

        resp = client.put(f"{USERS}/{user.id}", json={"name": "X"})

        assert resp.status_code == 401


class TestDeleteUser:
    def test_owner_deletes_then_token_is_dead(self, client, bearer):
        user = UserFactory()
        headers = bearer(user)

        resp = client.delete(f"{USERS}/{user.id}", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "User deleted successfully"

        me = client.get("/api/v1/auth/me", headers=headers)
        assert me.status_code == 401
        assert me.get_json()["error"]["code"] == "user_not_found"

    def test_other_user_forbidden(self, client, bearer):
        owner = UserFactory()
        intruder = UserFactory()

        resp = client.delete(f"{USERS}/{owner.id}", headers=bearer(intruder))

        assert resp.status_code == 403
        assert client.get(f"{USERS}/{owner.id}").status_code == 200

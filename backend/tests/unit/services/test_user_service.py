"""Unit tests for :mod:`authcore.services.users.service`."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from authcore.repositories.user import UserRepository
from authcore.services import ConflictError, ForbiddenError, NotFoundError, ValidationError
from authcore.services._shared.errors import Reason, StorageUnavailableError
from authcore.services._shared.policies import Role
from authcore.services.users.dto import UserListIn, UserUpdateIn
from authcore.services.users.service import UserService
from sqlalchemy.exc import IntegrityError, OperationalError

from tests.factories.user import STRONG_PASSWORD, UserFactory
from tests.helpers.auth import caller_for

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture()
def service(services):
    return services.users


class TestGetAndList:
    def test_get_user(self, service):
        user = UserFactory(name="Ann")

        out = service.get_user(user.id)

        assert out.id == user.id
        assert out.name == "Ann"

    def test_get_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.get_user(MISSING_ID)

    def test_get_rejects_non_uuid(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.get_user("42")

        assert "id" in exc_info.value.errors

    def test_list_pages_in_creation_order(self, service):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        users = [UserFactory(created_at=base + timedelta(minutes=i)) for i in range(3)]

        page = service.list_users(UserListIn(limit=2, offset=0))

        assert [u.id for u in page.items] == [u.id for u in users[:2]]
        assert page.total == 3
        assert page.has_more is True

        last = service.list_users(UserListIn(limit=2, offset=2))
        assert [u.id for u in last.items] == [users[2].id]
        assert last.has_more is False

    def test_list_clamps_paging(self, service):
        page = service.list_users(UserListIn(limit=1000, offset=-5))

        assert page.limit == 100
        assert page.offset == 0

        page = service.list_users(UserListIn(limit=0))
        assert page.limit == 1


class TestCanModify:
    def test_anonymous_caller(self, service):
        assert service.can_modify(None, UserFactory().id) is False

    def test_owner_and_stranger(self, service):
        owner = UserFactory()
        stranger = UserFactory()

        assert service.can_modify(caller_for(owner), owner.id) is True
        assert service.can_modify(caller_for(stranger), owner.id) is False

    def test_admin_follows_override_setting(self, service, services):
        admin = UserFactory(role="admin")
        target = UserFactory()
        strict = UserService(hasher=services.hasher, role_override=False)

        assert service.can_modify(caller_for(admin), target.id) is True
        assert strict.can_modify(caller_for(admin), target.id) is False


class TestUpdate:
    def test_owner_updates_own_name(self, service):
        user = UserFactory(name="Ann")

        out = service.update_user(caller_for(user), user.id, UserUpdateIn(name="Annie"))

        assert out.name == "Annie"

    def test_password_update_is_hashed(self, service, services, session):
        user = UserFactory()

        service.update_user(caller_for(user), user.id, UserUpdateIn(password=STRONG_PASSWORD))

        creds = UserRepository(session=session).find_credentials_by_email(user.email)
        assert services.hasher.verify(STRONG_PASSWORD, creds.password_hash)

    def test_other_user_forbidden(self, service):
        owner = UserFactory()
        intruder = UserFactory()

        with pytest.raises(ForbiddenError) as exc_info:
            service.update_user(caller_for(intruder), owner.id, UserUpdateIn(name="Hacked"))

        assert exc_info.value.reason is Reason.NOT_OWNER
        assert service.get_user(owner.id).name != "Hacked"

    def test_admin_may_update_others(self, service):
        owner = UserFactory()
        admin = UserFactory(role="admin")

        out = service.update_user(caller_for(admin), owner.id, UserUpdateIn(name="Renamed"))

        assert out.name == "Renamed"

    def test_admin_override_can_be_disabled(self, services):
        strict = UserService(hasher=services.hasher, role_override=False)
        owner = UserFactory()
        admin = UserFactory(role="admin")

        with pytest.raises(ForbiddenError):
            strict.update_user(caller_for(admin), owner.id, UserUpdateIn(name="Renamed"))

    def test_role_is_rechecked_on_every_call(self, service, session):
        owner = UserFactory()
        admin = UserFactory(role="admin")
        caller = caller_for(admin)
        service.update_user(caller, owner.id, UserUpdateIn(name="First"))

        UserRepository(session=session).set_role(admin.id, "user")
        session.commit()
        demoted = caller_for(UserRepository(session=session).get(admin.id))

        with pytest.raises(ForbiddenError):
            service.update_user(demoted, owner.id, UserUpdateIn(name="Second"))

    def test_missing_target(self, service):
        admin = UserFactory(role="admin")

        with pytest.raises(NotFoundError):
            service.update_user(caller_for(admin), MISSING_ID, UserUpdateIn(name="X"))

    def test_email_taken(self, service):
        UserFactory(email="taken@x.com")
        user = UserFactory()

        with pytest.raises(ConflictError) as exc_info:
            service.update_user(caller_for(user), user.id, UserUpdateIn(email="TAKEN@x.com"))

        assert exc_info.value.reason is Reason.EMAIL_TAKEN

    def test_same_email_in_other_case_is_not_a_conflict(self, service):
        user = UserFactory(email="me@x.com")

        out = service.update_user(caller_for(user), user.id, UserUpdateIn(email="ME@x.com"))

        assert out.email == "me@x.com"

    def test_no_fields(self, service):
        user = UserFactory()

        with pytest.raises(ValidationError) as exc_info:
            service.update_user(caller_for(user), user.id, UserUpdateIn())

        assert exc_info.value.message == "No fields to update"

    def test_invalid_values(self, service):
        user = UserFactory()

        with pytest.raises(ValidationError) as exc_info:
            service.update_user(caller_for(user), user.id, UserUpdateIn(email="nope", password="short"))

        assert set(exc_info.value.errors) == {"email", "password"}


class TestDelete:
    def test_owner_deletes_self(self, service):
        user = UserFactory()

        service.delete_user(caller_for(user), user.id)

        with pytest.raises(NotFoundError):
            service.get_user(user.id)

    def test_other_user_forbidden(self, service):
        owner = UserFactory()
        intruder = UserFactory()

        with pytest.raises(ForbiddenError):
            service.delete_user(caller_for(intruder), owner.id)

        assert service.get_user(owner.id).id == owner.id

    def test_admin_deletes_missing_user(self, service):
        admin = UserFactory(role="admin")

        with pytest.raises(NotFoundError):
            service.delete_user(caller_for(admin), MISSING_ID)


class TestPromote:
    def test_promote_sets_admin(self, service):
        user = UserFactory(email="ann@x.com")

        out = service.promote("ANN@x.com")

        assert out.id == user.id
        assert out.role is Role.ADMIN

    def test_promote_unknown_email(self, service):
        with pytest.raises(NotFoundError):
            service.promote("ghost@x.com")


class TestStorageFailure:
    def test_driver_error_becomes_storage_unavailable(self, service, monkeypatch):
        def _boom(self, user_id):
            raise OperationalError("SELECT", {}, Exception("could not connect to server"))

        monkeypatch.setattr(UserRepository, "find_by_id", _boom)

        with pytest.raises(StorageUnavailableError) as exc_info:
            service.get_user(MISSING_ID)

        assert exc_info.value.message == "Service temporarily unavailable"

    def test_unrelated_constraint_violation_is_not_retryable(self, service, monkeypatch):
        user = UserFactory()

        def _boom(self, user_id, fields):
            raise IntegrityError("UPDATE users", {}, Exception("CHECK constraint failed: ck_users_role"))

        monkeypatch.setattr(UserRepository, "update_fields", _boom)

        with pytest.raises(IntegrityError):
            service.update_user(caller_for(user), user.id, UserUpdateIn(name="Annie"))

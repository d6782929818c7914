"""Tests for the service layer."""

import pytest

from app.config import Settings
from core.exceptions import BadRequestError, ConflictError
from core.security import verify_token
from services.auth_service import AuthService
from services.device_service import DeviceService
from services.user_service import UserService


@pytest.mark.integration
class TestAuthService:

    async def test_register_hashes_password(self, db_session):
        svc = AuthService(db_session)
        user = await svc.register(username="newbie", password="StrongPass123!", email="newbie@test.com")
        assert user.id
        assert user.role == "viewer"
        assert user.password_hash != "StrongPass123!"

    async def test_register_duplicate_username_fails(self, db_session):
        svc = AuthService(db_session)
        await svc.register(username="twin", password="StrongPass123!")
        with pytest.raises(ValueError, match="already in use"):
            await svc.register(username="twin", password="AnotherPass123!")

    async def test_login_success(self, db_session):
        svc = AuthService(db_session)
        user = await svc.register(username="editor1", password="StrongPass123!", role="editor")
        result = await svc.login(username="editor1", password="StrongPass123!")
        assert result is not None
        assert result["user"].id == user.id
        assert result["user"].last_login_at is not None
        claims = verify_token(result["token"])
        assert claims.sub == user.id
        assert claims.role == "editor"

    async def test_login_wrong_password_returns_none(self, db_session):
        svc = AuthService(db_session)
        await svc.register(username="carol", password="StrongPass123!")
        assert await svc.login(username="carol", password="WrongPassword") is None

    async def test_login_nonexistent_user_returns_none(self, db_session):
        assert await AuthService(db_session).login(username="nobody", password="anything") is None


@pytest.mark.integration
class TestUserService:

    async def test_set_role_normalizes(self, db_session):
        user = await AuthService(db_session).register(username="dana", password="StrongPass123!")
        updated = await UserService(db_session).set_role(user.id, "  OPERATOR ")
        assert updated.role == "operator"

    async def test_set_role_unknown(self, db_session):
        user = await AuthService(db_session).register(username="eve", password="StrongPass123!")
        with pytest.raises(ValueError, match="Unknown role"):
            await UserService(db_session).set_role(user.id, "root")

    async def test_set_role_missing_user(self, db_session):
        assert await UserService(db_session).set_role("missing", "admin") is None

    async def test_list_users(self, db_session):
        auth = AuthService(db_session)
        await auth.register(username="u1", password="StrongPass123!")
        await auth.register(username="u2", password="StrongPass123!")
        users, total = await UserService(db_session).list_users()
        assert total == 2
        assert {u.username for u in users} == {"u1", "u2"}


@pytest.mark.integration
class TestDeviceService:

    async def test_create_defaults(self, db_session):
        device = await DeviceService(db_session).create_device(
            {"device_id": "d-1", "name": "Pump", "type": "relay", "status": None, "config": None}
        )
        assert device.status == "inactive"
        assert device.config == {}

    async def test_duplicate_device_id(self, db_session):
        svc = DeviceService(db_session)
        await svc.create_device({"device_id": "d-1", "name": "Pump", "type": "relay"})
        with pytest.raises(ConflictError):
            await svc.create_device({"device_id": "d-1", "name": "Pump 2", "type": "relay"})

    async def test_invalid_status(self, db_session):
        svc = DeviceService(db_session)
        device = await svc.create_device({"device_id": "d-1", "name": "Pump", "type": "relay"})
        with pytest.raises(BadRequestError, match="Invalid status"):
            await svc.update_status(device.id, "melting")

    async def test_soft_delete_hides_device(self, db_session):
        svc = DeviceService(db_session)
        device = await svc.create_device({"device_id": "d-1", "name": "Pump", "type": "relay"})
        deleted = await svc.soft_delete(device.id)
        assert deleted.is_deleted is True
        assert deleted.deleted_at is not None
        assert await svc.get_by_id(device.id) is None
        assert await svc.get_by_id(device.id, include_deleted=True) is not None

    async def test_deleted_device_id_stays_reserved(self, db_session):
        svc = DeviceService(db_session)
        device = await svc.create_device({"device_id": "d-1", "name": "Pump", "type": "relay"})
        await svc.soft_delete(device.id)
        with pytest.raises(ConflictError):
            await svc.create_device({"device_id": "d-1", "name": "Pump 2", "type": "relay"})


@pytest.mark.integration
class TestSeed:

    async def test_seed_creates_and_repairs_admin(self, db_engine, session_factory, monkeypatch):
        import app.config
        import db.database
        from scripts.seed import seed

        async def _noop():
            return None

        monkeypatch.setattr(db.database, "engine", db_engine)
        monkeypatch.setattr(db.database, "AsyncSessionLocal", session_factory)
        monkeypatch.setattr(db.database, "close_db", _noop)
        monkeypatch.setattr(
            app.config,
            "get_settings",
            lambda: Settings(ADMIN_USERNAME="root", ADMIN_PASSWORD="SeedPass123!", ADMIN_EMAIL="root@example.com"),
        )

        assert await seed() == 0
        async with session_factory() as session:
            admin = await AuthService(session).get_user_by_username("root")
            assert admin.role == "admin"
            await UserService(session).set_role(admin.id, "viewer")
            await session.commit()

        assert await seed() == 0
        async with session_factory() as session:
            admin = await AuthService(session).get_user_by_username("root")
            assert admin.role == "admin"
            assert (await AuthService(session).login("root", "SeedPass123!")) is not None

    async def test_seed_requires_password(self, monkeypatch):
        import app.config
        from scripts.seed import seed

        monkeypatch.setattr(app.config, "get_settings", lambda: Settings(ADMIN_USERNAME="root", ADMIN_PASSWORD=""))
        assert await seed() == 2

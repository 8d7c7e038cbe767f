"""Unit tests for UserService rules that need no database."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.directory import UserCreate
from app.services.user_service import UserService, normalize_email
from tests.conftest import make_principal


def test_normalize_email_lowercases_and_trims():
    assert normalize_email("  Ada.Lovelace@Test-Univ.EDU ") == "ada.lovelace@test-univ.edu"


@pytest.mark.parametrize("email", ["", "someone@gmail.com", "no-at-sign.edu"])
def test_normalize_email_rejects_non_institutional(email):
    with pytest.raises(ValidationError) as exc_info:
        normalize_email(email)
    assert exc_info.value.message == "Valid .edu email is required"


@pytest.mark.asyncio
async def test_login_returns_existing_user_without_changing_role():
    db = AsyncMock(spec=AsyncSession)
    lead = User(id=uuid4(), email="lead@test-univ.edu", role=UserRole.TECH_LEAD)
    with patch(
        "app.services.user_service.UserService.get_user_by_email",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = lead
        user = await UserService.login_or_register(db, "Lead@test-univ.edu")
    assert user is lead
    assert user.role == UserRole.TECH_LEAD
    assert not db.commit.called


@pytest.mark.asyncio
async def test_first_login_registers_developer():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()
    with patch(
        "app.services.user_service.UserService.get_user_by_email",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.side_effect = [None, User(id=uuid4(), email="new@test-univ.edu", role=UserRole.DEVELOPER)]
        user = await UserService.login_or_register(db, "new@test-univ.edu")

    created = db.add.call_args[0][0]
    assert created.email == "new@test-univ.edu"
    assert created.role == UserRole.DEVELOPER
    assert user.role == UserRole.DEVELOPER
    assert db.commit.await_count == 1


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_email():
    db = AsyncMock(spec=AsyncSession)
    with patch(
        "app.services.user_service.UserService.get_user_by_email",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = User(id=uuid4(), email="dup@test-univ.edu")
        with pytest.raises(ConflictError) as exc_info:
            await UserService.create_user(
                db, make_principal(role=UserRole.BOARD_ADMIN), UserCreate(email="dup@test-univ.edu")
            )
    assert exc_info.value.message == "User with this email already exists"


@pytest.mark.asyncio
async def test_only_admins_create_users():
    db = AsyncMock(spec=AsyncSession)
    with pytest.raises(PermissionDeniedError):
        await UserService.create_user(
            db, make_principal(role=UserRole.PRODUCT_MANAGER), UserCreate(email="x@test-univ.edu")
        )


@pytest.mark.asyncio
async def test_bulk_create_reports_each_row():
    db = AsyncMock(spec=AsyncSession)
    admin = make_principal(role=UserRole.BOARD_ADMIN)
    ok_user = User(id=uuid4(), email="ok@test-univ.edu")

    async def fake_create(db, principal, item):
        if item.email.endswith("gmail.com"):
            raise ValidationError("Valid .edu email is required")
        return ok_user

    with patch("app.services.user_service.UserService.create_user", side_effect=fake_create):
        report = await UserService.bulk_create_users(
            db, admin, [UserCreate(email="ok@test-univ.edu"), UserCreate(email="bad@gmail.com")]
        )

    assert report.succeeded == 1
    assert report.failed == 1
    assert report.results[0].id == ok_user.id
    assert report.results[1].error == "Valid .edu email is required"


@pytest.mark.asyncio
async def test_bulk_delete_skips_self_silently():
    db = AsyncMock(spec=AsyncSession)
    admin = make_principal(role=UserRole.BOARD_ADMIN)
    other = uuid4()

    with patch("app.services.user_service.UserService.delete_user", new_callable=AsyncMock) as mock_delete:
        report = await UserService.bulk_delete_users(db, admin, [admin.id, other, other])

    mock_delete.assert_awaited_once_with(db, admin, other)
    assert report.succeeded == 1
    assert report.failed == 0
    assert [r.key for r in report.results] == [str(other)]


@pytest.mark.asyncio
async def test_delete_self_is_rejected():
    db = AsyncMock(spec=AsyncSession)
    admin = make_principal(role=UserRole.BOARD_ADMIN)
    with pytest.raises(ValidationError):
        await UserService.delete_user(db, admin, admin.id)
    assert not db.execute.called

"""Unit tests for CohortService: archive cascade and delete guard."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update

from app.core.exceptions import ConflictError, PermissionDeniedError
from app.models.cohort import Cohort
from app.models.enums import GroupStatus, UserRole
from app.schemas.directory import CohortCreate, CohortUpdate
from app.services.cohort_service import CohortService, group_status_for
from tests.conftest import make_principal


def _group_updates(db) -> list:
    return [c.args[0] for c in db.execute.call_args_list if isinstance(c.args[0], Update)]


def test_group_status_for():
    assert group_status_for(True) == GroupStatus.ACTIVE
    assert group_status_for(False) == GroupStatus.ARCHIVED


@pytest.mark.asyncio
@pytest.mark.parametrize("is_active, expected", [(False, GroupStatus.ARCHIVED), (True, GroupStatus.ACTIVE)])
async def test_toggle_cascades_to_every_group(is_active, expected):
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(rowcount=3)
    cohort = Cohort(id=uuid4(), name="Spring Bootcamp", is_active=not is_active)
    admin = make_principal(role=UserRole.BOARD_ADMIN)

    with patch(
        "app.services.cohort_service.CohortService.get_cohort_or_404",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = cohort
        result = await CohortService.update_cohort(db, admin, cohort.id, CohortUpdate(is_active=is_active))

    assert result.is_active is is_active
    updates = _group_updates(db)
    assert len(updates) == 1
    params = updates[0].compile(dialect=postgresql.dialect()).params
    assert expected in params.values()
    assert cohort.id in params.values()
    assert db.commit.await_count == 1


@pytest.mark.asyncio
async def test_rename_does_not_touch_groups():
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(first=MagicMock(return_value=None))
    cohort = Cohort(id=uuid4(), name="Old", is_active=True)

    with patch(
        "app.services.cohort_service.CohortService.get_cohort_or_404",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = cohort
        await CohortService.update_cohort(
            db, make_principal(role=UserRole.BOARD_ADMIN), cohort.id, CohortUpdate(name="New")
        )

    assert cohort.name == "New"
    assert _group_updates(db) == []


@pytest.mark.asyncio
async def test_delete_refused_while_groups_reference_cohort():
    db = AsyncMock(spec=AsyncSession)
    db.scalar.return_value = 2
    cohort = Cohort(id=uuid4(), name="Fall Bootcamp")

    with patch(
        "app.services.cohort_service.CohortService.get_cohort_or_404",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = cohort
        with pytest.raises(ConflictError) as exc_info:
            await CohortService.delete_cohort(db, make_principal(role=UserRole.BOARD_ADMIN), cohort.id)

    assert "Fall Bootcamp" in exc_info.value.message
    assert "2 groups" in exc_info.value.message
    assert not db.commit.called


@pytest.mark.asyncio
async def test_delete_empty_cohort():
    db = AsyncMock(spec=AsyncSession)
    db.scalar.return_value = 0
    cohort = Cohort(id=uuid4(), name="Empty")

    with patch(
        "app.services.cohort_service.CohortService.get_cohort_or_404",
        new_callable=AsyncMock,
    ) as mock_get:
        mock_get.return_value = cohort
        await CohortService.delete_cohort(db, make_principal(role=UserRole.BOARD_ADMIN), cohort.id)

    assert db.execute.await_count == 1
    assert db.commit.await_count == 1


@pytest.mark.asyncio
async def test_create_rejects_duplicate_name():
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(first=MagicMock(return_value=(uuid4(),)))
    with pytest.raises(ConflictError):
        await CohortService.create_cohort(
            db, make_principal(role=UserRole.BOARD_ADMIN), CohortCreate(name="Spring Bootcamp")
        )


@pytest.mark.asyncio
async def test_non_admin_cannot_manage_cohorts():
    db = AsyncMock(spec=AsyncSession)
    with pytest.raises(PermissionDeniedError):
        await CohortService.create_cohort(
            db, make_principal(role=UserRole.TECH_LEAD), CohortCreate(name="Spring Bootcamp")
        )
    assert not db.execute.called

"""Unit tests for AssignmentService: retargeting and deletion."""

import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete, Insert

import app.models  # noqa: F401  (configures every mapper)
from app.core.access import GlobalScope, TargetedGroups
from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models.assignment import Assignment
from app.models.enums import AssignmentType, GroupStatus, UserRole
from app.models.group import Group
from app.schemas.assignment import AssignmentUpdate
from app.services.assignment_service import AssignmentService
from tests.conftest import make_principal

SERVICE = "app.services.assignment_service"


def _group(name: str, cohort_id=None) -> Group:
    return Group(id=uuid4(), name=name, cohort_id=cohort_id, status=GroupStatus.ACTIVE)


def _assignment(*groups: Group) -> Assignment:
    return Assignment(
        id=uuid4(),
        title="Week 1",
        type=AssignmentType.VIDEO,
        content_url="https://videos.example.com/week-1",
        groups=list(groups),
    )


def _statements(db, kind) -> list:
    return [c.args[0] for c in db.execute.call_args_list if isinstance(c.args[0], kind)]


def _inserted_rows(db) -> list:
    return [row for c in db.execute.call_args_list if isinstance(c.args[0], Insert) for row in c.args[1]]


def _bound_values(statement) -> list:
    values = []
    for value in statement.compile(dialect=postgresql.dialect()).params.values():
        values.extend(value if isinstance(value, (list, tuple)) else [value])
    return values


@pytest.fixture
def patched():
    """Assignment lookup, permission checks and group existence checks, all mocked"""
    with patch(f"{SERVICE}.AssignmentService.get_assignment_or_404", new_callable=AsyncMock) as get_one, \
            patch(f"{SERVICE}.AuthorizationService.ensure_can_modify", new_callable=AsyncMock) as can_modify, \
            patch(f"{SERVICE}.AuthorizationService.ensure_can_delete", new_callable=AsyncMock) as can_delete, \
            patch(f"{SERVICE}.GroupService.ensure_groups_exist", new_callable=AsyncMock) as groups_exist:
        yield {
            "get": get_one,
            "modify": can_modify,
            "delete": can_delete,
            "groups_exist": groups_exist,
        }


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_retarget_applies_add_and_remove_sets(patched):
    a, b, c = _group("A"), _group("B"), _group("C")
    assignment = _assignment(a, b)
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)
    admin = make_principal(role=UserRole.BOARD_ADMIN)

    await AssignmentService.update_assignment(
        db, admin, assignment.id, AssignmentUpdate(group_ids=[b.id, c.id, c.id])
    )

    deletes = _statements(db, Delete)
    assert len(deletes) == 1
    removed = _bound_values(deletes[0])
    assert a.id in removed
    assert b.id not in removed
    assert _inserted_rows(db) == [{"assignment_id": assignment.id, "group_id": c.id}]
    patched["groups_exist"].assert_awaited_once_with(db, [b.id, c.id])
    assert db.commit.await_count == 1
    assert not db.rollback.called


@pytest.mark.asyncio
async def test_scope_passed_to_permission_check_is_current_scope(patched):
    team = _group("Team")
    assignment = _assignment(team)
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)
    lead = make_principal(role=UserRole.TECH_LEAD)

    await AssignmentService.update_assignment(db, lead, assignment.id, AssignmentUpdate(group_ids=[team.id]))

    _, principal, scope, new_group_ids = patched["modify"].await_args.args
    assert principal is lead
    assert isinstance(scope, TargetedGroups)
    assert scope.group_ids == frozenset({team.id})
    assert new_group_ids == [team.id]


@pytest.mark.asyncio
async def test_scalar_update_leaves_links_alone(patched):
    team = _group("Team")
    assignment = _assignment(team)
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)

    await AssignmentService.update_assignment(
        db, make_principal(role=UserRole.TECH_LEAD), assignment.id, AssignmentUpdate(title="Week 1 (revised)")
    )

    assert assignment.title == "Week 1 (revised)"
    assert _statements(db, Delete) == []
    assert _statements(db, Insert) == []
    assert patched["modify"].await_args.args[3] is None
    assert not patched["groups_exist"].called
    assert db.commit.await_count == 1


@pytest.mark.asyncio
async def test_empty_group_list_makes_assignment_global(patched):
    a, b = _group("A"), _group("B")
    assignment = _assignment(a, b)
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)

    await AssignmentService.update_assignment(
        db, make_principal(role=UserRole.BOARD_ADMIN), assignment.id, AssignmentUpdate(group_ids=[])
    )

    deletes = _statements(db, Delete)
    assert len(deletes) == 1
    assert {a.id, b.id} <= set(_bound_values(deletes[0]))
    assert _statements(db, Insert) == []
    assert not patched["groups_exist"].called


@pytest.mark.asyncio
async def test_unchanged_targets_issue_no_link_statements(patched):
    a, b = _group("A"), _group("B")
    assignment = _assignment(a, b)
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)

    await AssignmentService.update_assignment(
        db, make_principal(role=UserRole.BOARD_ADMIN), assignment.id, AssignmentUpdate(group_ids=[b.id, a.id])
    )

    assert db.execute.await_count == 0
    assert db.commit.await_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "type", "content_url"])
async def test_required_fields_cannot_be_cleared(patched, field):
    assignment = _assignment(_group("Team"))
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)

    with pytest.raises(ValidationError) as exc_info:
        await AssignmentService.update_assignment(
            db, make_principal(role=UserRole.BOARD_ADMIN), assignment.id, AssignmentUpdate(**{field: None})
        )

    assert field in exc_info.value.message
    assert not patched["modify"].called
    assert not db.commit.called


@pytest.mark.asyncio
async def test_denied_retarget_changes_nothing(patched):
    team = _group("Team")
    assignment = _assignment(team)
    patched["get"].return_value = assignment
    patched["modify"].side_effect = PermissionDeniedError("You can only assign to groups you manage")
    db = AsyncMock(spec=AsyncSession)

    with pytest.raises(PermissionDeniedError):
        await AssignmentService.update_assignment(
            db,
            make_principal(role=UserRole.TECH_LEAD),
            assignment.id,
            AssignmentUpdate(title="Hijacked", group_ids=[uuid4()]),
        )

    assert assignment.title == "Week 1"
    assert not db.execute.called
    assert not db.commit.called


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_removes_links_completions_and_row(patched):
    assignment = _assignment(_group("Team"))
    patched["get"].return_value = assignment
    db = AsyncMock(spec=AsyncSession)

    await AssignmentService.delete_assignment(db, make_principal(role=UserRole.BOARD_ADMIN), assignment.id)

    tables = [stmt.table.name for stmt in _statements(db, Delete)]
    assert tables == ["assignment_groups", "completions", "assignments"]
    assert db.commit.await_count == 1


@pytest.mark.asyncio
async def test_delete_global_checks_global_scope(patched):
    assignment = _assignment()
    patched["get"].return_value = assignment
    patched["delete"].side_effect = PermissionDeniedError("Global assignments can only be deleted by admins")
    db = AsyncMock(spec=AsyncSession)

    with pytest.raises(PermissionDeniedError):
        await AssignmentService.delete_assignment(db, make_principal(role=UserRole.PRODUCT_MANAGER), assignment.id)

    assert isinstance(patched["delete"].await_args.args[2], GlobalScope)
    assert not db.execute.called
    assert not db.commit.called

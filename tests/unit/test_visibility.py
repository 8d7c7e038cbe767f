"""Unit tests for the visibility rules (pure functions, no DB)."""

import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access import GlobalScope, TargetGroup, TargetedGroups, scope_from_groups
from app.models.enums import UserRole, UserStatus
from app.services.visibility_service import (
    VisibilityService,
    filter_visible,
    is_candidate,
    is_suppressed,
    is_visible,
)
from tests.conftest import make_principal


def targeted(*groups: TargetGroup) -> TargetedGroups:
    return TargetedGroups(frozenset(groups))


# ---------------------------------------------------------------------------
# Blackout and admin override
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [UserStatus.ALUMNI, UserStatus.ARCHIVED])
@pytest.mark.parametrize("role", list(UserRole))
def test_blacked_out_principal_sees_nothing(role, status):
    principal = make_principal(role=role, status=status, is_trainee=True)
    group = TargetGroup(uuid4())
    assert not is_visible(principal, {group.id}, GlobalScope())
    assert not is_visible(principal, {group.id}, targeted(group))


def test_admin_sees_everything_without_membership():
    admin = make_principal(role=UserRole.BOARD_ADMIN)
    cohort_group = TargetGroup(uuid4(), cohort_id=uuid4())
    assert is_visible(admin, set(), GlobalScope())
    assert is_visible(admin, set(), targeted(TargetGroup(uuid4())))
    assert is_visible(admin, set(), targeted(cohort_group))


# ---------------------------------------------------------------------------
# Candidate check and cohort suppression
# ---------------------------------------------------------------------------

def test_global_assignment_visible_to_any_active_user():
    for role in (UserRole.DEVELOPER, UserRole.TECH_LEAD, UserRole.PRODUCT_MANAGER):
        assert is_visible(make_principal(role=role), set(), GlobalScope())


def test_targeted_assignment_requires_shared_group():
    mine, other = TargetGroup(uuid4()), TargetGroup(uuid4())
    dev = make_principal()
    assert is_visible(dev, {mine.id}, targeted(mine))
    assert is_visible(dev, {mine.id}, targeted(mine, other))
    assert not is_visible(dev, {mine.id}, targeted(other))
    assert not is_visible(dev, set(), targeted(other))


def test_cohort_assignment_hidden_from_non_trainee_member():
    bootcamp = TargetGroup(uuid4(), cohort_id=uuid4())
    dev = make_principal()
    assert is_candidate(dev, {bootcamp.id}, targeted(bootcamp))
    assert is_suppressed(dev, targeted(bootcamp))
    assert not is_visible(dev, {bootcamp.id}, targeted(bootcamp))


def test_cohort_assignment_visible_to_trainee_member():
    bootcamp = TargetGroup(uuid4(), cohort_id=uuid4())
    trainee = make_principal(is_trainee=True)
    assert is_visible(trainee, {bootcamp.id}, targeted(bootcamp))


def test_mixed_targets_are_suppressed_for_non_trainees():
    """One cohort group among the targets is enough to hide it"""
    team = TargetGroup(uuid4())
    bootcamp = TargetGroup(uuid4(), cohort_id=uuid4())
    lead = make_principal(role=UserRole.TECH_LEAD)
    assert not is_visible(lead, {team.id}, targeted(team, bootcamp))
    assert is_visible(make_principal(is_trainee=True), {team.id}, targeted(team, bootcamp))


def test_global_assignment_never_suppressed():
    assert not is_suppressed(make_principal(), GlobalScope())


def test_trainee_still_needs_membership():
    bootcamp = TargetGroup(uuid4(), cohort_id=uuid4())
    trainee = make_principal(is_trainee=True)
    assert not is_visible(trainee, set(), targeted(bootcamp))


# ---------------------------------------------------------------------------
# Scopes and list filtering
# ---------------------------------------------------------------------------

def test_scope_from_groups_builds_global_for_no_groups():
    assert isinstance(scope_from_groups([]), GlobalScope)


def test_targeted_groups_rejects_empty_set():
    with pytest.raises(ValueError):
        TargetedGroups(frozenset())


def test_filter_visible_keeps_order_and_drops_hidden():
    team = TargetGroup(uuid4())
    stranger = TargetGroup(uuid4())
    bootcamp = TargetGroup(uuid4(), cohort_id=uuid4())
    items = [
        ("global", GlobalScope()),
        ("team", targeted(team)),
        ("stranger", targeted(stranger)),
        ("bootcamp", targeted(bootcamp)),
    ]
    dev = make_principal()
    visible = filter_visible(dev, {team.id, bootcamp.id}, items, scope_fn=lambda item: item[1])
    assert [name for name, _ in visible] == ["global", "team"]


def test_filter_visible_is_empty_for_alumni():
    alumni = make_principal(status=UserStatus.ALUMNI)
    items = [("global", GlobalScope())]
    assert filter_visible(alumni, set(), items, scope_fn=lambda item: item[1]) == []


# ---------------------------------------------------------------------------
# Store-backed wrapper
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_visible_assignments_short_circuits_for_archived():
    db = AsyncMock(spec=AsyncSession)
    archived = make_principal(status=UserStatus.ARCHIVED)
    assert await VisibilityService.list_visible_assignments(db, archived) == []
    assert not db.execute.called


@pytest.mark.asyncio
async def test_is_assignment_visible_resolves_membership():
    db = AsyncMock(spec=AsyncSession)
    group = TargetGroup(uuid4())

    class FakeAssignment:
        groups = [group]

    with patch(
        "app.services.visibility_service.MembershipService.resolve_group_ids",
        new_callable=AsyncMock,
    ) as mock_groups:
        mock_groups.return_value = {group.id}
        assert await VisibilityService.is_assignment_visible(db, make_principal(), FakeAssignment())
        mock_groups.return_value = set()
        assert not await VisibilityService.is_assignment_visible(db, make_principal(), FakeAssignment())

"""Unit tests for join-table diffing."""

from uuid import uuid4

from app.utils.reconcile import diff_ids


def test_diff_adds_and_removes():
    a, b, c = uuid4(), uuid4(), uuid4()
    to_add, to_remove = diff_ids([a, b], [b, c])
    assert to_add == [c]
    assert to_remove == [a]


def test_diff_is_empty_when_sets_match():
    a, b = uuid4(), uuid4()
    assert diff_ids([a, b], [b, a]) == ([], [])


def test_diff_collapses_duplicates_in_request():
    a = uuid4()
    assert diff_ids([], [a, a, a]) == ([a], [])


def test_diff_to_empty_removes_everything():
    a, b = uuid4(), uuid4()
    to_add, to_remove = diff_ids({a, b}, [])
    assert to_add == []
    assert set(to_remove) == {a, b}

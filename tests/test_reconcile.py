"""Tests transform result reconciliation."""
from __future__ import annotations

import pytest
from typing import Any
from sst import UndefinedResultError, create_store
from sst.reconcile import Deferred, Thunk, Value, bind_args, classify_result, commit


def _store() -> Any:
    return create_store(
        {"other": {"nested": True}},
        {"users": {"initial_state": lambda prior: ["Joe"]}},
    )


def test_bind_args() -> None:
    subject = _store()

    assert bind_args(subject, "", (1, 2)) == (subject.get_state(), 1, 2)
    assert bind_args(subject, "users", ("Jane",)) == (["Joe"], "Jane")


def test_classify_value() -> None:
    assert classify_result([]) == Value([])
    assert classify_result(0) == Value(0)
    assert classify_result(False) == Value(False)


def test_classify_thunk() -> None:
    def _thunk(store: Any) -> None:
        ...

    assert classify_result(_thunk) == Thunk(_thunk)


def test_classify_deferred() -> None:
    async def _resolve() -> int:
        return 1

    coroutine = _resolve()

    assert classify_result(coroutine) == Deferred(coroutine)
    coroutine.close()


def test_classify_none_raises() -> None:
    with pytest.raises(UndefinedResultError, match="users.add returned None"):
        classify_result(None, "users.add")


def test_commit_root() -> None:
    subject = _store()
    result = commit(subject, "", {"replaced": True})

    assert result == {"replaced": True}
    assert subject.get_state() == {"replaced": True}


def test_commit_slice() -> None:
    subject = _store()
    before = subject.get_state()

    result = commit(subject, "users", ["Jane"])

    assert result == ["Jane"]
    assert subject.get_state() == {"other": {"nested": True}, "users": ["Jane"]}
    assert subject.get_state()["other"] is before["other"]
    assert before["users"] == ["Joe"]

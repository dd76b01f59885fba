"""Transform result reconciliation.

Every transform call ends here, at the innermost link of the middleware
chain. The transform's raw result is classified as a plain value, a
higher-order thunk, or a deferred (awaitable) value, and plain and deferred
values are committed to the store.

When an asyncio event loop is running, deferred values and asynchronous
thunks are scheduled as tasks, so they settle whether or not the caller awaits
the returned handle. Without a running loop the handle is a coroutine that
settles when awaited.

Limitations:
    A transform that means to store a function as data will be treated as a
    thunk. Functions are not supported as state values.

    None is the absent result, so a transform cannot commit an explicit None.
    Use Store.set_state to write None directly.
"""
from __future__ import annotations
import asyncio
import inspect
import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Coroutine,
    NamedTuple,
    Optional,
    Set,
    Tuple,
    Union,
)

from .errors import UndefinedResultError
from .middleware import InvocationContext

if TYPE_CHECKING:
    from .store import Store

log = logging.getLogger(__name__)

_pending: Set[asyncio.Future[Any]] = set()


class Value(NamedTuple):
    """A new state, committed immediately."""

    value: Any


class Thunk(NamedTuple):
    """A higher-order transform, called with the store."""

    func: Callable[[Store[Any]], Any]


class Deferred(NamedTuple):
    """A new state, committed once the awaitable resolves."""

    awaitable: Awaitable[Any]


TransformResult = Union[Value, Thunk, Deferred]


def bind_args(store: Store[Any], slice_id: str, args: Tuple[Any, ...]) -> Tuple[Any, ...]:
    """Prepend the current state of a slice, or of the root, to ``args``."""
    state = store.get_state()

    if slice_id:
        state = state[slice_id]

    return (state, *args)


def classify_result(result: Any, action_type: str = "transform") -> TransformResult:
    """Classify a transform's raw result.

    Raises:
        UndefinedResultError: the result is ``None``.
    """
    if callable(result):
        return Thunk(result)

    if result is None:
        raise UndefinedResultError(
            f"{action_type} returned None. Transforms should return a new state "
            "or a higher-order function."
        )

    if inspect.isawaitable(result):
        return Deferred(result)

    return Value(result)


def commit(store: Store[Any], slice_id: str, value: Any) -> Any:
    """Write a new slice (or root) state to the store."""
    if not slice_id:
        store.set_state(value)
    else:
        next_state = dict(store.get_state())
        next_state[slice_id] = value
        store.set_state(next_state)

    return value


def reconcile(context: InvocationContext) -> Any:
    """Call a transform and commit its result.

    Returns:
        The new slice (or root) state for plain values, a handle that
        commits and returns the resolved state for deferred values, or None
        for higher-order transforms. An asynchronous higher-order transform
        returns an awaitable resolving to None.
    """
    store = context.store
    args = bind_args(store, context.slice_id, context.args)
    result = classify_result(
        context.transform(*args, **context.kwargs),
        context.action_type,
    )

    if isinstance(result, Thunk):
        outcome = result.func(store)

        if inspect.isawaitable(outcome):
            return _schedule(_discard(outcome))

        return None

    if isinstance(result, Deferred):
        return _schedule(_settle(context, result.awaitable))

    log.debug("Committing %s", context.action_type)
    return commit(store, context.slice_id, result.value)


async def _settle(context: InvocationContext, awaitable: Awaitable[Any]) -> Any:
    value: Optional[Any] = await awaitable

    if value is None:
        raise UndefinedResultError(
            f"{context.action_type} resolved to None. Transforms should "
            "resolve to a new state."
        )

    log.debug("Committing deferred %s", context.action_type)
    return commit(context.store, context.slice_id, value)


async def _discard(awaitable: Awaitable[Any]) -> None:
    await awaitable


def _schedule(coroutine: Coroutine[Any, Any, Any]) -> Awaitable[Any]:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return coroutine

    task = loop.create_task(coroutine)
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task

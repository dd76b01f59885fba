"""Simple state tree stores."""
from __future__ import annotations
import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
)

from .definitions import Definitions, Entry, EntryKind, parse_definitions
from .middleware import Handler, InvocationContext, Middleware, compose_middleware
from .reconcile import bind_args, reconcile

StateT = TypeVar("StateT")
ChangeHook = Callable[[Any], Any]

log = logging.getLogger(__name__)

ROOT = ""


class Tree:
    """A tree of bound transforms or selectors.

    Entries can be read as items or as attributes, so
    ``store.actions.users.add_user`` and ``store.actions["users"]["add_user"]``
    are the same function. Trees have no public methods of their own, so any
    entry name reaches its entry.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        try:
            return self._entries[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._entries[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Tree):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            return self._entries == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Tree({self._entries!r})"


class Store(Generic[StateT]):
    """A state tree store.

    Args:
        default_state: Default state of the root and of each slice.
        definitions: Transforms, selectors, and slice definitions.
        middlewares: Middleware to wrap every transform call in, outermost
            first.
        on_change: Function to call with the new state after every commit.
    """

    state: StateT
    actions: Tree
    selectors: Tree
    on_change: Optional[ChangeHook]

    def __init__(
        self,
        default_state: Optional[Mapping[str, Any]] = None,
        definitions: Optional[Mapping[str, Any]] = None,
        middlewares: Sequence[Middleware] = (),
        on_change: Optional[ChangeHook] = None,
    ) -> None:
        self.on_change = on_change
        self._dispatch: Handler = compose_middleware(middlewares, reconcile)
        self._set_state(dict(default_state or {}))  # type: ignore[arg-type]
        self._build(parse_definitions(definitions or {}))

    def get_state(self) -> StateT:
        """Get the current state."""
        return self.state

    def set_state(self, state: StateT) -> StateT:
        """Replace the state, bypassing transforms and middleware."""
        self._set_state(state)

        if self.on_change is not None:
            self.on_change(state)

        return state

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "state":
            raise TypeError("Cannot overwrite state attribute.")
        super().__setattr__(name, value)

    def _set_state(self, value: StateT) -> None:
        super().__setattr__("state", value)

    def _build(self, definitions: Definitions) -> None:
        state: Dict[str, Any] = dict(self.state)  # type: ignore[call-overload]
        actions = Tree()
        selectors = Tree()

        for entry in definitions.entries:
            self._bind_entry(ROOT, entry, actions, selectors)

        for slice_definition in definitions.slices:
            name = slice_definition.name
            slice_actions = Tree()
            slice_selectors = Tree()

            for entry in slice_definition.entries:
                self._bind_entry(name, entry, slice_actions, slice_selectors)

            state[name] = slice_definition.initial_state.func(state.get(name))
            actions[name] = slice_actions
            selectors[name] = slice_selectors

        self.actions = actions
        self.selectors = selectors
        self._set_state(state)  # type: ignore[arg-type]

        log.debug(
            "Created store with slices %s",
            [s.name for s in definitions.slices],
        )

    def _bind_entry(self, slice_id: str, entry: Entry, actions: Tree, selectors: Tree) -> None:
        if entry.kind == EntryKind.SELECTOR:
            selectors[entry.name] = self._bind_selector(slice_id, entry)
        else:
            actions[entry.name] = self._bind_transform(slice_id, entry)

    def _bind_transform(self, slice_id: str, entry: Entry) -> Callable[..., Any]:
        def _transform(*args: Any, **kwargs: Any) -> Any:
            return self._dispatch(
                InvocationContext(
                    store=self,
                    slice_id=slice_id,
                    action_name=entry.name,
                    transform=entry.func,
                    args=args,
                    kwargs=kwargs,
                )
            )

        _transform.__name__ = entry.name
        _transform.__doc__ = entry.func.__doc__
        return _transform

    def _bind_selector(self, slice_id: str, entry: Entry) -> Callable[..., Any]:
        def _selector(*args: Any, **kwargs: Any) -> Any:
            return entry.func(*bind_args(self, slice_id, args), **kwargs)

        _selector.__name__ = entry.name
        _selector.__doc__ = entry.func.__doc__
        return _selector


def create_store(
    default_state: Optional[Mapping[str, Any]] = None,
    definitions: Optional[Mapping[str, Any]] = None,
    middlewares: Sequence[Middleware] = (),
) -> Store[Dict[str, Any]]:
    """Create a state tree store.

    Args:
        default_state: Default state of the root and of each slice.
        definitions: Root transforms and selectors, and slice definitions by
            slice name. A slice definition maps names to its transforms and
            selectors, and must have exactly one initial state function.
        middlewares: Middleware to wrap every transform call in, outermost
            first.

    Example:
        ```python
        store = create_store(
            {"hi": "there"},
            {
                "hi": {
                    "initial_state": lambda value: "Hi " + value,
                    "say": lambda hi, message: message,
                },
            },
        )

        store.get_state()["hi"]  # "Hi there"
        store.actions.hi.say("Yo!")
        store.get_state()["hi"]  # "Yo!"
        ```
    """
    return Store(default_state, definitions, middlewares)

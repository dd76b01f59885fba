"""Definitions tree parsing."""
from __future__ import annotations
import enum
import functools
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, TypeVar

from .errors import DefinitionError, NamingError

FuncT = TypeVar("FuncT", bound=Callable[..., Any])

_ENTRY_KIND_ATTR = "__sst_entry_kind__"
_RESERVED_PREFIX = "_"
_SELECTOR_PREFIX = "$"
_INITIAL_STATE_KEY = "initial_state"


class EntryKind(str, enum.Enum):
    """Kind of a definitions tree entry.

    Props:
        TRANSFORM: Computes a new state for its slice (or the root).
        SELECTOR: Derives a read-only value from its slice (or the root).
        INITIAL_STATE: Computes a slice's initial state from its default.
    """

    TRANSFORM = "transform"
    SELECTOR = "selector"
    INITIAL_STATE = "initial_state"


class Entry(NamedTuple):
    """A classified transform, selector, or initial state function."""

    name: str
    kind: EntryKind
    func: Callable[..., Any]


class SliceDefinition(NamedTuple):
    """A named slice of the state tree and its entries."""

    name: str
    initial_state: Entry
    entries: List[Entry]


class Definitions(NamedTuple):
    """A validated definitions tree."""

    entries: List[Entry]
    slices: List[SliceDefinition]


def _tag(kind: EntryKind) -> Callable[[FuncT], FuncT]:
    def _decorator(func: FuncT) -> FuncT:
        @functools.wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            return func(*args, **kwargs)

        setattr(_wrapper, _ENTRY_KIND_ATTR, kind)
        return _wrapper  # type: ignore[return-value]

    return _decorator


transform = _tag(EntryKind.TRANSFORM)
transform.__doc__ = "Mark a function as a transform, regardless of its key."

selector = _tag(EntryKind.SELECTOR)
selector.__doc__ = "Mark a function as a read-only selector."

initial_state = _tag(EntryKind.INITIAL_STATE)
initial_state.__doc__ = "Mark a function as its slice's initial state."


def classify(name: str, func: Any) -> EntryKind:
    """Get the kind of a definitions entry.

    An explicit tag wins. Otherwise an ``initial_state`` key is the slice's
    initial state, a ``$``-prefixed key is a selector, and anything else is a
    transform.
    """
    kind: Optional[EntryKind] = getattr(func, _ENTRY_KIND_ATTR, None)

    if kind is not None:
        return kind
    if name == _INITIAL_STATE_KEY:
        return EntryKind.INITIAL_STATE
    if name.startswith(_SELECTOR_PREFIX):
        return EntryKind.SELECTOR

    return EntryKind.TRANSFORM


def parse_definitions(definitions: Mapping[str, Any]) -> Definitions:
    """Validate and classify a definitions tree.

    Args:
        definitions: Root transforms and selectors, and slice definitions
            by slice name.

    Raises:
        NamingError: a key starts with the reserved ``_`` prefix.
        DefinitionError: the tree is otherwise malformed.
    """
    entries: List[Entry] = []
    slices: List[SliceDefinition] = []

    for name, value in definitions.items():
        _assert_valid_name(name)

        if isinstance(value, Mapping):
            slices.append(_parse_slice(name, value))
        elif callable(value):
            entry = Entry(name, classify(name, value), value)

            if entry.kind == EntryKind.INITIAL_STATE:
                raise DefinitionError(
                    f"Invalid root entry {name}. Initial state belongs to a slice"
                )

            entries.append(entry)
        else:
            raise DefinitionError(
                f"Invalid entry {name}. Expected a function or a slice definition"
            )

    return Definitions(entries=entries, slices=slices)


def _parse_slice(slice_name: str, definition: Mapping[str, Any]) -> SliceDefinition:
    initial: List[Entry] = []
    entries: List[Entry] = []

    for name, func in definition.items():
        _assert_valid_name(name)

        if not callable(func):
            raise DefinitionError(
                f"Invalid entry {slice_name}.{name}. Slice entries must be functions"
            )

        entry = Entry(name, classify(name, func), func)
        entries.append(entry)

        if entry.kind == EntryKind.INITIAL_STATE:
            initial.append(entry)

    if len(initial) != 1:
        raise DefinitionError(
            f"Slice {slice_name} must have exactly one initial state, "
            f"found {len(initial)}"
        )

    return SliceDefinition(name=slice_name, initial_state=initial[0], entries=entries)


def _assert_valid_name(name: str) -> None:
    if name.startswith(_RESERVED_PREFIX):
        raise NamingError(
            f"Invalid property {name}. Properties cannot start with {_RESERVED_PREFIX}"
        )

"""Simple State Tree - a single state tree with curried transforms."""
from .definitions import EntryKind, initial_state, selector, transform
from .errors import DefinitionError, NamingError, StoreError, UndefinedResultError
from .middleware import (
    InvocationContext,
    Middleware,
    compose_middleware,
    create_logger_middleware,
    logger_middleware,
)
from .store import Store, Tree, create_store

__all__ = [
    "DefinitionError",
    "EntryKind",
    "InvocationContext",
    "Middleware",
    "NamingError",
    "Store",
    "StoreError",
    "Tree",
    "UndefinedResultError",
    "compose_middleware",
    "create_logger_middleware",
    "create_store",
    "initial_state",
    "logger_middleware",
    "selector",
    "transform",
]

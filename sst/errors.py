"""Store errors."""


class StoreError(Exception):
    """Base class for errors raised by a state tree store."""


class NamingError(StoreError, ValueError):
    """A definition key uses the reserved ``_`` prefix."""


class DefinitionError(StoreError, TypeError):
    """The definitions tree is malformed."""


class UndefinedResultError(StoreError, TypeError):
    """A transform returned ``None`` instead of a new state."""

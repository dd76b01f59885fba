"""Transform middleware."""
from __future__ import annotations
import functools
import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

if TYPE_CHECKING:
    from .store import Store

log = logging.getLogger(__name__)


class InvocationContext(NamedTuple):
    """A single transform invocation, passed down the middleware chain.

    Props:
        store: The store the transform belongs to.
        slice_id: Name of the transform's slice, or "" for the root.
        action_name: Name of the transform within its slice.
        transform: The user-defined transform function.
        args: Positional arguments from the caller, without the state.
        kwargs: Keyword arguments from the caller.
    """

    store: Store[Any]
    slice_id: str
    action_name: str
    transform: Callable[..., Any]
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]

    @property
    def action_type(self) -> str:
        """Dotted name of the transform, e.g. ``users.add_user``."""
        if not self.slice_id:
            return self.action_name
        return f"{self.slice_id}.{self.action_name}"


Handler = Callable[[InvocationContext], Any]
Middleware = Callable[[InvocationContext, Handler], Any]


def compose_middleware(middlewares: Sequence[Middleware], terminus: Handler) -> Handler:
    """Compose middlewares into a single handler.

    The first middleware is the outermost link of the chain and ``terminus``
    is the innermost. Each middleware is called as ``middleware(context,
    proceed)``, where ``proceed(context)`` calls the next link.
    """
    return functools.reduce(_link, reversed(middlewares), terminus)


def _link(proceed: Handler, middleware: Middleware) -> Handler:
    def _handler(context: InvocationContext) -> Any:
        return middleware(context, proceed)

    return _handler


def create_logger_middleware(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
) -> Middleware:
    """Create a middleware that logs state before and after each transform.

    Args:
        logger: Logger to write to. Defaults to this module's logger.
        level: Level of the records. If the logger is not enabled for this
            level, the middleware only delegates to the next link.
    """
    target = logger if logger is not None else log

    def _logger_middleware(context: InvocationContext, proceed: Handler) -> Any:
        if not target.isEnabledFor(level):
            return proceed(context)

        store = context.store
        action_type = context.action_type

        target.log(level, "%s prev state: %r", action_type, store.get_state())
        target.log(
            level,
            "%s action: args=%r kwargs=%r",
            action_type,
            context.args,
            context.kwargs,
        )

        result = proceed(context)

        target.log(level, "%s next state: %r", action_type, store.get_state())
        return result

    return _logger_middleware


logger_middleware = create_logger_middleware()

"""
zderive Types - Store Protocol and Callback Aliases
===================================================

This module defines the structural interface every store in zderive follows,
whether it is a base store from `zderive.store` or a derived store built by
`zderive.derive`.

Protocols are structural types: any object with matching `get_state`,
`set_state` and `subscribe` methods is a `Store`, no inheritance required.
This lets a derived store depend on stores from any source, including other
derived stores.
"""

from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

# (state, prev_state) -> None
Listener = Callable[[T, T], None]

# Removes exactly one subscription. Safe to call more than once.
Unsubscribe = Callable[[], None]


@runtime_checkable
class Store(Protocol[T_co]):
    """
    Protocol defining the minimal observable container.

    A store holds a single value, lets callers replace or merge into it,
    and notifies listeners with the new and previous value on each change.
    """

    def get_state(self) -> T_co:
        """Return the current value."""
        ...

    def set_state(self, partial: Any) -> None:
        """Update the value and notify listeners."""
        ...

    def subscribe(self, listener: Callable[[Any, Any], None]) -> Unsubscribe:
        """Register a listener and return the handle that removes it."""
        ...


def is_store(obj: Any) -> bool:
    """Check whether `obj` structurally satisfies the Store protocol."""
    return isinstance(obj, Store)

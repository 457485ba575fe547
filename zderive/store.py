"""
zderive Store - Minimal Observable State Containers
===================================================

This module provides the base store primitive that derived stores are built on.
A store holds one value, replaces it on every update, and tells its listeners
about the change with both the new and the previous value.

Two flavours are provided:

**ObjectStore**: state is a mapping. `set_state()` shallow-merges a partial
mapping over the current state and installs the result as a brand new dict,
so a state object that has been handed out is never mutated afterwards.

**SimpleStore**: state is any value. `set_state()` replaces it outright.

Basic Usage
-----------

```python
from zderive import create_object_store, create_simple_store

counter = create_simple_store(0)
counter.subscribe(lambda state, prev: print(f"{prev} -> {state}"))
counter.set_state(1)                   # prints "0 -> 1"
counter.set_state(lambda n: n + 1)     # prints "1 -> 2"

profile = create_object_store({"name": "Ada", "age": 36})
profile.set_state({"age": 37})
print(profile.get_state())             # {'name': 'Ada', 'age': 37}
```

Creator functions work the same way they do in zustand: the initializer gets
the store's own `set_state` and `get_state`, so actions can live inside the
state itself:

```python
todos = create_object_store(
    lambda set_state, get_state: {
        "items": (),
        "add": lambda text: set_state({"items": get_state()["items"] + (text,)}),
    }
)
todos.get_state()["add"]("write docs")
```

Notification Rules
------------------

- Every `subscribe()` call is an independent subscription. Subscribing the
  same callable twice means it is called twice per change.
- Listeners are called in subscription order, with a snapshot of the
  subscriptions taken when the update is committed. A listener added or removed
  during a notification is only affected from the next update onwards.
- An update that leaves the very same state object in place (`is`) does not
  notify anyone. This is an identity check, not equality: whether an equal
  int or str counts as "the same object" depends on interpreter interning
  (`set_state(5)` over 5 is usually skipped, an equal computed 1000 usually
  notifies), so do not rely on it to suppress value-equal updates.
- Exceptions raised by listeners propagate to the caller of `set_state()`;
  later listeners are not called for that update.
"""

import logging
import threading
from typing import Any, Callable, Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

from .errors import SetStateError
from .types import Listener, Unsubscribe

logger = logging.getLogger(__name__)

T = TypeVar("T")

StateInitializer = Callable[
    [Callable[..., None], Callable[[], Dict[str, Any]]], Mapping[str, Any]
]


class BaseStore(Generic[T]):
    """
    Shared machinery for stores: current value, subscriptions, notification.

    Subscriptions are kept in an insertion-ordered dict keyed by a private
    token per `subscribe()` call, which is what lets one callable hold several
    independent subscriptions.

    State replacement is a single swap guarded by an RLock; listeners are
    always invoked outside the lock.
    """

    def __init__(self, initial_state: T):
        self._state = initial_state
        self._listeners: Dict[object, Listener] = {}
        self._lock = threading.RLock()

    def get_state(self) -> T:
        return self._state

    def set_state(self, partial: Any) -> None:
        raise NotImplementedError

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register `listener(state, prev_state)`; returns its unsubscribe handle."""
        token = object()
        with self._lock:
            self._listeners[token] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _commit(self, next_state: T) -> Optional[Tuple[T, Tuple[Listener, ...]]]:
        """
        Install `next_state` and snapshot the listeners to notify.

        Returns None when nothing changed. Must be called with the lock held.
        """
        prev_state = self._state
        # Identity only; equal but distinct objects (including uninterned
        # ints and strs) still count as a change.
        if next_state is prev_state:
            return None
        self._state = next_state
        return prev_state, tuple(self._listeners.values())

    def _notify(
        self, state: T, prev_state: T, listeners: Tuple[Listener, ...]
    ) -> None:
        for listener in listeners:
            listener(state, prev_state)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._state!r})"


class ObjectStore(BaseStore[Dict[str, Any]]):
    """
    Store whose state is a mapping, updated by shallow merge.

    Example:
        ```python
        store = ObjectStore({"a": 1, "b": 2})
        store.set_state({"b": 3})
        store.get_state()                      # {'a': 1, 'b': 3}
        store.set_state(lambda s: {"a": s["a"] + 1})
        store.set_state({"c": 0}, replace=True)
        store.get_state()                      # {'c': 0}
        ```
    """

    def __init__(self, initial_state: Optional[Mapping[str, Any]] = None):
        super().__init__(dict(initial_state or {}))

    def set_state(
        self,
        partial: Union[Mapping[str, Any], Callable[[Dict[str, Any]], Mapping[str, Any]]],
        replace: bool = False,
    ) -> None:
        """
        Merge `partial` into the state (or replace the state with it).

        `partial` may be a mapping or a function of the current state that
        returns one. Anything else raises SetStateError.
        """
        with self._lock:
            current = self._state
            if callable(partial):
                partial = partial(current)
            if not isinstance(partial, Mapping):
                raise SetStateError(
                    f"ObjectStore.set_state expects a mapping, got {type(partial).__name__}"
                )
            next_state = dict(partial) if replace else {**current, **partial}
            committed = self._commit(next_state)

        if committed is not None:
            prev_state, listeners = committed
            self._notify(next_state, prev_state, listeners)


class SimpleStore(BaseStore[T]):
    """
    Store whose state is replaced wholesale on every update.

    A callable passed to `set_state()` is treated as an updater and applied to
    the current value. To store a function as the value itself, wrap it:
    `store.set_state(lambda _: fn)`.
    """

    def set_state(self, value: Union[T, Callable[[T], T]]) -> None:
        with self._lock:
            if callable(value):
                value = value(self._state)
            committed = self._commit(value)

        if committed is not None:
            prev_state, listeners = committed
            self._notify(value, prev_state, listeners)


def create_object_store(
    initializer: Union[Mapping[str, Any], StateInitializer, None] = None
) -> ObjectStore:
    """
    Create an ObjectStore from an initial mapping or a creator function.

    A creator is called once as `initializer(set_state, get_state)` and must
    return the initial mapping. `set_state` and `get_state` are the new
    store's own bound methods, so closures in the returned mapping can update
    the store later.
    """
    if not callable(initializer):
        store = ObjectStore(initializer)
    else:
        store = ObjectStore()
        initial_state = initializer(store.set_state, store.get_state)
        if not isinstance(initial_state, Mapping):
            raise SetStateError(
                f"Store initializer must return a mapping, got {type(initial_state).__name__}"
            )
        with store._lock:
            store._state = dict(initial_state)

    logger.debug("Created ObjectStore with %d key(s)", len(store.get_state()))
    return store


def create_simple_store(initial_state: T) -> SimpleStore[T]:
    """Create a SimpleStore holding `initial_state`."""
    store = SimpleStore(initial_state)
    logger.debug("Created SimpleStore with %s state", type(initial_state).__name__)
    return store

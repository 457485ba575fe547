"""
zderive Derive - Read-Only Stores Computed From Other Stores
============================================================

`derive()` builds a store whose value is a function of the current values of
one or more source stores. The function is re-run every time any source
notifies, and the derived store then notifies its own subscribers.

```python
from zderive import create_simple_store, derive

price = create_simple_store(2)
quantity = create_simple_store(3)

total = derive([price, quantity], lambda deps, prev_deps, prev: deps[0] * deps[1])
total.get_state()                      # 6

total.subscribe(lambda state, prev: print(f"{prev} -> {state}"))
quantity.set_state(10)                 # prints "6 -> 20"
```

The on_change Function
----------------------

`on_change(deps_state, prev_deps_state, prev_state)` receives:

- `deps_state`: tuple of the latest value of every source, in source order
- `prev_deps_state`: the whole tuple as it was before this update, or None
  on the initial computation
- `prev_state`: the derived value before this update, or None on the initial
  computation

It must be pure. It runs once at construction and once per source
notification.

Behaviour Worth Knowing
-----------------------

- No batching: if two sources change back to back, `on_change` runs twice and
  subscribers are notified twice, once per source notification.
- Subscribers are called as `listener(state, prev_state)`. When the previous
  derived value is None, `state` is passed as `prev_state` instead, so a
  listener never receives None there. Other falsy values (0, "", []) are
  passed through unchanged.
- If `on_change` raises, the exception propagates to whoever updated the
  source. The derived store keeps its previous, consistent bookkeeping.
- `set_state()` always raises ReadOnlyStoreError.
- `dispose()` detaches from every source. The last value stays readable;
  new subscriptions raise DisposedStoreError.

Internal State
--------------

Each derived store keeps its working state in a private ObjectStore (the
bookkeeping store). Every update is written there with a single
`set_state()`, so `get_state()` never sees a half-applied update. The
`deps_state` tuple is always rebuilt rather than mutated, and a new listener
mapping is built on subscribe; unsubscribing edits the live mapping in place
since it never leaves this module.
"""

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    NoReturn,
    Optional,
    Tuple,
    TypeVar,
    overload,
)

from .errors import DisposedStoreError, ReadOnlyStoreError
from .store import ObjectStore
from .types import Listener, Store, Unsubscribe

logger = logging.getLogger(__name__)

T = TypeVar("T")
S1 = TypeVar("S1")
S2 = TypeVar("S2")
S3 = TypeVar("S3")
S4 = TypeVar("S4")

DepsState = Tuple[Any, ...]
OnChange = Callable[[DepsState, Optional[DepsState], Optional[T]], T]


class DerivedStore(Generic[T]):
    """
    Read-only store whose value is recomputed from its source stores.

    Use `derive()` to create one. A DerivedStore satisfies the Store protocol,
    so it can itself be a source of another derived store.
    """

    def __init__(
        self,
        stores: Iterable[Store[Any]],
        on_change: OnChange[T],
        name: Optional[str] = None,
    ):
        self._sources: Tuple[Store[Any], ...] = tuple(stores)
        self._on_change = on_change
        self._name = name or "derived"

        initial_deps_state = tuple(source.get_state() for source in self._sources)

        self._store = ObjectStore(
            {
                "listeners": {},
                "deps_state": initial_deps_state,
                "prev_deps_state": None,
                "state": self._compute(initial_deps_state, None, None),
                "prev_state": None,
                "deps_subs": (),
                "disposed": False,
            }
        )

        collected = []
        try:
            for index, source in enumerate(self._sources):
                collected.append(source.subscribe(self._make_reaction(index)))
        except Exception:
            # Half-wired: detach from the sources reached so far.
            for unsubscribe in collected:
                unsubscribe()
            raise

        deps_subs = tuple(collected)
        self._store.set_state({"deps_subs": deps_subs})

        logger.debug(
            "%r subscribed to %d source store(s)", self._name, len(deps_subs)
        )

    # ========================================================================
    # STORE API
    # ========================================================================

    def get_state(self) -> T:
        return self._store.get_state()["state"]

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        Register `listener(state, prev_state)` for every future update.

        Each call is an independent subscription and must be undone with its
        own returned handle.
        """
        state = self._store.get_state()
        if state["disposed"]:
            raise DisposedStoreError(f"Cannot subscribe to disposed store {self._name!r}")

        token = object()
        self._store.set_state({"listeners": {**state["listeners"], token: listener}})

        def unsubscribe() -> None:
            listeners = self._store.get_state()["listeners"]
            listeners.pop(token, None)
            self._store.set_state({"listeners": listeners})

        return unsubscribe

    def set_state(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise ReadOnlyStoreError("`set_state` is not available in derived store")

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def dispose(self) -> None:
        """
        Detach from all source stores and drop every subscriber.

        Calling it again is a no-op. The last computed value remains available
        through `get_state()`.
        """
        state = self._store.get_state()
        if state["disposed"]:
            return

        self._store.set_state({"disposed": True, "listeners": {}, "deps_subs": ()})
        for unsubscribe in state["deps_subs"]:
            unsubscribe()

        logger.debug("Disposed derived store %r", self._name)

    def __enter__(self) -> "DerivedStore[T]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def deps_state(self) -> DepsState:
        return self._store.get_state()["deps_state"]

    @property
    def prev_deps_state(self) -> Optional[DepsState]:
        return self._store.get_state()["prev_deps_state"]

    @property
    def prev_state(self) -> Optional[T]:
        return self._store.get_state()["prev_state"]

    @property
    def disposed(self) -> bool:
        return self._store.get_state()["disposed"]

    @property
    def listener_count(self) -> int:
        return len(self._store.get_state()["listeners"])

    def __repr__(self) -> str:
        return (
            f"DerivedStore(name={self._name!r}, state={self.get_state()!r}, "
            f"sources={len(self._sources)})"
        )

    # ========================================================================
    # INTERNAL IMPLEMENTATION
    # ========================================================================

    def _compute(
        self,
        deps_state: DepsState,
        prev_deps_state: Optional[DepsState],
        prev_state: Optional[T],
    ) -> T:
        try:
            return self._on_change(deps_state, prev_deps_state, prev_state)
        except Exception:
            logger.debug(
                "on_change failed in derived store %r", self._name, exc_info=True
            )
            raise

    def _make_reaction(self, index: int) -> Callable[[Any, Any], None]:
        """Build the listener attached to the source store at `index`."""

        def on_source_change(dep_state: Any, _prev_dep_state: Any) -> None:
            current = self._store.get_state()
            if current["disposed"]:
                return

            current_deps_state = current["deps_state"]
            new_deps_state = (
                current_deps_state[:index] + (dep_state,) + current_deps_state[index + 1 :]
            )
            prev_state = current["state"]

            new_state = self._compute(new_deps_state, current_deps_state, prev_state)

            self._store.set_state(
                {
                    "prev_deps_state": current_deps_state,
                    "deps_state": new_deps_state,
                    "prev_state": prev_state,
                    "state": new_state,
                }
            )
            logger.debug("%r recomputed after source %d changed", self._name, index)

            listeners: Dict[object, Listener] = self._store.get_state()["listeners"]
            for listener in tuple(listeners.values()):
                listener(new_state, prev_state if prev_state is not None else new_state)

        return on_source_change


@overload
def derive(
    stores: Tuple[Store[S1]],
    on_change: Callable[[Tuple[S1], Optional[Tuple[S1]], Optional[T]], T],
    *,
    name: Optional[str] = None,
) -> DerivedStore[T]: ...


@overload
def derive(
    stores: Tuple[Store[S1], Store[S2]],
    on_change: Callable[
        [Tuple[S1, S2], Optional[Tuple[S1, S2]], Optional[T]], T
    ],
    *,
    name: Optional[str] = None,
) -> DerivedStore[T]: ...


@overload
def derive(
    stores: Tuple[Store[S1], Store[S2], Store[S3]],
    on_change: Callable[
        [Tuple[S1, S2, S3], Optional[Tuple[S1, S2, S3]], Optional[T]], T
    ],
    *,
    name: Optional[str] = None,
) -> DerivedStore[T]: ...


@overload
def derive(
    stores: Tuple[Store[S1], Store[S2], Store[S3], Store[S4]],
    on_change: Callable[
        [Tuple[S1, S2, S3, S4], Optional[Tuple[S1, S2, S3, S4]], Optional[T]], T
    ],
    *,
    name: Optional[str] = None,
) -> DerivedStore[T]: ...


@overload
def derive(
    stores: Iterable[Store[Any]],
    on_change: OnChange[T],
    *,
    name: Optional[str] = None,
) -> DerivedStore[T]: ...


def derive(stores, on_change, *, name=None):
    """
    Create a read-only store derived from `stores`.

    Args:
        stores: The source stores, in the order their values appear in
            `deps_state`. Read once, at call time.
        on_change: `on_change(deps_state, prev_deps_state, prev_state)`
            returning the derived value. Called immediately with
            `(initial_deps_state, None, None)` and again on every source
            notification.
        name: Label used in repr and log records.

    Returns:
        A DerivedStore.
    """
    return DerivedStore(stores, on_change, name=name)

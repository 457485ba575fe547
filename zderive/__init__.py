"""
zderive - Derived Reactive Stores

Small observable state containers plus `derive()`, which builds a read-only
store whose value is recomputed from other stores whenever they change.
"""

__version__ = "0.1.0"

from .derive import DerivedStore, derive
from .errors import DisposedStoreError, ReadOnlyStoreError, SetStateError, StoreError
from .store import (
    BaseStore,
    ObjectStore,
    SimpleStore,
    create_object_store,
    create_simple_store,
)
from .types import Listener, Store, Unsubscribe, is_store

__all__ = [
    # Derived stores
    "derive",
    "DerivedStore",
    # Base stores
    "BaseStore",
    "ObjectStore",
    "SimpleStore",
    "create_object_store",
    "create_simple_store",
    # Typing
    "Store",
    "Listener",
    "Unsubscribe",
    "is_store",
    # Exceptions
    "StoreError",
    "SetStateError",
    "ReadOnlyStoreError",
    "DisposedStoreError",
]

"""Exceptions raised by zderive stores."""


class StoreError(Exception):
    """Base class for all zderive errors."""

    pass


class SetStateError(StoreError):
    """Raised when a `set_state` call cannot be honoured."""

    pass


class ReadOnlyStoreError(SetStateError):
    """Raised when `set_state` is called on a derived store."""

    pass


class DisposedStoreError(StoreError):
    """Raised when subscribing to a derived store that has been disposed."""

    pass

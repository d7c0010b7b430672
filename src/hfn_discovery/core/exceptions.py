"""Exceptions for conditions callers are not expected to handle inline."""


class DiscoveryError(Exception):
    """Base class for all package level exceptions."""


class PersistenceError(DiscoveryError):
    """Raised by storage adapters when a read or write fails."""


class CorruptStoreError(DiscoveryError):
    """Raised when persisted data cannot be deserialized.

    Callers should treat this as a cue to reset the store to empty.
    """


class ProviderError(DiscoveryError):
    """Raised by search providers on transport or payload errors."""


__all__ = ["DiscoveryError", "PersistenceError", "CorruptStoreError", "ProviderError"]

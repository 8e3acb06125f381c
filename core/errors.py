from __future__ import annotations


class RecentsError(Exception):
    """Base exception for the recent project manager."""


class StoreError(RecentsError):
    """The underlying key/value store rejected an operation."""


class NamespaceNotFound(StoreError):
    """The namespace holding the recent entries does not exist."""


class KeyNotFound(StoreError):
    """A value disappeared between enumeration and lookup."""


class DecodeWarning(RecentsError):
    """A single stored value could not be decoded into an entry."""


class LoadFailure(RecentsError):
    """Loading failed for a reason other than a missing namespace."""


class WriteFailure(RecentsError):
    """Saving could not be completed; persisted state may be partial."""


class KeyCollision(WriteFailure):
    """Two entries would be written under the same key."""

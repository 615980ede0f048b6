"""
Error taxonomy for the local state store.

Callers are expected to treat `NotFoundError` as the normal first-run
condition and surface every other kind as a failure.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base error for the local state store."""


class LocationError(StoreError):
    """The per-app data directory could not be determined or created."""


class IoError(StoreError):
    """Reading or writing the data file failed (cause is the underlying OSError)."""


class SerializationError(StoreError):
    """The payloads could not be encoded as JSON."""


class DeserializationError(StoreError):
    """The data file exists but does not contain a valid envelope."""


class NotFoundError(StoreError):
    """No data file has been written yet."""

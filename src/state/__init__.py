"""
Envelope model and local-disk persistence for application state.

The envelope wraps two opaque payloads (subscriptions, settings) with format
metadata and is stored as pretty-printed JSON in the per-app data directory.
"""

from .models import Envelope, FORMAT_VERSION
from .local_store import LocalStateStore

__all__ = ["Envelope", "FORMAT_VERSION", "LocalStateStore"]

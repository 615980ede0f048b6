from __future__ import annotations

from datetime import datetime, UTC
from typing import Any, Optional

from pydantic import BaseModel, Field


FORMAT_VERSION = "1.0.0"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """RFC3339 timestamp in UTC with an explicit "+00:00" offset."""
    dt = now or datetime.now(UTC)
    return dt.astimezone(UTC).isoformat()


class Envelope(BaseModel):
    """
    Versioned wrapper written to the data file.

    Fields
    - subscriptions: caller-owned payload, stored and returned untouched.
    - settings: caller-owned payload, independent of `subscriptions`.
    - version: envelope format written by the store ("" on files that predate it).
    - last_saved: RFC3339 UTC time of the save that produced the file ("" if absent).

    Notes
    - `version` and `last_saved` are stamped by the store on every save; a
      version found on disk is never carried forward.
    - Unknown top-level keys are ignored on read.
    """

    subscriptions: Any = Field(description="Subscriptions payload (opaque)")
    settings: Any = Field(description="Settings payload (opaque)")
    version: str = Field(default="", description="Envelope format version")
    last_saved: str = Field(default="", description="RFC3339 save timestamp")

    @classmethod
    def stamped(cls, subscriptions: Any, settings: Any, *, now: Optional[datetime] = None) -> "Envelope":
        """Build a fresh envelope carrying the current format version and save time."""
        return cls(
            subscriptions=subscriptions,
            settings=settings,
            version=FORMAT_VERSION,
            last_saved=utc_timestamp(now),
        )

    @property
    def last_saved_at(self) -> Optional[datetime]:
        if not self.last_saved:
            return None
        try:
            dt = datetime.fromisoformat(self.last_saved)
        except ValueError:
            return None
        # Naive timestamps were never written by the store; read them as UTC.
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt

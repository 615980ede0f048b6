from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from common.errors import (
    DeserializationError,
    IoError,
    LocationError,
    NotFoundError,
    SerializationError,
)
from common.paths import DataPathResolver

from .models import Envelope


logger = logging.getLogger(__name__)


def _dump_envelope_json(envelope: Envelope) -> bytes:
    # Pretty-printed for human diffs; strict JSON (no NaN/Infinity).
    try:
        text = json.dumps(envelope.model_dump(), indent=2, ensure_ascii=False, allow_nan=False)
        return (text + "\n").encode("utf-8")
    except (TypeError, ValueError, RecursionError) as ex:
        raise SerializationError(f"Failed to serialize data: {ex}") from ex


def _load_envelope_json(text: str) -> Envelope:
    raw = json.loads(text)
    return Envelope.model_validate(raw)


def _fsync_dir(path: Path) -> None:
    # Persist the rename itself; directories cannot be opened this way on Windows.
    if os.name != "posix":
        return
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write `data` to `path` so readers see either the old or the new file.

    The content goes to a uniquely named sibling temp file, is fsynced, then
    moved over `path` with `os.replace`. On failure the temp file is removed
    and the existing file is left as it was.

    Permissions: an existing file keeps its mode. A file created by the first
    save is owner-only (0600), the mode `tempfile` creates files with.
    """
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        try:
            previous_mode = stat.S_IMODE(os.stat(path).st_mode)
        except FileNotFoundError:
            previous_mode = None
        if previous_mode is not None:
            os.chmod(tmp_path, previous_mode)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as ex:
        logger.warning("Failed to write %s: %s", path, ex)
        raise IoError(f"Failed to write file {path}: {ex}") from ex
    finally:
        if tmp_path is not None:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as cleanup_ex:
                logger.warning("Could not remove temp file %s: %s", tmp_path, cleanup_ex)

    try:
        _fsync_dir(path.parent)
    except OSError as ex:
        # The new file is already in place; only durability of the rename is in doubt.
        logger.warning("Could not fsync directory %s: %s", path.parent, ex)


class LocalStateStore:
    """
    Local-disk persistence for `Envelope`.

    Usage
    - `save(subscriptions, settings)` stamps version/time, writes atomically and
      returns the data file path.
    - `load()` returns the stored envelope verbatim. Raises `NotFoundError` when
      nothing was saved yet, `DeserializationError` when the file is corrupt.
    - `exists()` and `display_path()` only resolve the path (creating the data
      directory if needed).

    The store keeps no state between calls and never deletes or rewrites a
    corrupt file on its own. Callers must serialize mutating calls.
    """

    def __init__(
        self,
        resolver: Optional[DataPathResolver] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._resolver = resolver or DataPathResolver()
        self._clock = clock or (lambda: datetime.now(UTC))

    # -------- Core operations --------
    def save(self, subscriptions: Any, settings: Any) -> Path:
        """Persist both payloads; returns the path written.

        Raises:
        - SerializationError if a payload is not JSON-representable.
        - IoError if the file cannot be written.
        - LocationError if the data directory is unavailable.
        """
        path = self._resolver.resolve_path()
        envelope = Envelope.stamped(subscriptions, settings, now=self._clock())
        data = _dump_envelope_json(envelope)
        _atomic_write_bytes(path, data)
        logger.info("Data saved to %s", path)
        return path

    def load(self) -> Envelope:
        """Read the stored envelope.

        Raises:
        - NotFoundError if no data file exists.
        - IoError if the file exists but cannot be read.
        - DeserializationError if the content is not a valid envelope.
        - LocationError if the data directory is unavailable.
        """
        path = self._resolver.resolve_path()
        try:
            present = path.exists()
        except OSError as ex:
            raise IoError(f"Failed to read file {path}: {ex}") from ex
        if not present:
            raise NotFoundError(f"No saved data found at {path}")

        logger.debug("Loading data from %s", path)
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as ex:
            logger.warning("Data file %s is not valid UTF-8", path)
            raise DeserializationError(f"Failed to parse data: {ex}") from ex
        except OSError as ex:
            raise IoError(f"Failed to read file {path}: {ex}") from ex

        try:
            envelope = _load_envelope_json(content)
        except (ValueError, ValidationError, RecursionError) as ex:
            logger.warning("Data file %s is not a valid envelope", path)
            raise DeserializationError(f"Failed to parse data: {ex}") from ex

        logger.debug("Loaded envelope version=%r last_saved=%r", envelope.version, envelope.last_saved)
        return envelope

    def exists(self) -> bool:
        path = self._resolver.resolve_path()
        try:
            return path.exists()
        except OSError as ex:
            # Data dir exists but cannot be searched
            raise LocationError(f"Failed to access app data dir {path.parent}: {ex}") from ex

    def display_path(self) -> Path:
        return self._resolver.resolve_path()

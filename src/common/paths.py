from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

from platformdirs import user_data_dir

from .errors import LocationError


logger = logging.getLogger(__name__)

APP_NAME = "subscription-tracker"
DATA_FILENAME = "subscription-data.json"

DirProvider = Callable[[], Optional[Union[str, os.PathLike]]]


def platform_data_dir(app_name: str = APP_NAME) -> Path:
    # Roaming on Windows (%APPDATA%), XDG_DATA_HOME on Linux,
    # ~/Library/Application Support on macOS.
    return Path(user_data_dir(app_name, appauthor=False, roaming=True))


class DataPathResolver:
    """
    Resolves the single canonical path of the data file.

    - `dir_provider` returns the per-app data directory (or None when the host
      has none). Defaults to the platform data directory for `app_name`.
    - `resolve_path()` creates the directory (and parents) on every call; it
      never touches the data file itself.
    """

    def __init__(
        self,
        dir_provider: Optional[DirProvider] = None,
        *,
        app_name: str = APP_NAME,
        filename: str = DATA_FILENAME,
    ) -> None:
        self._provider = dir_provider or (lambda: platform_data_dir(app_name))
        self._filename = filename

    @property
    def filename(self) -> str:
        return self._filename

    def data_dir(self) -> Path:
        """Return the absolute data directory without creating it."""
        try:
            raw = self._provider()
        except Exception as ex:
            raise LocationError(f"Failed to get app data dir: {ex}") from ex
        if raw is None or str(raw) == "":
            raise LocationError("Failed to get app data dir: host provided no data directory")
        try:
            return Path(raw).expanduser().resolve()
        except (OSError, RuntimeError) as ex:
            # Unknown "~user", or a relative path with a vanished cwd
            raise LocationError(f"Failed to get app data dir {raw}: {ex}") from ex

    def resolve_path(self) -> Path:
        data_dir = self.data_dir()
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise LocationError(f"Failed to create app data dir {data_dir}: {ex}") from ex

        path = data_dir / self._filename
        logger.debug("Resolved data file path: %s", path)
        return path

from __future__ import annotations

import os
from pathlib import Path

import pytest

import common.paths as paths_mod
from common.errors import LocationError
from common.paths import DATA_FILENAME, DataPathResolver


def test_resolve_creates_missing_directory(tmp_path: Path):
    data_dir = tmp_path / "a" / "b" / "app"
    resolver = DataPathResolver(lambda: data_dir)

    path = resolver.resolve_path()

    assert path == data_dir.resolve() / DATA_FILENAME
    assert path.is_absolute()
    assert data_dir.is_dir()
    assert not path.exists()  # never creates the data file


def test_resolve_is_idempotent(tmp_path: Path):
    resolver = DataPathResolver(lambda: tmp_path / "app")

    first = resolver.resolve_path()
    second = resolver.resolve_path()
    assert first == second


def test_relative_directory_is_made_absolute(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    resolver = DataPathResolver(lambda: "rel-data")

    path = resolver.resolve_path()
    assert path == tmp_path.resolve() / "rel-data" / DATA_FILENAME


def test_custom_filename(tmp_path: Path):
    resolver = DataPathResolver(lambda: tmp_path, filename="other.json")
    assert resolver.filename == "other.json"
    assert resolver.resolve_path().name == "other.json"


def test_provider_returning_none_raises_location_error():
    resolver = DataPathResolver(lambda: None)
    with pytest.raises(LocationError):
        resolver.resolve_path()


def test_provider_failure_raises_location_error():
    def broken():
        raise RuntimeError("no home directory")

    resolver = DataPathResolver(broken)
    with pytest.raises(LocationError) as exc_info:
        resolver.resolve_path()
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_file_in_place_of_directory_raises_location_error(tmp_path: Path):
    blocker = tmp_path / "app"
    blocker.write_text("not a directory", encoding="utf-8")

    resolver = DataPathResolver(lambda: blocker)
    with pytest.raises(LocationError):
        resolver.resolve_path()
    assert blocker.is_file()


def test_default_provider_uses_platform_data_dir(tmp_path: Path, monkeypatch):
    calls = []

    def fake_user_data_dir(appname, appauthor=None, roaming=False):
        calls.append((appname, appauthor, roaming))
        return str(tmp_path / appname)

    monkeypatch.setattr(paths_mod, "user_data_dir", fake_user_data_dir)

    path = DataPathResolver(app_name="my-app").resolve_path()
    assert path == tmp_path.resolve() / "my-app" / DATA_FILENAME
    assert calls == [("my-app", False, True)]


@pytest.mark.skipif(os.name != "posix", reason="~user expansion via pwd")
def test_unknown_home_user_raises_location_error():
    resolver = DataPathResolver(lambda: "~no-such-user-for-data-dir/app")
    with pytest.raises(LocationError):
        resolver.resolve_path()


@pytest.mark.skipif(os.name != "posix", reason="cwd cannot be removed on Windows")
def test_relative_directory_with_vanished_cwd_raises_location_error(tmp_path: Path, monkeypatch):
    gone = tmp_path / "gone"
    gone.mkdir()
    monkeypatch.chdir(gone)
    gone.rmdir()

    resolver = DataPathResolver(lambda: "rel-data")
    with pytest.raises(LocationError):
        resolver.resolve_path()

"""
Shared pytest fixtures and test doubles.

No network, no mpv, no real home directories: every path the package writes to
is redirected into tmp_path.
"""
import asyncio

import pytest

from ply101 import config
from ply101.errors import BackendError
from ply101.models import TrackSnapshot


class FakeBackend:
    """Records every command; commands listed in fail_on raise BackendError."""

    def __init__(self, fail_on=()):
        self.calls: list[tuple] = []
        self.fail_on = set(fail_on)

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise BackendError(f"{name} refused")

    def play_stream(self, url):
        self._record("play_stream", url)

    def mute(self):
        self._record("mute")

    def unmute(self):
        self._record("unmute")

    def stop(self):
        self._record("stop")

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeFetcher:
    """Returns queued (snapshot, error) pairs, one per fetch."""

    def __init__(self, results):
        self.results = list(results)
        self.channels: list[int] = []

    async def fetch(self, channel_id):
        self.channels.append(channel_id)
        return self.results.pop(0)


def make_snapshot(track_id=1, finish=1000, server=995, **kw) -> TrackSnapshot:
    fields = dict(
        track_id=track_id,
        title=f"Song {track_id}",
        artist="Artist",
        album_title="Album",
        album_release_date="2001",
        play_url=f"http://cdn1.101.ru/vardata/modules/musicdb/files/{track_id}.mp3",
        song_start_time=server - 60,
        song_finish_time=finish,
        server_time=server,
    )
    fields.update(kw)
    return TrackSnapshot(**fields)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(config, "CACHE_DIR", tmp_path / "cache")
    monkeypatch.setattr(config, "HOTKEY_CONFIG", tmp_path / "config" / "hotkey.json")
    monkeypatch.setattr(config, "DIRECTORY_CACHE", tmp_path / "cache" / "data.json")
    monkeypatch.setattr(config, "ERRORS_LOG", tmp_path / "cache" / "errors.log")
    monkeypatch.setattr(config, "DEV_MODE", False)
    return tmp_path


@pytest.fixture
def backend():
    return FakeBackend()

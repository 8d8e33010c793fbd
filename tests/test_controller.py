import asyncio
import json

from ply101 import config
from ply101.controller import PlaybackController
from ply101.models import PlaybackState

from conftest import FakeBackend, make_snapshot, run


class TestTransitions:
    def test_starts_stopped(self, backend):
        assert PlaybackController(backend).state is PlaybackState.STOPPED

    def test_start_plays_the_snapshot_url(self, backend):
        ctl = PlaybackController(backend)
        snap = make_snapshot(7)
        run(ctl.start(snap))
        assert ctl.state is PlaybackState.PLAYING
        assert backend.calls == [("play_stream", snap.play_url)]

    def test_pause_mutes_without_stopping(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot())
            await ctl.pause()

        run(scenario())
        assert ctl.state is PlaybackState.PAUSED
        assert backend.names() == ["play_stream", "mute"]

    def test_pause_is_ignored_unless_playing(self, backend):
        ctl = PlaybackController(backend)
        run(ctl.pause())
        assert ctl.state is PlaybackState.STOPPED
        assert backend.calls == []

    def test_resume_unmutes(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot())
            await ctl.pause()
            await ctl.resume()

        run(scenario())
        assert ctl.state is PlaybackState.PLAYING
        assert backend.names() == ["play_stream", "mute", "unmute"]

    def test_stop_commands_backend_twice(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot())
            await ctl.stop()

        run(scenario())
        assert ctl.state is PlaybackState.STOPPED
        assert backend.names() == ["play_stream", "stop", "stop"]

    def test_start_while_paused_stays_paused(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot(1))
            await ctl.pause()
            await ctl.start(make_snapshot(2))

        run(scenario())
        assert ctl.state is PlaybackState.PAUSED
        assert backend.names() == ["play_stream", "mute", "play_stream", "mute"]

    def test_pause_survives_a_track_change_restart(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot(1))
            await ctl.pause()
            await ctl.stop()
            await ctl.start(make_snapshot(2))

        run(scenario())
        assert ctl.state is PlaybackState.PAUSED
        assert backend.names()[-2:] == ["play_stream", "mute"]

    def test_resume_while_stopped_clears_the_remembered_pause(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot(1))
            await ctl.pause()
            await ctl.stop()
            await ctl.resume()
            await ctl.start(make_snapshot(2))

        run(scenario())
        assert ctl.state is PlaybackState.PLAYING


class TestToggle:
    def test_toggle_from_stopped_resumes(self, backend):
        ctl = PlaybackController(backend)
        run(ctl.toggle())
        assert ctl.state is PlaybackState.PLAYING
        assert backend.names() == ["unmute"]

    def test_toggle_from_playing_pauses_and_back(self, backend):
        ctl = PlaybackController(backend)
        states = []

        async def scenario():
            await ctl.start(make_snapshot())
            await ctl.toggle()
            states.append(ctl.state)
            await ctl.toggle()
            states.append(ctl.state)

        run(scenario())
        assert states == [PlaybackState.PAUSED, PlaybackState.PLAYING]

    def test_concurrent_toggles_are_serialized(self, backend):
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot())
            await asyncio.gather(*(ctl.toggle() for _ in range(5)))

        run(scenario())
        # Odd number of toggles from Playing ends Paused, with strictly alternating commands
        assert ctl.state is PlaybackState.PAUSED
        assert backend.names()[1:] == ["mute", "unmute", "mute", "unmute", "mute"]


class TestBackendFailures:
    def test_failure_is_logged_and_state_still_moves(self):
        backend = FakeBackend(fail_on={"play_stream"})
        ctl = PlaybackController(backend)
        run(ctl.start(make_snapshot(3)))

        assert ctl.state is PlaybackState.PLAYING
        lines = config.ERRORS_LOG.read_text().splitlines()
        entry = json.loads(lines[-1])
        assert entry["stage"] == "playback"
        assert "play_stream refused" in entry["error"]
        assert entry["url"].endswith("/3.mp3")

    def test_failed_mute_still_pauses(self):
        backend = FakeBackend(fail_on={"mute"})
        ctl = PlaybackController(backend)

        async def scenario():
            await ctl.start(make_snapshot())
            await ctl.pause()

        run(scenario())
        assert ctl.state is PlaybackState.PAUSED

    def test_shutdown_never_raises(self):
        backend = FakeBackend(fail_on={"stop"})
        ctl = PlaybackController(backend)
        run(ctl.shutdown())
        assert ctl.state is PlaybackState.STOPPED
        assert backend.names() == ["stop", "stop"]

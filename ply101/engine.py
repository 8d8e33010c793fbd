"""Sync loop — keeps playback on the channel's track-on-air, forever.

fetch → compare track id → (stop + detached start + notify) → pause-aware wait.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from . import ui
from .controller import PlaybackController
from .fetcher import MetadataFetcher
from .interval import next_interval
from .models import TrackSnapshot
from .waiter import wait_while_playing

logger = logging.getLogger(__name__)


class SyncLoop:
    def __init__(
        self,
        channel_id: int,
        fetcher: MetadataFetcher,
        controller: PlaybackController,
        notify: Callable[[TrackSnapshot, int], None] = ui.print_now_playing,
        wait: Callable[..., Awaitable] = wait_while_playing,
    ):
        self.channel_id = channel_id
        self.fetcher = fetcher
        self.controller = controller
        self.notify = notify
        self.wait = wait

        self.last_track_id = None
        self.start_task: Optional[asyncio.Task] = None

    async def run(self):
        """Never returns; cancelled on shutdown."""
        while True:
            interval = await self.step()
            logger.debug("Next fetch after %d seconds", interval)
            await self.wait(interval, lambda: self.controller.state)

    async def step(self) -> int:
        """One fetch/compare pass. Returns seconds until the next fetch."""
        snapshot, error = await self.fetcher.fetch(self.channel_id)
        if error is not None:
            logger.debug("Got error during fetch channel info: %s", error)
            return next_interval(False)

        interval = next_interval(
            True,
            snapshot.song_start_time,
            snapshot.song_finish_time,
            snapshot.server_time,
        )
        if not snapshot.same_track(self.last_track_id):
            logger.debug("Fetch remote data %r", snapshot)
            await self.controller.stop()
            self._launch_start(snapshot)
            self.last_track_id = snapshot.track_id
            self.notify(snapshot, interval)
        return interval

    def _launch_start(self, snapshot: TrackSnapshot):
        # Starting mpv can block on network/codec setup; the loop moves on to its wait
        self.start_task = asyncio.create_task(self.controller.start(snapshot))
        self.start_task.add_done_callback(self._on_start_done)

    @staticmethod
    def _on_start_done(task: asyncio.Task):
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Playback start failed: %s", exc)
            ui.print_playback_error(f"Playback start failed: {exc}")

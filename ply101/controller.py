"""Playback state machine — Stopped / Playing / Paused behind a single lock.

Both the sync loop and the hotkey handler drive the backend, so every
transition (and its backend call) runs while holding ``self._lock``.
Backend calls block, so they go to the default executor.
"""
import asyncio
import logging
from typing import Callable

from .errors import BackendError, format_error
from .models import PlaybackState, TrackSnapshot

logger = logging.getLogger(__name__)


class PlaybackController:
    def __init__(self, backend):
        """backend: anything with play_stream(url), mute(), unmute(), stop()."""
        self.backend = backend
        self._state = PlaybackState.STOPPED
        self._lock = asyncio.Lock()
        # A pause in effect when the loop stops for a track change survives the restart
        self._paused_before_stop = False

    @property
    def state(self) -> PlaybackState:
        return self._state

    # ── Transitions ──────────────────────────────────────────────────────────

    async def start(self, snapshot: TrackSnapshot):
        async with self._lock:
            keep_paused = self._state is PlaybackState.PAUSED or self._paused_before_stop
            await self._call("play_stream", self.backend.play_stream, snapshot.play_url)
            if keep_paused:
                await self._call("mute", self.backend.mute)
                self._state = PlaybackState.PAUSED
                logger.debug("Play sig (kept paused): %s", snapshot.play_url)
            else:
                self._state = PlaybackState.PLAYING
                logger.debug("Play sig: %s", snapshot.play_url)
            self._paused_before_stop = False

    async def pause(self):
        async with self._lock:
            await self._pause()

    async def resume(self):
        async with self._lock:
            await self._resume()

    async def stop(self):
        async with self._lock:
            self._paused_before_stop = self._state is PlaybackState.PAUSED
            # Twice: the backend must really let go of the audio device
            await self._call("stop", self.backend.stop)
            await self._call("stop", self.backend.stop)
            self._state = PlaybackState.STOPPED
            logger.debug("Stop sig.")

    async def toggle(self):
        """Hotkey handler: resume when stopped or paused, otherwise pause."""
        async with self._lock:
            if self._state in (PlaybackState.STOPPED, PlaybackState.PAUSED):
                await self._resume()
            else:
                await self._pause()

    async def shutdown(self):
        """Best-effort stop on process exit. Failures are logged, not retried."""
        await self.stop()
        logger.debug("Cleanup sig.")

    # ── Internals (lock held) ────────────────────────────────────────────────

    async def _pause(self):
        if self._state is not PlaybackState.PLAYING:
            logger.debug("Pause ignored in state %s", self._state.name)
            return
        # Live radio: mute only, so resume lands on the current broadcast point
        await self._call("mute", self.backend.mute)
        self._state = PlaybackState.PAUSED
        logger.debug("Pause sig.")

    async def _resume(self):
        if self._state is PlaybackState.PLAYING:
            return
        await self._call("unmute", self.backend.unmute)
        self._state = PlaybackState.PLAYING
        self._paused_before_stop = False
        logger.debug("Resume sig.")

    async def _call(self, name: str, fn: Callable, *args) -> bool:
        """Run a blocking backend call off the loop. Errors are logged, never raised."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, fn, *args)
            return True
        except (BackendError, OSError) as e:
            format_error("playback", f"{name}: {e}", url=args[0] if args else None)
            return False

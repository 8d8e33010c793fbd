"""Pause-aware countdown: time only passes while the radio is audible."""
import asyncio
from typing import Awaitable, Callable

from .models import PlaybackState


async def wait_while_playing(
    target_seconds: int,
    state_reader: Callable[[], PlaybackState],
    tick: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Block until target_seconds of *playing* time have elapsed.

    Wakes once per tick and reads the state; ticks spent Paused or Stopped
    do not count. Returns the number of ticks actually slept.
    """
    counter = 0
    ticks = 0
    while True:
        await sleep(tick)
        ticks += 1
        if state_reader() is PlaybackState.PLAYING:
            counter += 1
        if counter >= target_seconds:
            return ticks

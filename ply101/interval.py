"""Adaptive poll interval from the server's own song timing."""

FALLBACK_INTERVAL = 5
MIN_REMAINING = 5
MAX_REMAINING = 1800   # anything longer than half an hour is bogus timing
SAFETY_MARGIN = 3      # poll slightly before the server thinks the song ends


def next_interval(
    success: bool,
    start_song: int = 0,
    finish_song: int = 0,
    server_time: int = 0,
) -> int:
    """Seconds to wait before the next track-on-air fetch. Always >= 2."""
    if not success:
        return FALLBACK_INTERVAL
    diff = finish_song - server_time
    if diff < MIN_REMAINING or diff > MAX_REMAINING:
        return FALLBACK_INTERVAL
    return diff - SAFETY_MARGIN

"""Track-on-air fetcher — one GET per poll, no retries."""
import logging
import re
from typing import Optional

import httpx

from .config import BASE_ORIGIN, HTTP_TIMEOUT
from .errors import FetchError
from .models import TrackSnapshot

logger = logging.getLogger(__name__)

TRACK_ON_AIR_PATH = "/api/channel/getTrackOnAir/{channel_id}/channel/?dataFormat=json"

# Upstream sometimes doubles this prefix:
# http://cdn*.101.ru/vardata/modules/musicdb/files//vardata/modules/musicdb/files/*
MUSICDB_SEGMENT = "/vardata/modules/musicdb/files/"

_ABSOLUTE_RE = re.compile(r"http:(.)")


def normalize_play_url(filename: str, origin: str = BASE_ORIGIN) -> str:
    """Make the audio filename an absolute stream URL."""
    url = filename if _ABSOLUTE_RE.search(filename) else origin + filename
    # Only the known double-prefix bug is repaired; three or more is left alone
    if url.count(MUSICDB_SEGMENT) == 2:
        url = url.replace(MUSICDB_SEGMENT, "", 1)
    return url


def _as_int(value, field: str) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise FetchError(f"non-integer {field}: {value!r}")


def parse_track_info(data, origin: str = BASE_ORIGIN) -> TrackSnapshot:
    """Turn the decoded JSON envelope into a TrackSnapshot or raise FetchError."""
    if not isinstance(data, dict):
        raise FetchError("response is not a JSON object")
    logger.debug("Envelope status=%s errorCode=%s", data.get("status"), data.get("errorCode"))

    result = data.get("result")
    if not isinstance(result, dict) or not isinstance(result.get("about"), dict):
        raise FetchError("response has no result.about block")
    about = result["about"]

    audio = about.get("audio") or []
    if not isinstance(audio, list) or not audio or not isinstance(audio[0], dict):
        raise FetchError("track has no audio assets")
    first = audio[0]
    track_id = first.get("trackuid")
    filename = first.get("filename")
    if track_id is None or not filename:
        raise FetchError("audio asset lacks trackuid or filename")

    album = about.get("album") or {}
    if not isinstance(album, dict):
        album = {}
    stat = result.get("stat") or {}
    if not isinstance(stat, dict):
        raise FetchError("stat block is not an object")

    return TrackSnapshot(
        track_id=track_id,
        title=about.get("title") or "",
        artist=about.get("title_executor") or "",
        album_title=album.get("title") or "",
        album_release_date=album.get("releaseDate") or "",
        play_url=normalize_play_url(str(filename), origin),
        song_start_time=_as_int(stat.get("startSong"), "startSong"),
        song_finish_time=_as_int(stat.get("finishSong"), "finishSong"),
        server_time=_as_int(stat.get("serverTime"), "serverTime"),
    )


class MetadataFetcher:
    def __init__(
        self,
        origin: str = BASE_ORIGIN,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.origin = origin.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def track_url(self, channel_id: int) -> str:
        return self.origin + TRACK_ON_AIR_PATH.format(channel_id=channel_id)

    async def fetch(self, channel_id: int) -> tuple[Optional[TrackSnapshot], Optional[FetchError]]:
        """
        GET the channel's track-on-air document.
        Returns (snapshot, None) on success, (None, error) otherwise.
        """
        url = self.track_url(channel_id)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                r = await client.get(url)
            if not r.is_success:
                return None, FetchError(f"HTTP {r.status_code} from {url}")
            return parse_track_info(r.json(), self.origin), None

        except httpx.TimeoutException:
            return None, FetchError(f"timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            return None, FetchError(f"HTTP error: {e}")
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            return None, FetchError(f"malformed JSON: {e}")
        except FetchError as e:
            return None, e

"""Value types shared by the fetcher, controller and loop."""
from dataclasses import dataclass
from enum import Enum, auto


class PlaybackState(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


@dataclass(frozen=True)
class TrackSnapshot:
    """One answer from the track-on-air endpoint. Compared by track_id only."""
    track_id: int
    title: str
    artist: str
    album_title: str
    album_release_date: str
    play_url: str
    song_start_time: int = 0
    song_finish_time: int = 0
    server_time: int = 0

    def same_track(self, track_id) -> bool:
        return self.track_id == track_id


@dataclass
class Channel:
    id: int
    title: str


@dataclass
class ChannelGroup:
    id: int
    title: str
    channels: dict[int, Channel]

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Title": self.title,
            "Channels": {str(c.id): {"Id": c.id, "Title": c.title} for c in self.channels.values()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChannelGroup":
        channels = {
            int(c["Id"]): Channel(int(c["Id"]), c.get("Title", ""))
            for c in (data.get("Channels") or {}).values()
        }
        return cls(int(data["Id"]), data.get("Title", ""), channels)

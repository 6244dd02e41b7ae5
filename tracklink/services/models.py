from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote


@dataclass(frozen=True)
class TrackReference:
    artist: str
    title: str
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def display_name(self) -> str:
        return f"{self.artist} - {self.title}"

    @property
    def has_valid_range(self) -> bool:
        """False when an end time is present but not after the start."""
        if self.end is None:
            return True
        return self.start is not None and self.end > self.start


@dataclass(frozen=True)
class MediaIdentity:
    """What the player reports as the active media. Compared by value."""

    track_id: str
    url: str

    @property
    def is_known(self) -> bool:
        """False while the player reports neither a track id nor a URL (still loading)."""
        return bool(self.track_id or self.url)

    def matches(self, uri: str) -> bool:
        """Whether this is the media opened from `uri`. Players that report no URL always match."""
        if not self.url:
            return True
        return unquote(self.url) == unquote(uri)


@dataclass(frozen=True)
class MediaSnapshot:
    identity: MediaIdentity
    artist: str
    title: str
    position: float


@dataclass
class VideoMatch:
    video_id: str
    title: str
    channel: str

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"

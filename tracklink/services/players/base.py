"""
Media control port: the player capabilities the playback controller needs.
Each binding (mpd via mpc, MPRIS over D-Bus) implements this.
"""
from abc import ABC, abstractmethod
from pathlib import Path

from tracklink.services.models import MediaIdentity, MediaSnapshot


class ControlUnavailable(Exception):
    """The player could not be reached or rejected a request."""


class SeekUnsupported(ControlUnavailable):
    """The player cannot seek yet, typically because media is still loading."""


class MediaControlPort(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        """Binding name, e.g. 'mpd' or 'mpris'."""

    @abstractmethod
    async def current_media_identity(self) -> MediaIdentity:
        """Identity of the active media. Raises ControlUnavailable if no player is reachable."""

    @abstractmethod
    async def current_position(self) -> float:
        """Playback position in seconds."""

    @abstractmethod
    async def now_playing(self) -> MediaSnapshot:
        """Identity, artist, title and position in one read."""

    @abstractmethod
    async def open(self, uri: str) -> None:
        """
        Start loading and playing `uri`.
        Returns before playback has necessarily started.
        """

    @abstractmethod
    async def seek(self, position: float, identity: MediaIdentity) -> None:
        """Absolute seek within the media identified by `identity`."""

    @abstractmethod
    async def pause(self) -> None:
        """Pause at the current position."""

    def uri_for(self, path: Path) -> str:
        """The URI this player expects (and later reports) for a local file."""
        return Path(path).resolve().as_uri()

    async def close(self) -> None:
        pass

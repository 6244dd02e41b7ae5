"""
Shared fakes: an in-memory media control port and a recording sleep.
"""
from pathlib import Path
from typing import Callable, Optional

import pytest

from tracklink.services.models import MediaIdentity, MediaSnapshot
from tracklink.services.players.base import MediaControlPort, SeekUnsupported


class FakePort(MediaControlPort):
    """Records every call. Opening a URI makes it the active media unless `switches` is False."""

    name = "fake"

    def __init__(self, positions=(0.0,), switches: bool = True):
        self.calls: list = []
        self.identity = MediaIdentity(track_id="/track/0", url="file:///music/previous.mp3")
        self.positions = list(positions)
        self.switches = switches
        self.seek_errors: list[Exception] = []
        self.position_error: Optional[Exception] = None
        self.artist = ""
        self.title = ""

    def uri_for(self, path: Path) -> str:
        return f"file://{path}"

    async def current_media_identity(self) -> MediaIdentity:
        self.calls.append("identity")
        return self.identity

    async def current_position(self) -> float:
        self.calls.append("position")
        if self.position_error is not None:
            raise self.position_error
        if len(self.positions) > 1:
            return self.positions.pop(0)
        return self.positions[0]

    async def now_playing(self) -> MediaSnapshot:
        return MediaSnapshot(
            identity=self.identity,
            artist=self.artist,
            title=self.title,
            position=self.positions[0],
        )

    async def open(self, uri: str) -> None:
        self.calls.append(("open", uri))
        if self.switches:
            self.identity = MediaIdentity(track_id="/track/1", url=uri)

    async def seek(self, position: float, identity: MediaIdentity) -> None:
        self.calls.append(("seek", position, identity.track_id))
        if self.seek_errors:
            raise self.seek_errors.pop(0)

    async def pause(self) -> None:
        self.calls.append("pause")


class SlowLoadingPort(FakePort):
    """
    Reports an empty identity for the first `loading_reads` reads after open,
    and, like MPRIS, rejects seeks until it has a track id.
    """

    def __init__(self, loading_reads: int = 1, **kwargs):
        super().__init__(**kwargs)
        self.loading_reads = loading_reads
        self._loaded: Optional[MediaIdentity] = None

    async def open(self, uri: str) -> None:
        await super().open(uri)
        self._loaded, self.identity = self.identity, MediaIdentity(track_id="", url="")

    async def current_media_identity(self) -> MediaIdentity:
        identity = await super().current_media_identity()
        if self._loaded is not None:
            if self.loading_reads > 0:
                self.loading_reads -= 1
            else:
                self.identity, self._loaded = self._loaded, None
                identity = self.identity
        return identity

    async def seek(self, position: float, identity: MediaIdentity) -> None:
        self.calls.append(("seek", position, identity.track_id))
        if not identity.track_id:
            raise SeekUnsupported("no track id yet")


class RecordingSleep:
    """Stands in for asyncio.sleep; records delays and runs an optional hook per call."""

    def __init__(self):
        self.delays: list[float] = []
        self.hook: Optional[Callable[[int], None]] = None

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.hook is not None:
            self.hook(len(self.delays))


@pytest.fixture
def fake_port() -> FakePort:
    return FakePort()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()

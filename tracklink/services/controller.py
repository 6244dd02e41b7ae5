"""
Playback controller.

    Idle -> Opening -> (Seeking)? -> (Watching)* -> Stopped

Opens a file on the media control port, seeks to the start time, and when an
end time is given runs a watchdog task that pauses playback once the position
reaches it. A controller drives exactly one session and is then discarded.
"""
import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Coroutine, Optional

from tracklink.services.models import MediaIdentity
from tracklink.services.players.base import ControlUnavailable, MediaControlPort, SeekUnsupported

logger = logging.getLogger(__name__)

COARSE_INTERVAL_SECONDS = 5.0
FINE_WINDOW_SECONDS = 6.0
MIN_DELAY_SECONDS = 0.001


class SessionState(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    SEEKING = "seeking"
    WATCHING = "watching"
    STOPPED = "stopped"


def next_check_delay(
    remaining: float,
    coarse_interval: float = COARSE_INTERVAL_SECONDS,
    fine_window: float = FINE_WINDOW_SECONDS,
) -> Optional[float]:
    """
    Seconds until the next watchdog check, or None when the end time is reached.
    Inside the fine window each wait covers 90% of what is left.
    """
    if remaining <= 0:
        return None
    if remaining < fine_window:
        return max(MIN_DELAY_SECONDS, 0.9 * remaining)
    return coarse_interval



class PlaybackSession:
    def __init__(self, path: Path, uri: str, start: Optional[int], end: Optional[int]):
        self.path = path
        self.uri = uri
        self.start = start
        self.end = end
        self.state = SessionState.IDLE
        # Last identity seen for the opened media. Stays unknown while the player is loading.
        self.identity = MediaIdentity(track_id="", url="")
        self.checks = 0
        self._watchdog: Optional[asyncio.Task] = None

    def is_current(self, identity: MediaIdentity) -> bool:
        """
        Whether `identity` is still the media this session opened.
        An unknown identity (player still loading) counts as current. Once the
        session has a track id, track ids decide; until then the URL does.
        """
        if not identity.is_known:
            return True
        if self.identity.track_id and identity.track_id:
            return identity.track_id == self.identity.track_id
        return identity.matches(self.uri)

    def start_watchdog(self, watch: Coroutine[Any, Any, None]) -> None:
        if self._watchdog is not None:
            raise RuntimeError("Watchdog already running for this session")
        self.state = SessionState.WATCHING
        self._watchdog = asyncio.create_task(watch)

    async def wait(self) -> SessionState:
        """Block until the watchdog (if any) finishes. Re-raises its ControlUnavailable."""
        if self._watchdog is not None:
            await self._watchdog
        return self.state


class PlaybackController:
    def __init__(
        self,
        port: MediaControlPort,
        *,
        settle_s: float = 0.5,
        coarse_interval_s: float = COARSE_INTERVAL_SECONDS,
        fine_window_s: float = FINE_WINDOW_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._port = port
        self._settle_s = settle_s
        self._coarse_interval_s = coarse_interval_s
        self._fine_window_s = fine_window_s
        self._sleep = sleep

    async def play(
        self,
        path: Path,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> PlaybackSession:
        """
        Open `path` and position it. Returns once seeking is done; the watchdog
        keeps running in the background until `session.wait()` completes.
        Raises ControlUnavailable if the player fails at any step.
        """
        session = PlaybackSession(Path(path), self._port.uri_for(path), start, end)
        log_extra = {"uri": session.uri, "player": self._port.name, "start": start, "end": end}

        session.state = SessionState.OPENING
        logger.info("Opening track", extra=log_extra)
        await self._port.open(session.uri)
        await self._sleep(self._settle_s)

        if not await self._refresh_identity(session):
            logger.warning("Player did not switch to the opened track", extra=log_extra)
            session.state = SessionState.STOPPED
            return session

        if start is not None:
            session.state = SessionState.SEEKING
            if not await self._seek(session):
                session.state = SessionState.STOPPED
                return session

        if end is None:
            session.state = SessionState.STOPPED
            return session

        session.start_watchdog(self._watch(session))
        return session

    async def _refresh_identity(self, session: PlaybackSession) -> bool:
        """Re-read the active media. False once something else has replaced the opened track."""
        identity = await self._port.current_media_identity()
        if not session.is_current(identity):
            logger.info(
                "Playback session superseded",
                extra={"uri": session.uri, "active_url": identity.url},
            )
            return False
        if identity.is_known:
            session.identity = identity
        return True

    async def _seek(self, session: PlaybackSession) -> bool:
        try:
            await self._port.seek(session.start, session.identity)
        except SeekUnsupported:
            # Still loading; settle once more and pick up the identity it has by now.
            logger.info("Seek rejected, retrying once", extra={"uri": session.uri})
            await self._sleep(self._settle_s)
            if not await self._refresh_identity(session):
                return False
            await self._port.seek(session.start, session.identity)
        return True

    async def _watch(self, session: PlaybackSession) -> None:
        try:
            while True:
                session.checks += 1
                if not await self._refresh_identity(session):
                    session.state = SessionState.STOPPED
                    return

                position = await self._port.current_position()
                delay = next_check_delay(
                    session.end - position, self._coarse_interval_s, self._fine_window_s
                )
                if delay is None:
                    await self._port.pause()
                    logger.info(
                        "Reached end time, paused",
                        extra={"uri": session.uri, "end": session.end, "position": position},
                    )
                    session.state = SessionState.STOPPED
                    return

                await self._sleep(delay)
        except ControlUnavailable as exc:
            logger.error("Watchdog lost the player", extra={"uri": session.uri, "error": str(exc)})
            raise

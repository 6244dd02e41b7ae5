"""
Link playback pipeline:
  link → TrackReference → file → playback controller
and the reverse: now playing → link.
"""
import logging
from typing import Optional

from tracklink.config.settings import Settings, settings as default_settings
from tracklink.services.controller import PlaybackController, PlaybackSession
from tracklink.services.players.base import MediaControlPort
from tracklink.services.resolver import FileResolver, TrackNotFound
from tracklink.utils.link_codec import decode_link, encode_link

logger = logging.getLogger(__name__)


class LinkPlayer:
    def __init__(
        self,
        resolver: Optional[FileResolver],
        port: MediaControlPort,
        config: Optional[Settings] = None,
    ):
        self._resolver = resolver
        self._port = port
        self._config = config or default_settings

    async def play_link(self, link: str) -> PlaybackSession:
        """
        Decode, resolve and play a link.
        Raises MalformedLink, TrackNotFound or ControlUnavailable.
        """
        ref = decode_link(link)
        end = ref.end
        if not ref.has_valid_range:
            logger.warning(
                "Ignoring end time that is not after the start",
                extra={"link": link, "start": ref.start, "end": ref.end},
            )
            end = None

        path = await self._resolver.find_file(ref.artist, ref.title)
        if path is None:
            raise TrackNotFound(ref.artist, ref.title)
        logger.info("Resolved track", extra={"track": ref.display_name, "path": str(path)})

        # One controller per session; never reused.
        controller = PlaybackController(
            self._port,
            settle_s=self._config.SETTLE_SECONDS,
            coarse_interval_s=self._config.WATCHDOG_COARSE_SECONDS,
            fine_window_s=self._config.WATCHDOG_FINE_WINDOW_SECONDS,
        )
        return await controller.play(path, ref.start, end)

    async def capture_link(self, include_position: bool = True) -> str:
        """Link to the track the player is on now, starting at the current position."""
        snapshot = await self._port.now_playing()
        start = int(snapshot.position) if include_position else None
        return encode_link(snapshot.artist, snapshot.title, start)

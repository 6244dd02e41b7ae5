"""
MPRIS binding: talks to any media player registered on the D-Bus session bus
under the org.mpris.MediaPlayer2 namespace.
"""
import logging
from typing import Any, Iterable, Optional

from dbus_next import BusType, Message, MessageType, Variant
from dbus_next.aio import MessageBus
from dbus_next.errors import DBusError, InvalidAddressError

from tracklink.services.models import MediaIdentity, MediaSnapshot
from tracklink.services.players.base import ControlUnavailable, MediaControlPort, SeekUnsupported

logger = logging.getLogger(__name__)

_MPRIS_PATH = "/org/mpris/MediaPlayer2"
_PLAYER_INTERFACE = "org.mpris.MediaPlayer2.Player"


def pick_player(names: Iterable[str], prefix: str, excluded: Iterable[str] = ()) -> Optional[str]:
    """First bus name under `prefix` that isn't a known impostor (browser integrations etc.)."""
    excluded = tuple(excluded)
    candidates = sorted(
        name for name in names
        if name.startswith(prefix) and not any(fragment in name for fragment in excluded)
    )
    return candidates[0] if candidates else None


def normalize_metadata(raw: dict[str, Any]) -> dict[str, str]:
    """Flatten an MPRIS Metadata mapping into artist/title/url/trackid strings."""

    def value(key: str) -> Any:
        item = raw.get(key)
        return item.value if isinstance(item, Variant) else item

    artist = value("xesam:artist") or ""
    if isinstance(artist, (list, tuple)):
        artist = ", ".join(artist)

    return {
        "artist": artist,
        "title": value("xesam:title") or "",
        "url": value("xesam:url") or "",
        "trackid": value("mpris:trackid") or "",
    }


class MprisPlayer(MediaControlPort):
    def __init__(
        self,
        prefix: str = "org.mpris.MediaPlayer2.",
        excluded: Iterable[str] = (),
        bus: Optional[MessageBus] = None,
    ):
        self._prefix = prefix
        self._excluded = tuple(excluded)
        self._bus = bus
        self._interfaces: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return "mpris"

    # ---- port ----

    async def current_media_identity(self) -> MediaIdentity:
        meta = normalize_metadata(await self._request("get_metadata"))
        return MediaIdentity(track_id=meta["trackid"], url=meta["url"])

    async def current_position(self) -> float:
        microseconds = await self._request("get_position")
        return microseconds / 1_000_000

    async def now_playing(self) -> MediaSnapshot:
        meta = normalize_metadata(await self._request("get_metadata"))
        position = await self.current_position()
        return MediaSnapshot(
            identity=MediaIdentity(track_id=meta["trackid"], url=meta["url"]),
            artist=meta["artist"],
            title=meta["title"],
            position=position,
        )

    async def open(self, uri: str) -> None:
        await self._request("call_open_uri", uri)

    async def seek(self, position: float, identity: MediaIdentity) -> None:
        if not identity.track_id:
            raise SeekUnsupported("Player has not reported a track id yet")
        try:
            await self._request("call_set_position", identity.track_id, int(position * 1_000_000))
        except ControlUnavailable as exc:
            raise SeekUnsupported(str(exc)) from exc

    async def pause(self) -> None:
        await self._request("call_pause")

    async def close(self) -> None:
        if self._bus is not None:
            self._bus.disconnect()
            self._bus = None
            self._interfaces.clear()

    # ---- bus plumbing ----

    async def _request(self, member: str, *args: Any) -> Any:
        player = await self._player()
        try:
            return await getattr(player, member)(*args)
        except DBusError as exc:
            raise ControlUnavailable(f"MPRIS {member} failed: {exc}") from exc

    async def _connect(self) -> MessageBus:
        if self._bus is None:
            try:
                self._bus = await MessageBus(bus_type=BusType.SESSION).connect()
            except (OSError, InvalidAddressError, DBusError) as exc:
                raise ControlUnavailable(f"Cannot connect to the session bus: {exc}") from exc
        return self._bus

    async def _player(self) -> Any:
        bus = await self._connect()
        reply = await bus.call(
            Message(
                destination="org.freedesktop.DBus",
                path="/org/freedesktop/DBus",
                interface="org.freedesktop.DBus",
                member="ListNames",
            )
        )
        if reply.message_type == MessageType.ERROR:
            raise ControlUnavailable(f"ListNames failed: {reply.error_name}")

        name = pick_player(reply.body[0], self._prefix, self._excluded)
        if name is None:
            raise ControlUnavailable("No MPRIS player found on the session bus")

        if name not in self._interfaces:
            try:
                introspection = await bus.introspect(name, _MPRIS_PATH)
            except DBusError as exc:
                raise ControlUnavailable(f"Cannot introspect {name}: {exc}") from exc
            proxy = bus.get_proxy_object(name, _MPRIS_PATH, introspection)
            self._interfaces[name] = proxy.get_interface(_PLAYER_INTERFACE)
            logger.info("Using MPRIS player", extra={"bus_name": name})
        return self._interfaces[name]

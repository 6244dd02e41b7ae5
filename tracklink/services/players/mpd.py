"""
MPD binding: drives mpd through the `mpc` command line client.

Status is read from a fixed three-line record:
    <artist>
    <title>
    [playing] #3/12   1:15/2:31 (49%)
Anything else (stopped player, changed mpc output) is a ControlUnavailable.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tracklink.services.models import MediaIdentity, MediaSnapshot
from tracklink.services.players.base import ControlUnavailable, MediaControlPort, SeekUnsupported

logger = logging.getLogger(__name__)

_STATUS_FORMAT = "%artist%\n%title%"
_IDENTITY_FORMAT = "%id%\t%file%"

_STATUS_RE = re.compile(
    r"(?P<artist>[^\n]*)\n"
    r"(?P<title>[^\n]*)\n"
    r"\[(?P<state>playing|paused)\]\s+#\d+/\d+\s+"
    r"(?:(?P<hours>\d+):)?(?P<minutes>\d+):(?P<seconds>\d{2})/"
)


@dataclass
class MpcStatus:
    artist: str
    title: str
    state: str
    position: int


def parse_status(output: str) -> MpcStatus:
    match = _STATUS_RE.match(output)
    if not match:
        raise ControlUnavailable(f"Unexpected mpc status output: {output[:120]!r}")
    hours = int(match.group("hours") or 0)
    position = hours * 3600 + int(match.group("minutes")) * 60 + int(match.group("seconds"))
    return MpcStatus(
        artist=match.group("artist"),
        title=match.group("title"),
        state=match.group("state"),
        position=position,
    )


def parse_identity(output: str) -> MediaIdentity:
    line = output.strip("\n")
    if not line:
        return MediaIdentity(track_id="", url="")
    song_id, _, file = line.partition("\t")
    return MediaIdentity(track_id=song_id, url=file)


def format_seek_target(position: float) -> str:
    seconds = max(0, int(position))
    return f"{seconds // 3600}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"


class MpdPlayer(MediaControlPort):
    def __init__(
        self,
        mpc_path: str = "mpc",
        music_dir: Optional[Path] = None,
        timeout_s: float = 5.0,
    ):
        self._mpc_path = mpc_path
        self._music_dir = Path(music_dir).expanduser().resolve() if music_dir else None
        self._timeout_s = timeout_s

    @property
    def name(self) -> str:
        return "mpd"

    def uri_for(self, path: Path) -> str:
        """mpd addresses library files relative to its music directory."""
        path = Path(path).expanduser().resolve()
        if self._music_dir is not None:
            try:
                return path.relative_to(self._music_dir).as_posix()
            except ValueError:
                pass
        return str(path)

    async def current_media_identity(self) -> MediaIdentity:
        return parse_identity(await self._mpc("-f", _IDENTITY_FORMAT, "current"))

    async def current_position(self) -> float:
        status = parse_status(await self._mpc("-f", _STATUS_FORMAT, "status"))
        return float(status.position)

    async def now_playing(self) -> MediaSnapshot:
        identity = await self.current_media_identity()
        status = parse_status(await self._mpc("-f", _STATUS_FORMAT, "status"))
        return MediaSnapshot(
            identity=identity,
            artist=status.artist,
            title=status.title,
            position=float(status.position),
        )

    async def open(self, uri: str) -> None:
        await self._mpc("add", uri)
        queue = await self._mpc("-f", "%file%", "playlist")
        queue_length = len(queue.splitlines())
        logger.info("Queued file on mpd", extra={"uri": uri, "queue_position": queue_length})
        await self._mpc("play", str(queue_length))

    async def seek(self, position: float, identity: MediaIdentity) -> None:
        try:
            await self._mpc("seek", format_seek_target(position))
        except ControlUnavailable as exc:
            raise SeekUnsupported(str(exc)) from exc

    async def pause(self) -> None:
        await self._mpc("pause")

    async def _mpc(self, *args: str) -> str:
        cmd = [self._mpc_path, *args]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ControlUnavailable(f"Cannot run {self._mpc_path!r}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout_s)
        except asyncio.TimeoutError as exc:
            proc.kill()
            raise ControlUnavailable(f"mpc {args[-1]} timed out") from exc

        if proc.returncode != 0:
            err = stderr.decode(errors="replace").strip()
            raise ControlUnavailable(f"mpc {args[-1]} failed: {err[:200]}")
        return stdout.decode(errors="replace")

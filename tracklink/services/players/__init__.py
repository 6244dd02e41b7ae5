from typing import Optional

from tracklink.config.settings import Settings, settings as default_settings
from tracklink.services.players.base import ControlUnavailable, MediaControlPort, SeekUnsupported
from tracklink.services.players.mpd import MpdPlayer
from tracklink.services.players.mpris import MprisPlayer


class PlayerUnsupported(ValueError):
    pass


def build_player(config: Optional[Settings] = None) -> MediaControlPort:
    """Pick the player binding named by PLAYER."""
    config = config or default_settings
    if config.PLAYER == "mpris":
        return MprisPlayer(prefix=config.MPRIS_PREFIX, excluded=config.MPRIS_EXCLUDED)
    if config.PLAYER == "mpd":
        return MpdPlayer(
            mpc_path=config.MPC_PATH,
            music_dir=config.MUSIC_DIR,
            timeout_s=config.MPC_TIMEOUT_SECONDS,
        )
    raise PlayerUnsupported(f"Unsupported player {config.PLAYER!r}; use 'mpris' or 'mpd'")


__all__ = [
    "ControlUnavailable",
    "MediaControlPort",
    "MpdPlayer",
    "MprisPlayer",
    "PlayerUnsupported",
    "SeekUnsupported",
    "build_player",
]

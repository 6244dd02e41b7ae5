"""
Human-readable duration tokens: 75 <-> "1m15s".
"""
import re

_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}

_TOKEN_RE = re.compile(r"(?:\d+[a-zA-Z])+")
_PAIR_RE = re.compile(r"(\d+)([a-zA-Z])")


class MalformedDuration(ValueError):
    pass


def encode_duration(seconds: int) -> str:
    """Render seconds as `{s}s`, `{m}m{s}s` or `{h}h{m}m{s}s` without padding."""
    if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
        raise MalformedDuration(f"Duration must be a non-negative integer, got {seconds!r}")

    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m{seconds % 60}s"
    return f"{seconds // 3600}h{seconds % 3600 // 60}m{seconds % 60}s"


def decode_duration(token: str) -> int:
    """
    Parse a token made of <integer><unit> pairs (units h, m, s) into seconds.
    Missing units count as zero, so "5m" is 300.
    """
    token = (token or "").strip()
    if not _TOKEN_RE.fullmatch(token):
        raise MalformedDuration(f"Not a duration: {token!r}")

    total = 0
    for value, unit in _PAIR_RE.findall(token):
        factor = _UNIT_SECONDS.get(unit.lower())
        if factor is None:
            raise MalformedDuration(f"Unknown unit {unit!r} in duration {token!r}")
        total += int(value) * factor
    return total

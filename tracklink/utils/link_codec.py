"""
Track links: "Artist:Title" with an optional "::start" or "::start-end" suffix.

Literal colons (and backslashes) inside artist/title are escaped with a
backslash, so the only bare colons left in a link are field separators.
"""
import re
from typing import Optional

from tracklink.services.models import TrackReference
from tracklink.utils.duration import MalformedDuration, decode_duration, encode_duration

_ESCAPE_RE = re.compile(r"([\\:])")

# One lexical unit per match: an escape, a separator, or a run of plain text.
# A backslash that escapes nothing is kept as literal text.
_LEX_RE = re.compile(r"\\(?P<esc>[\\:])|(?P<sep>:)|(?P<text>[^\\:]+|\\)")

# Durations are always written with a trailing unit; bare digits are seconds.
_BARE_SECONDS_RE = re.compile(r"(\d)$")


class MalformedLink(ValueError):
    pass


def escape(text: str) -> str:
    return _ESCAPE_RE.sub(r"\\\1", text)


def encode_link(
    artist: str,
    title: str,
    start: Optional[int] = None,
    end: Optional[int] = None,
) -> str:
    """Encode a track reference; inverse of `decode_link`."""
    if end is not None and start is None:
        raise ValueError("An end time requires a start time")

    link = f"{escape(artist)}:{escape(title)}"
    if start is None:
        return link

    link += "::" + encode_duration(start)
    if end is not None:
        link += "-" + encode_duration(end)
    return link


def decode_link(link: str) -> TrackReference:
    """
    Parse a link produced by `encode_link`.
    Raises MalformedLink on a missing title, stray separators or a bad time range.
    """
    fields = _split_fields(link)
    if len(fields) < 2:
        raise MalformedLink(f"Expected 'artist:title', got {link!r}")

    artist, title = fields[0], fields[1]
    if len(fields) == 2:
        return TrackReference(artist=artist, title=title)

    if len(fields) != 4 or fields[2]:
        raise MalformedLink(
            f"Unexpected ':' in {link!r}; literal colons must be written as '\\:'"
        )

    start, end = _decode_range(fields[3], link)
    return TrackReference(artist=artist, title=title, start=start, end=end)


def _split_fields(link: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    for match in _LEX_RE.finditer(link):
        if match.group("sep") is not None:
            fields.append("".join(current))
            current = []
        elif match.group("esc") is not None:
            current.append(match.group("esc"))
        else:
            current.append(match.group("text"))
    fields.append("".join(current))
    return fields


def _decode_range(segment: str, link: str) -> tuple[int, Optional[int]]:
    parts = segment.split("-")
    if len(parts) > 2:
        raise MalformedLink(f"Time range in {link!r} has more than one '-'")

    try:
        times = [decode_duration(_BARE_SECONDS_RE.sub(r"\1s", part)) for part in parts]
    except MalformedDuration as exc:
        raise MalformedLink(f"Bad time range in {link!r}: {exc}") from exc

    if len(times) == 1:
        return times[0], None
    return times[0], times[1]

"""
Render a track link for different output back-ends.
"""
import html
import re
from typing import Optional

from tracklink.services.models import TrackReference
from tracklink.utils.duration import encode_duration
from tracklink.utils.link_codec import decode_link

LINK_SCHEME = "music"

FORMATS = ("org", "markdown", "html", "latex", "plain")

# A backslash run before a bracket, or at the end, is doubled and the bracket escaped.
_ORG_PATH_ESCAPE_RE = re.compile(r"(\\*)([\[\]]|\Z)")
# A description may not hold "]]" or end with "]".
_ORG_DESCRIPTION_BRACKET_RE = re.compile(r"\](?=\]|\Z)")

_LATEX_SPECIAL_RE = re.compile(r"([\\{}$&#^_%~])")
_LATEX_REPLACEMENTS = {
    "\\": r"\textbackslash{}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


class ExportFormatUnsupported(ValueError):
    pass


def describe(ref: TrackReference) -> str:
    """'Artist - Title' plus the time range, e.g. 'Boards of Canada - Roygbiv (1m15s-2m20s)'."""
    text = ref.display_name
    if ref.start is not None and ref.end is not None:
        text += f" ({encode_duration(ref.start)}-{encode_duration(ref.end)})"
    elif ref.start is not None:
        text += f" (from {encode_duration(ref.start)})"
    return text


def export_link(
    link: str,
    fmt: str,
    description: Optional[str] = None,
    url: Optional[str] = None,
) -> str:
    """
    Render `link` for `fmt`. `url` is an optional web location for the track
    (e.g. a YouTube match) used by formats that can carry hyperlinks.
    Raises MalformedLink for an undecodable link.
    """
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise ExportFormatUnsupported(f"Unsupported export format {fmt!r}; use one of {', '.join(FORMATS)}")

    ref = decode_link(link)
    description = description or describe(ref)

    if fmt == "org":
        target = _org_escape_path(f"{LINK_SCHEME}:{link}")
        return f"[[{target}][{_org_escape_description(description)}]]"
    if fmt == "markdown":
        return f"[{description}]({url})" if url else f"*{description}*"
    if fmt == "html":
        if url:
            return f'<a class="music" href="{html.escape(url)}">{html.escape(description)}</a>'
        return f'<span class="music" title="{html.escape(link)}">{html.escape(description)}</span>'
    if fmt == "latex":
        text = _latex_escape(description)
        return f"\\href{{{url}}}{{{text}}}" if url else f"\\emph{{{text}}}"
    return f"{description} <{url}>" if url else description


def _latex_escape(text: str) -> str:
    return _LATEX_SPECIAL_RE.sub(lambda m: _LATEX_REPLACEMENTS.get(m.group(1), "\\" + m.group(1)), text)


def _org_escape_path(target: str) -> str:
    return _ORG_PATH_ESCAPE_RE.sub(
        lambda m: m.group(1) * 2 + ("\\" if m.group(2) else "") + m.group(2),
        target,
    )


def _org_escape_description(text: str) -> str:
    return _ORG_DESCRIPTION_BRACKET_RE.sub("]\u200b", text)

"""
Command line interface.
- encode / decode  → link codec
- play             → resolve a link to a file and play it, stopping at the end time
- capture          → link to the track playing now
- export           → render a link for org, markdown, html, latex or plain text
- youtube          → find a YouTube video for a track
"""
import asyncio
import logging
from typing import Optional

import click

from tracklink.config.settings import settings
from tracklink.services.controller import SessionState
from tracklink.services.export import FORMATS, ExportFormatUnsupported, export_link
from tracklink.services.orchestrator import LinkPlayer
from tracklink.services.players import ControlUnavailable, PlayerUnsupported, build_player
from tracklink.services.resolver import (
    BackendUnsupported,
    LibraryUnavailable,
    TrackNotFound,
    build_resolver,
)
from tracklink.services.youtube import LookupUnavailable, YouTubeService
from tracklink.utils.duration import MalformedDuration, decode_duration
from tracklink.utils.http_client import build_session
from tracklink.utils.link_codec import MalformedLink, decode_link, encode_link
from tracklink.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _parse_time(value: Optional[str]) -> Optional[int]:
    """Accept plain seconds ('75') or a duration token ('1m15s')."""
    if value is None:
        return None
    if value.isdigit():
        return int(value)
    try:
        return decode_duration(value)
    except MalformedDuration as exc:
        raise click.BadParameter(str(exc)) from exc


def _run(coro):
    try:
        return asyncio.run(coro)
    except MalformedLink as exc:
        raise click.ClickException(f"Invalid link: {exc}") from exc
    except TrackNotFound as exc:
        raise click.ClickException(str(exc)) from exc
    except (PlayerUnsupported, BackendUnsupported, ExportFormatUnsupported) as exc:
        raise click.ClickException(f"Configuration error: {exc}") from exc
    except LibraryUnavailable as exc:
        raise click.ClickException(f"Music library unavailable: {exc}") from exc
    except ControlUnavailable as exc:
        logger.warning("Player control failed", extra={"error": str(exc)})
        raise click.ClickException(f"Player unavailable: {exc}") from exc
    except LookupUnavailable as exc:
        raise click.ClickException(f"Lookup failed: {exc}") from exc


@click.group()
@click.option("--log-level", default=None, help="Override TRACKLINK_LOG_LEVEL.")
def cli(log_level: Optional[str]) -> None:
    """Link to points in music tracks and play them back."""
    setup_logging(log_level)


@cli.command()
@click.argument("artist")
@click.argument("title")
@click.option("--start", help="Start time, seconds or e.g. 1m15s.")
@click.option("--end", help="End time, seconds or e.g. 2m20s.")
def encode(artist: str, title: str, start: Optional[str], end: Optional[str]) -> None:
    """Print the link for ARTIST and TITLE."""
    start_s, end_s = _parse_time(start), _parse_time(end)
    if end_s is not None and start_s is None:
        raise click.BadParameter("--end requires --start")
    click.echo(encode_link(artist, title, start_s, end_s))


@cli.command()
@click.argument("link")
def decode(link: str) -> None:
    """Show the fields of LINK."""
    try:
        ref = decode_link(link)
    except MalformedLink as exc:
        raise click.ClickException(f"Invalid link: {exc}") from exc
    click.echo(f"artist: {ref.artist}")
    click.echo(f"title:  {ref.title}")
    if ref.start is not None:
        click.echo(f"start:  {ref.start}")
    if ref.end is not None:
        click.echo(f"end:    {ref.end}")


@cli.command()
@click.argument("link")
@click.option("--no-wait", is_flag=True, help="Return right after seeking, without stopping at the end time.")
def play(link: str, no_wait: bool) -> None:
    """Find the file for LINK and play it."""

    async def _play() -> SessionState:
        port = build_player()
        try:
            session = await LinkPlayer(build_resolver(), port).play_link(link)
            if no_wait:
                return session.state
            return await session.wait()
        finally:
            await port.close()

    state = _run(_play())
    logger.info("Playback command finished", extra={"state": state.value})


@cli.command()
@click.option("--no-position", is_flag=True, help="Omit the current position.")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default=None, help="Render instead of printing the raw link.")
def capture(no_position: bool, fmt: Optional[str]) -> None:
    """Print a link to the track playing now."""

    async def _capture() -> str:
        port = build_player()
        try:
            # Capturing needs no file lookup.
            return await LinkPlayer(resolver=None, port=port).capture_link(not no_position)
        finally:
            await port.close()

    link = _run(_capture())
    click.echo(export_link(link, fmt) if fmt else link)


@cli.command(name="export")
@click.argument("link")
@click.option("--format", "fmt", default=settings.DEFAULT_EXPORT_FORMAT, show_default=True)
@click.option("--description", default=None)
@click.option("--youtube", "with_youtube", is_flag=True, help="Hyperlink the description to a YouTube match.")
def export_command(link: str, fmt: str, description: Optional[str], with_youtube: bool) -> None:
    """Render LINK for an output format."""

    async def _export() -> str:
        url = None
        if with_youtube:
            ref = decode_link(link)
            async with build_session() as session:
                match = await YouTubeService(session).find_video(ref.artist, ref.title)
            url = match.url if match else None
        return export_link(link, fmt, description=description, url=url)

    click.echo(_run(_export()))


@cli.command()
@click.argument("artist")
@click.argument("title")
def youtube(artist: str, title: str) -> None:
    """Find a YouTube video for ARTIST and TITLE."""

    async def _lookup():
        async with build_session() as session:
            return await YouTubeService(session).find_video(artist, title)

    match = _run(_lookup())
    if match is None:
        raise click.ClickException(f"No video found for {artist} - {title}")
    click.echo(f"{match.url}  {match.title}")

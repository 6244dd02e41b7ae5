"""
Track file lookup: find a local file for an (artist, title) pair.
- `file`:  walk the music directory and match file names.
- `beets`: query a beets library database.
"""
import asyncio
import logging
import os
import re
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from tracklink.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[\W_]+")

_BEETS_QUERY = (
    "SELECT path FROM items "
    "WHERE artist = ? COLLATE NOCASE AND title = ? COLLATE NOCASE "
    "ORDER BY id LIMIT 1"
)


class TrackNotFound(LookupError):
    def __init__(self, artist: str, title: str):
        self.artist = artist
        self.title = title
        super().__init__(f"No file found for {artist} - {title}")


class BackendUnsupported(ValueError):
    pass


class LibraryUnavailable(Exception):
    pass


def _normalize(text: str) -> str:
    return _NON_WORD_RE.sub("", text.casefold())


class FileResolver(ABC):
    @abstractmethod
    async def find_file(self, artist: str, title: str) -> Optional[Path]:
        """Path of a matching file, or None."""


class FilesystemResolver(FileResolver):
    """Matches the title against the file name and the artist against the whole relative path."""

    def __init__(self, music_dir: Path, extensions: Iterable[str]):
        self._music_dir = Path(music_dir).expanduser()
        self._extensions = frozenset(ext.lower() for ext in extensions)

    async def find_file(self, artist: str, title: str) -> Optional[Path]:
        return await asyncio.to_thread(self._scan, artist, title)

    def _scan(self, artist: str, title: str) -> Optional[Path]:
        if not self._music_dir.is_dir():
            raise LibraryUnavailable(f"Music directory not found: {self._music_dir}")

        want_artist, want_title = _normalize(artist), _normalize(title)
        best: Optional[Path] = None
        for root, _dirs, files in os.walk(self._music_dir):
            for name in files:
                path = Path(root) / name
                if path.suffix.lower() not in self._extensions:
                    continue
                if want_title not in _normalize(path.stem):
                    continue
                if want_artist not in _normalize(str(path.relative_to(self._music_dir))):
                    continue
                if best is None or len(str(path)) < len(str(best)):
                    best = path

        logger.debug("Filesystem lookup", extra={"artist": artist, "title": title, "found": str(best)})
        return best


class BeetsResolver(FileResolver):
    def __init__(self, library_path: Path):
        self._library_path = Path(library_path).expanduser()

    async def find_file(self, artist: str, title: str) -> Optional[Path]:
        return await asyncio.to_thread(self._query, artist, title)

    def _query(self, artist: str, title: str) -> Optional[Path]:
        uri = f"{self._library_path.as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise LibraryUnavailable(f"Cannot open beets library {self._library_path}: {exc}") from exc

        try:
            row = conn.execute(_BEETS_QUERY, (artist, title)).fetchone()
        except sqlite3.Error as exc:
            raise LibraryUnavailable(f"Beets query failed: {exc}") from exc
        finally:
            conn.close()

        if row is None:
            return None
        # beets stores paths as raw bytes
        raw = row[0]
        return Path(os.fsdecode(raw) if isinstance(raw, bytes) else raw)


def build_resolver(config: Optional[Settings] = None) -> FileResolver:
    config = config or default_settings
    if config.SEARCH_METHOD == "file":
        return FilesystemResolver(config.MUSIC_DIR, config.AUDIO_EXTENSIONS)
    if config.SEARCH_METHOD == "beets":
        return BeetsResolver(config.BEETS_LIBRARY)
    raise BackendUnsupported(
        f"Unsupported search method {config.SEARCH_METHOD!r}; use 'file' or 'beets'"
    )

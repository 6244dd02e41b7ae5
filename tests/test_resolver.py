import sqlite3

import pytest

from tracklink.config.settings import Settings
from tracklink.services.resolver import (
    BackendUnsupported,
    BeetsResolver,
    FilesystemResolver,
    LibraryUnavailable,
    TrackNotFound,
    build_resolver,
)

EXTENSIONS = (".mp3", ".flac")


@pytest.fixture
def music_dir(tmp_path):
    files = [
        "Boards of Canada/Music Has the Right to Children/05 Roygbiv.flac",
        "Boards of Canada/Music Has the Right to Children/notes.txt",
        "Boards of Canada/live/Roygbiv (Live at Warp 10).mp3",
        "Various/Roygbiv (cover).mp3",
        "Aphex Twin/Xtal.mp3",
    ]
    for name in files:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
    return tmp_path


class TestFilesystemResolver:
    async def test_finds_shortest_match(self, music_dir):
        resolver = FilesystemResolver(music_dir, EXTENSIONS)
        path = await resolver.find_file("Boards of Canada", "Roygbiv")
        assert path == music_dir / "Boards of Canada/live/Roygbiv (Live at Warp 10).mp3"

    async def test_case_and_punctuation_insensitive(self, music_dir):
        resolver = FilesystemResolver(music_dir, EXTENSIONS)
        assert await resolver.find_file("aphex-twin", "XTAL") == music_dir / "Aphex Twin/Xtal.mp3"

    async def test_ignores_other_extensions(self, music_dir):
        resolver = FilesystemResolver(music_dir, (".flac",))
        path = await resolver.find_file("Boards of Canada", "Roygbiv")
        assert path.name == "05 Roygbiv.flac"

    async def test_no_match(self, music_dir):
        resolver = FilesystemResolver(music_dir, EXTENSIONS)
        assert await resolver.find_file("Autechre", "Roygbiv") is None

    async def test_missing_music_dir(self, tmp_path):
        resolver = FilesystemResolver(tmp_path / "nope", EXTENSIONS)
        with pytest.raises(LibraryUnavailable):
            await resolver.find_file("A", "B")


@pytest.fixture
def beets_library(tmp_path):
    db = tmp_path / "library.db"
    conn = sqlite3.connect(db)
    conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, path BLOB, artist TEXT, title TEXT)")
    conn.executemany(
        "INSERT INTO items (path, artist, title) VALUES (?, ?, ?)",
        [
            (b"/music/Boards of Canada/05 Roygbiv.flac", "Boards of Canada", "Roygbiv"),
            (b"/music/Sigur R\xc3\xb3s/Gl\xc3\xb3s\xc3\xb3li.flac", "Sigur Rós", "Glósóli"),
        ],
    )
    conn.commit()
    conn.close()
    return db


class TestBeetsResolver:
    async def test_exact_match(self, beets_library):
        path = await BeetsResolver(beets_library).find_file("boards of canada", "ROYGBIV")
        assert str(path) == "/music/Boards of Canada/05 Roygbiv.flac"

    async def test_decodes_byte_paths(self, beets_library):
        path = await BeetsResolver(beets_library).find_file("Sigur Rós", "Glósóli")
        assert path.name == "Glósóli.flac"

    async def test_no_match(self, beets_library):
        assert await BeetsResolver(beets_library).find_file("Boards of Canada", "Olson") is None

    async def test_missing_library(self, tmp_path):
        with pytest.raises(LibraryUnavailable):
            await BeetsResolver(tmp_path / "missing.db").find_file("A", "B")


class TestBuildResolver:
    def test_file(self, tmp_path):
        assert isinstance(build_resolver(Settings(SEARCH_METHOD="file", MUSIC_DIR=tmp_path)), FilesystemResolver)

    def test_beets(self, tmp_path):
        assert isinstance(build_resolver(Settings(SEARCH_METHOD="BEETS")), BeetsResolver)

    def test_unsupported(self):
        with pytest.raises(BackendUnsupported):
            build_resolver(Settings(SEARCH_METHOD="locate"))


def test_track_not_found_message():
    exc = TrackNotFound("Boards of Canada", "Roygbiv")
    assert str(exc) == "No file found for Boards of Canada - Roygbiv"
    assert isinstance(exc, LookupError)

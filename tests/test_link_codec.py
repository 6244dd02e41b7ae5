"""
Tests for encoding and decoding track links.
Run with: pytest tests/
"""
import pytest

from tracklink.services.models import TrackReference
from tracklink.utils.link_codec import MalformedLink, decode_link, encode_link


class TestEncodeLink:
    def test_plain(self):
        assert encode_link("Boards of Canada", "Roygbiv") == "Boards of Canada:Roygbiv"

    def test_start_only_escapes_colon(self):
        assert encode_link("A:B", "C", 80) == "A\\:B:C::1m20s"

    def test_start_and_end(self):
        link = encode_link("Boards of Canada", "Roygbiv", 75, 140)
        assert link == "Boards of Canada:Roygbiv::1m15s-2m20s"

    def test_zero_start_is_kept(self):
        assert encode_link("A", "B", 0) == "A:B::0s"

    def test_backslash_is_escaped(self):
        assert encode_link("AC\\DC", "T") == "AC\\\\DC:T"

    def test_end_without_start_raises(self):
        with pytest.raises(ValueError):
            encode_link("A", "B", None, 10)


class TestDecodeLink:
    def test_plain(self):
        assert decode_link("Boards of Canada:Roygbiv") == TrackReference("Boards of Canada", "Roygbiv")

    def test_escaped_colon_with_start(self):
        assert decode_link("A\\:B:C::1m20s") == TrackReference("A:B", "C", 80, None)

    def test_range(self):
        ref = decode_link("Boards of Canada:Roygbiv::1m15s-2m20s")
        assert (ref.artist, ref.title, ref.start, ref.end) == ("Boards of Canada", "Roygbiv", 75, 140)

    def test_hyphens_in_names_are_not_ranges(self):
        ref = decode_link("Jay-Z:Dirt Off Your Shoulder - Remix")
        assert ref == TrackReference("Jay-Z", "Dirt Off Your Shoulder - Remix")

    def test_end_before_start_is_decoded_as_is(self):
        ref = decode_link("A:B::2m-1m")
        assert (ref.start, ref.end) == (120, 60)
        assert not ref.has_valid_range

    @pytest.mark.parametrize("link,start", [
        ("A:B::80", 80),
        ("A:B::1m20", 80),
    ])
    def test_bare_trailing_digits_are_seconds(self, link, start):
        assert decode_link(link).start == start

    def test_unknown_backslash_sequence_is_literal(self):
        assert decode_link("AC\\DC:Thunderstruck").artist == "AC\\DC"

    @pytest.mark.parametrize("link", [
        "",
        "Roygbiv",
        "A:B:C",
        "A:B:x:1m",
        "A:B::",
        "A:B::abc",
        "A:B::1m-2m-3m",
        "A:B::1m::2m",
    ])
    def test_malformed(self, link):
        with pytest.raises(MalformedLink):
            decode_link(link)


@pytest.mark.parametrize("artist,title,start,end", [
    ("Boards of Canada", "Roygbiv", None, None),
    ("A:B", "C", 80, None),
    ("::", "::", 0, 1),
    ("a-b", "1m-2m", 5, 3700),
    ("x\\:y", "trailing\\", 59, 61),
    ("\\", ":\\:", None, None),
    ("Sigur Rós", "Ný batterí", 3600, 7322),
    ("", "untitled", None, None),
    ("Artist", "Title::1m20s", 10, 20),
])
def test_round_trip(artist, title, start, end):
    assert decode_link(encode_link(artist, title, start, end)) == TrackReference(artist, title, start, end)

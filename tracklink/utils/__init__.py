from tracklink.utils.duration import decode_duration, encode_duration, MalformedDuration
from tracklink.utils.link_codec import decode_link, encode_link, MalformedLink
from tracklink.utils.logging import setup_logging

__all__ = ["decode_duration", "encode_duration", "MalformedDuration", "decode_link", "encode_link", "MalformedLink", "setup_logging"]

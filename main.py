"""
tracklink - main entrypoint
Encodes, decodes and plays links to points in music tracks.
"""
import sys

from tracklink.handlers.cli import cli


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(0)

"""Streaming insert size distribution and plotting for alignment files."""

__version__ = "0.1.0"

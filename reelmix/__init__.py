"""Randomized highlight-reel generator built on ffmpeg."""

__version__ = "0.1.0"

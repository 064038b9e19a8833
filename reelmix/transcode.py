"""
Trim and concatenate clips with ffmpeg.

Video is re-encoded with libx264 and audio is dropped, both for trims and for
the final concatenation.
"""

import logging
import os
import subprocess
from typing import Protocol, Sequence

from reelmix.errors import ConcatError, TrimError

logger = logging.getLogger(__name__)

CONCAT_LIST_NAME = "concat_list.txt"


class TranscodingEngine(Protocol):
    def trim(self, source_path: str, start: float, duration: float, output_path: str) -> None:
        ...

    def concat(self, clip_paths: Sequence[str], output_path: str) -> None:
        ...


def format_seconds(value: float) -> str:
    """Format a time argument with two decimals."""
    return f"{value:.2f}"


def escape_concat_path(path: str) -> str:
    """Quote-escape a path for an ffmpeg concat list entry."""
    return os.path.abspath(path).replace("'", "'\\''")


def _remove_partial(path: str) -> None:
    """Delete an output file left behind by a failed ffmpeg run."""
    if os.path.exists(path):
        os.remove(path)
        logger.debug(f"Removed partial output: {path}")


def write_concat_list(clip_paths: Sequence[str], list_path: str) -> None:
    with open(list_path, "w", encoding="utf-8") as f:
        for clip_path in clip_paths:
            f.write(f"file '{escape_concat_path(clip_path)}'\n")


class FFmpegEngine:
    """TranscodingEngine backed by the ffmpeg binary."""

    def __init__(self, ffmpeg: str = "ffmpeg"):
        self.ffmpeg = ffmpeg

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(cmd, capture_output=True, text=True)

    def trim(self, source_path: str, start: float, duration: float, output_path: str) -> None:
        """
        Cut duration seconds starting at start from source_path.

        Raises:
            TrimError: If ffmpeg fails
        """
        cmd = [
            self.ffmpeg,
            "-y",
            "-i", source_path,
            "-ss", format_seconds(start),
            "-t", format_seconds(duration),
            "-c:v", "libx264",
            "-an",                    # No audio
            output_path,
        ]

        try:
            result = self._run(cmd)
        except OSError as e:
            raise TrimError(f"ffmpeg could not be run: {e}") from e

        if result.returncode != 0:
            logger.error(f"ffmpeg trim failed: {result.stderr}")
            raise TrimError(f"ffmpeg trim failed for {source_path}: {result.stderr}")

    def concat(self, clip_paths: Sequence[str], output_path: str) -> None:
        """
        Concatenate clips in order into output_path.

        The concat list file is written next to the first clip.

        Raises:
            ConcatError: If there is nothing to concatenate or ffmpeg fails
        """
        if not clip_paths:
            raise ConcatError("No clips to concatenate")

        list_path = os.path.join(os.path.dirname(os.path.abspath(clip_paths[0])), CONCAT_LIST_NAME)
        try:
            write_concat_list(clip_paths, list_path)
        except OSError as e:
            raise ConcatError(f"Cannot write concat list {list_path}: {e}") from e

        cmd = [
            self.ffmpeg,
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", list_path,
            "-c:v", "libx264",
            "-an",
            output_path,
        ]

        try:
            result = self._run(cmd)
        except OSError as e:
            _remove_partial(output_path)
            raise ConcatError(f"ffmpeg could not be run: {e}") from e

        if result.returncode != 0:
            logger.error(f"ffmpeg concat failed: {result.stderr}")
            _remove_partial(output_path)
            raise ConcatError(f"ffmpeg concat failed: {result.stderr}")

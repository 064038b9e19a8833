"""
Source video discovery.

Lists candidate files in the source directory, probes their durations with
ffprobe and applies the minimum-duration and max-videos filters.
"""

import logging
import os
import random
import subprocess
from typing import Callable, Optional

from reelmix.config import Configuration
from reelmix.errors import CatalogError, ProbeError
from reelmix.models import Video
from reelmix.settings import settings

logger = logging.getLogger(__name__)

ProbeFn = Callable[[str], float]


def video_extensions() -> set[str]:
    """Configured video extensions, lowercased with a leading dot."""
    exts = set()
    for ext in settings.VIDEO_EXTENSIONS.split(","):
        ext = ext.strip().lower()
        if not ext:
            continue
        exts.add(ext if ext.startswith(".") else f".{ext}")
    return exts


def probe_duration(path: str, ffprobe: str = "ffprobe") -> float:
    """
    Get a media file's duration in seconds using ffprobe.

    Raises:
        ProbeError: If ffprobe fails or prints something that is not a number
    """
    cmd = [
        ffprobe,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        path,
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ProbeError(f"ffprobe could not be run for {path}: {e}") from e

    if result.returncode != 0:
        raise ProbeError(f"ffprobe failed for {path}: {result.stderr.strip()}")

    output = result.stdout.strip()
    try:
        duration = float(output)
    except ValueError:
        raise ProbeError(f"Unparsable duration for {path}: {output!r}")

    if duration <= 0:
        raise ProbeError(f"Non-positive duration for {path}: {duration}")

    return duration


def find_video_files(source_dir: str) -> list[str]:
    """
    List video files directly inside source_dir, sorted by name.

    Raises:
        CatalogError: If the directory does not exist or cannot be listed
    """
    if not os.path.isdir(source_dir):
        raise CatalogError(f"Source directory not found: {source_dir}")

    try:
        names = sorted(os.listdir(source_dir))
    except OSError as e:
        raise CatalogError(f"Cannot list source directory {source_dir}: {e}") from e

    exts = video_extensions()
    files = []
    for name in names:
        path = os.path.join(source_dir, name)
        if not os.path.isfile(path):
            continue
        if os.path.splitext(name)[1].lower() in exts:
            files.append(path)

    return files


def discover_catalog(
    source_dir: str,
    config: Configuration,
    probe: ProbeFn = probe_duration,
    rng: Optional[random.Random] = None,
) -> list[Video]:
    """
    Build the list of candidate videos.

    Videos that cannot be probed or are shorter than config.min_duration are
    skipped. When more than config.max_videos remain, a random subset of that
    size is kept (max_videos = 0 disables the cap).

    Args:
        source_dir: Directory holding source videos
        config: Run configuration
        probe: Callable returning a file's duration in seconds
        rng: Random source for the max_videos selection

    Returns:
        List of Video, in directory order unless capped
    """
    rng = rng or random.Random()
    videos = []

    for path in find_video_files(source_dir):
        name = os.path.basename(path)
        try:
            duration = probe(path)
        except ProbeError as e:
            logger.warning(f"Skipping {name}: {e}")
            continue

        if duration < config.min_duration:
            logger.info(
                f"Skipping {name}: duration {duration:.2f}s is below minimum {config.min_duration:.2f}s"
            )
            continue

        logger.info(f"Found video: {name}, duration: {duration:.2f}s")
        videos.append(Video(path=path, duration=duration))

    if config.max_videos > 0 and len(videos) > config.max_videos:
        logger.info(f"Too many videos ({len(videos)}), randomly selecting {config.max_videos}")
        videos = rng.sample(videos, config.max_videos)

    return videos

"""
Locate the ffmpeg/ffprobe binaries.

A bundled copy of the toolkit can ship next to the application. When one is
configured it is extracted into a working directory for the duration of the
run; otherwise the binaries are looked up on PATH.
"""

import logging
import os
import shutil
import stat
from dataclasses import dataclass
from typing import Optional

from reelmix.errors import ToolkitError
from reelmix.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

EXTRACT_DIRNAME = "ffmpeg"


@dataclass
class Toolkit:
    ffmpeg: str
    ffprobe: str
    extracted_dir: Optional[str] = None

    def cleanup(self) -> None:
        """Remove the extracted bundle, if any."""
        if self.extracted_dir and os.path.isdir(self.extracted_dir):
            shutil.rmtree(self.extracted_dir, ignore_errors=True)
            logger.debug(f"Removed extracted toolkit: {self.extracted_dir}")
        self.extracted_dir = None

    def __enter__(self) -> "Toolkit":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()


def _find_in_dir(directory: str, name: str) -> Optional[str]:
    for candidate in (name, f"{name}.exe"):
        path = os.path.join(directory, candidate)
        if os.path.isfile(path):
            return path
    return None


def extract_bundle(bundle_dir: str, work_dir: str) -> str:
    """
    Copy a bundled toolkit into work_dir/ffmpeg and mark it executable.

    Returns:
        Path of the extracted directory
    """
    if not os.path.isdir(bundle_dir):
        raise ToolkitError(f"Bundled toolkit directory not found: {bundle_dir}")

    target = os.path.join(work_dir, EXTRACT_DIRNAME)
    os.makedirs(target, exist_ok=True)

    for name in sorted(os.listdir(bundle_dir)):
        src = os.path.join(bundle_dir, name)
        if not os.path.isfile(src):
            continue
        dst = os.path.join(target, name)
        try:
            shutil.copyfile(src, dst)
            os.chmod(dst, os.stat(dst).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            shutil.rmtree(target, ignore_errors=True)
            raise ToolkitError(f"Failed to extract {name}: {e}") from e

    logger.info(f"Extracted toolkit from {bundle_dir} to {target}")
    return target


def resolve_toolkit(cfg: Settings = default_settings) -> Toolkit:
    """
    Resolve ffmpeg and ffprobe executables.

    Raises:
        ToolkitError: If either binary cannot be found
    """
    if cfg.FFMPEG_BUNDLE:
        extracted = extract_bundle(cfg.FFMPEG_BUNDLE, cfg.WORK_DIR)
        ffmpeg = _find_in_dir(extracted, "ffmpeg")
        ffprobe = _find_in_dir(extracted, "ffprobe")
        if not ffmpeg or not ffprobe:
            shutil.rmtree(extracted, ignore_errors=True)
            raise ToolkitError(f"Bundle {cfg.FFMPEG_BUNDLE} must contain ffmpeg and ffprobe")
        return Toolkit(ffmpeg=ffmpeg, ffprobe=ffprobe, extracted_dir=extracted)

    ffmpeg = shutil.which("ffmpeg")
    ffprobe = shutil.which("ffprobe")
    if not ffmpeg or not ffprobe:
        raise ToolkitError("ffmpeg/ffprobe not found. Install FFmpeg and ensure it is in your PATH.")

    logger.debug(f"Using ffmpeg={ffmpeg}, ffprobe={ffprobe}")
    return Toolkit(ffmpeg=ffmpeg, ffprobe=ffprobe)

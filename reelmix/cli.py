"""
Command-line entry point.

    reelmix --config config.ini --source-dir source_videos --output-dir results

Reads the configuration, discovers source videos and writes
combined_<i>.mp4 files to the output directory.
"""

import argparse
import logging
import random
import sys
from functools import partial
from typing import Optional

from reelmix.catalog import discover_catalog, probe_duration
from reelmix.config import load_config
from reelmix.errors import ReelmixError
from reelmix.generator import CombinationGenerator
from reelmix.settings import settings
from reelmix.toolkit import resolve_toolkit
from reelmix.transcode import FFmpegEngine

logger = logging.getLogger("reelmix")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="reelmix",
        description="Generate randomized highlight reels from a folder of videos.",
    )
    p.add_argument("--config", default=settings.CONFIG_PATH, help="INI configuration file.")
    p.add_argument("--source-dir", default=settings.SOURCE_DIR, help="Folder with source videos.")
    p.add_argument("--output-dir", default=settings.RESULTS_DIR, help="Folder for combined videos.")
    p.add_argument("--seed", type=int, help="Random seed for reproducible runs.")
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return p.parse_args(argv)


def run(args, rng: Optional[random.Random] = None) -> int:
    """Run one generation pass. Returns the number of files created."""
    rng = rng or random.Random(args.seed)

    config = load_config(args.config)
    with resolve_toolkit() as toolkit:
        probe = partial(probe_duration, ffprobe=toolkit.ffprobe)
        catalog = discover_catalog(args.source_dir, config, probe=probe, rng=rng)

        generator = CombinationGenerator(
            engine=FFmpegEngine(toolkit.ffmpeg),
            config=config,
            output_dir=args.output_dir,
            rng=rng,
        )
        results = generator.run(catalog)

    return sum(1 for r in results if r.status == "created")


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        created = run(args)
    except ReelmixError as e:
        logger.error(str(e))
        return 1

    logger.info(f"{created} combined video(s) written to {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

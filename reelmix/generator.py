"""
Combination generation loop.

Each attempt shuffles the catalog, allocates a clip plan, trims the planned
clips into a private temp directory and concatenates them into
combined_<i>.mp4. Failures inside an attempt only cost that attempt.
"""

import logging
import math
import os
import random
import tempfile
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from reelmix.allocator import allocate, total_available
from reelmix.config import Configuration
from reelmix.errors import (
    ConcatError,
    InfeasibleAllocationError,
    InsufficientInputError,
    OutputError,
    TrimError,
)
from reelmix.models import ClipPlan, Video
from reelmix.settings import settings
from reelmix.transcode import TranscodingEngine

logger = logging.getLogger(__name__)

MIN_CATALOG_SIZE = 2

AttemptStatus = Literal["created", "skipped_unavailable", "skipped_short_plan", "failed"]


@dataclass
class CombinationResult:
    index: int
    status: AttemptStatus
    output: Optional[str] = None
    planned_duration: float = 0.0
    clips_planned: int = 0
    clips_rendered: int = 0
    reason: Optional[str] = None


def output_path_for(output_dir: str, index: int) -> str:
    """Deterministic output file name for attempt index (1-based)."""
    return os.path.join(output_dir, f"combined_{index}.mp4")


def max_combinations(catalog_size: int) -> int:
    """Number of distinct orderings of the catalog."""
    return math.factorial(catalog_size)


class CombinationGenerator:
    """Produces up to num_combinations merged videos from a catalog."""

    def __init__(
        self,
        engine: TranscodingEngine,
        config: Configuration,
        output_dir: str,
        rng: Optional[random.Random] = None,
        tmp_dir: Optional[str] = None,
    ):
        self.engine = engine
        self.config = config
        self.output_dir = output_dir
        self.rng = rng or random.Random()
        self.tmp_dir = tmp_dir or settings.TMP_DIR or None

    def attempt_count(self, catalog_size: int) -> int:
        """Requested combinations, clamped to the number of distinct orderings."""
        requested = self.config.num_combinations
        limit = max_combinations(catalog_size)
        if requested > limit:
            logger.warning(
                f"Requested {requested} combinations exceeds the {limit} possible orderings "
                f"of {catalog_size} videos, using {limit}"
            )
            return limit
        return requested

    def shuffled(self, catalog: Sequence[Video]) -> list[Video]:
        ordering = list(catalog)
        self.rng.shuffle(ordering)
        return ordering

    def plan(self, ordering: Sequence[Video]) -> ClipPlan:
        """
        Allocate a sufficient plan for one ordering.

        Raises:
            InfeasibleAllocationError: If the ordering is too short, before or
                after allocation
        """
        target = self.config.target_duration
        available = total_available(ordering)
        if available < target:
            raise InfeasibleAllocationError(
                f"Available duration {available:.2f}s is below target {target:.2f}s",
                stage="availability",
            )

        plan = allocate(ordering, target, self.config.min_duration, self.rng)
        if not plan.is_sufficient:
            raise InfeasibleAllocationError(
                f"Allocated duration {plan.realized_duration:.2f}s is below target {target:.2f}s"
            )
        return plan

    def render(self, index: int, plan: ClipPlan) -> CombinationResult:
        """Trim every plan entry and concatenate the results."""
        result = CombinationResult(
            index=index,
            status="failed",
            planned_duration=plan.realized_duration,
            clips_planned=len(plan),
        )
        output_path = output_path_for(self.output_dir, index)

        with tempfile.TemporaryDirectory(prefix=f"reelmix-{index}-", dir=self.tmp_dir) as work_dir:
            clip_paths = []
            for n, entry in enumerate(plan.entries):
                clip_path = os.path.join(work_dir, f"clip_{n:03d}.mp4")
                logger.info(
                    f"Trimming {os.path.basename(entry.video.path)}: "
                    f"start {entry.start_offset:.2f}s, duration {entry.clip_duration:.2f}s"
                )
                try:
                    self.engine.trim(entry.video.path, entry.start_offset, entry.clip_duration, clip_path)
                except TrimError as e:
                    logger.error(f"Trim failed, dropping clip: {e}")
                    continue
                clip_paths.append(clip_path)

            result.clips_rendered = len(clip_paths)
            if not clip_paths:
                result.reason = "no clips could be trimmed"
                logger.error(f"Combination {index}: {result.reason}")
                return result

            try:
                self.engine.concat(clip_paths, output_path)
            except ConcatError as e:
                result.reason = str(e)
                logger.error(f"Combination {index}: concat failed: {e}")
                return result

        result.status = "created"
        result.output = output_path
        logger.info(f"Created {output_path}, planned duration {plan.realized_duration:.2f}s")
        return result

    def run_attempt(self, index: int, catalog: Sequence[Video]) -> CombinationResult:
        ordering = self.shuffled(catalog)

        try:
            plan = self.plan(ordering)
        except InfeasibleAllocationError as e:
            logger.warning(f"Combination {index}: {e}, skipping")
            status = "skipped_unavailable" if e.stage == "availability" else "skipped_short_plan"
            return CombinationResult(index=index, status=status, reason=str(e))

        return self.render(index, plan)

    def run(self, catalog: Sequence[Video]) -> list[CombinationResult]:
        """
        Generate combinations from the catalog.

        Raises:
            InsufficientInputError: If the catalog has fewer than two videos
            OutputError: If the output directory cannot be created
        """
        if len(catalog) < MIN_CATALOG_SIZE:
            raise InsufficientInputError(
                f"At least {MIN_CATALOG_SIZE} eligible videos are required, found {len(catalog)}"
            )

        count = self.attempt_count(len(catalog))
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Cannot create output directory {self.output_dir}: {e}") from e

        results = []
        for index in range(1, count + 1):
            logger.info(f"Generating combination {index}/{count}")
            results.append(self.run_attempt(index, catalog))

        created = sum(1 for r in results if r.status == "created")
        logger.info(f"Done: {created} of {count} combinations created")
        return results


def generate_combinations(
    catalog: Sequence[Video],
    config: Configuration,
    engine: TranscodingEngine,
    output_dir: str,
    rng: Optional[random.Random] = None,
) -> list[CombinationResult]:
    """Run a CombinationGenerator once and return its per-attempt results."""
    generator = CombinationGenerator(engine=engine, config=config, output_dir=output_dir, rng=rng)
    return generator.run(catalog)

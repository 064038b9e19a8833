"""
Duration allocation for a single video ordering.

Splits a target duration across an ordering of videos proportionally to each
video's trimmable length, then picks a random trim window inside each video.

Rules, applied per video in ordering order until the target is used up:
- Proportional share: target * (duration - 1) / total_available.
  The share is always taken from the full target, not from what is left.
- Floor: a share below min_clip_duration is raised to it.
- Remainder absorption: if what would be left after this clip is below
  min_clip_duration, this clip takes everything that is left.
- Window: the clip must leave one second at the end of the video
  (max_start = duration - clip - 1). Videos with max_start <= 0 are skipped.
"""

import logging
import random
from typing import Optional, Sequence

from reelmix.models import ClipPlan, ClipPlanEntry, Video

logger = logging.getLogger(__name__)


def total_available(ordering: Sequence[Video]) -> float:
    """Sum of trimmable durations (duration - 1 per video)."""
    return sum(video.available for video in ordering)


def is_feasible(ordering: Sequence[Video], target_duration: float) -> bool:
    """Whether an ordering has enough trimmable footage to reach the target."""
    return total_available(ordering) >= target_duration


def allocate(
    ordering: Sequence[Video],
    target_duration: float,
    min_clip_duration: float,
    rng: Optional[random.Random] = None,
) -> ClipPlan:
    """
    Build a clip plan for one ordering.

    Never raises. The returned plan may fall short of the target; callers
    check ClipPlan.is_sufficient.

    Args:
        ordering: Videos in the order they will appear
        target_duration: Desired total duration in seconds
        min_clip_duration: Minimum duration of any single clip
        rng: Random source for start offsets

    Returns:
        ClipPlan with entries and realized duration
    """
    rng = rng or random.Random()
    plan = ClipPlan(target_duration=target_duration)

    available_total = total_available(ordering)
    if available_total <= 0:
        return plan

    remaining = target_duration

    for video in ordering:
        if remaining <= 0:
            break

        ratio = video.available / available_total
        clip = target_duration * ratio

        if clip < min_clip_duration:
            clip = min_clip_duration

        if remaining - clip < min_clip_duration:
            clip = remaining

        max_start = video.duration - clip - 1
        if max_start <= 0:
            logger.debug(
                f"Skipping {video.path}: clip of {clip:.2f}s does not fit in {video.duration:.2f}s"
            )
            continue

        start = rng.random() * max_start
        plan.entries.append(ClipPlanEntry(video=video, start_offset=start, clip_duration=clip))
        remaining -= clip

    plan.realized_duration = target_duration - remaining
    return plan

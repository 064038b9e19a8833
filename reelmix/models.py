"""Core data types shared by the catalog, allocator and generator."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Video:
    path: str
    duration: float

    @property
    def available(self) -> float:
        """Trimmable duration, keeping one second in reserve."""
        return self.duration - 1


@dataclass(frozen=True)
class ClipPlanEntry:
    video: Video
    start_offset: float
    clip_duration: float

    @property
    def end_offset(self) -> float:
        return self.start_offset + self.clip_duration


@dataclass
class ClipPlan:
    """Ordered trim decisions for one combination attempt."""

    target_duration: float
    entries: list[ClipPlanEntry] = field(default_factory=list)
    realized_duration: float = 0.0

    @property
    def is_sufficient(self) -> bool:
        return self.realized_duration >= self.target_duration

    def __len__(self) -> int:
        return len(self.entries)

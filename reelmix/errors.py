"""Domain-level errors for reel generation."""


class ReelmixError(Exception):
    """Base class for all reelmix errors."""


class ConfigurationError(ReelmixError):
    """Raised when the configuration file cannot be read."""


class ToolkitError(ReelmixError):
    """Raised when ffmpeg or ffprobe cannot be located."""


class CatalogError(ReelmixError):
    """Raised when the source directory cannot be listed."""


class InsufficientInputError(ReelmixError):
    """Raised when fewer than two eligible videos are available."""


class ProbeError(ReelmixError):
    """Raised when a video's duration cannot be determined."""


class InfeasibleAllocationError(ReelmixError):
    """Raised when an ordering cannot reach the target duration.

    stage is "availability" when the footage is too short before allocation
    and "allocation" when the computed plan falls short.
    """

    def __init__(self, message: str, stage: str = "allocation"):
        super().__init__(message)
        self.stage = stage


class TranscodeError(ReelmixError):
    """Raised when the transcoding engine fails."""


class TrimError(TranscodeError):
    """Raised when a single clip cannot be trimmed."""


class ConcatError(TranscodeError):
    """Raised when trimmed clips cannot be concatenated."""


class OutputError(ReelmixError):
    """Raised when the output directory cannot be created."""

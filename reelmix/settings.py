import os


class Settings:
    """Application settings loaded from environment variables."""

    SOURCE_DIR: str = os.getenv("REELMIX_SOURCE_DIR", "source_videos")
    RESULTS_DIR: str = os.getenv("REELMIX_RESULTS_DIR", "results")
    CONFIG_PATH: str = os.getenv("REELMIX_CONFIG", "config.ini")
    TMP_DIR: str = os.getenv("REELMIX_TMP_DIR", "")

    # Toolkit settings
    FFMPEG_BUNDLE: str = os.getenv("REELMIX_FFMPEG_BUNDLE", "")
    WORK_DIR: str = os.getenv("REELMIX_WORK_DIR", ".")

    # Comma-separated, case-insensitive
    VIDEO_EXTENSIONS: str = os.getenv("REELMIX_VIDEO_EXTENSIONS", ".mp4,.avi,.mov,.mkv")


settings = Settings()

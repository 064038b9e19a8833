"""Tests for the command-line entry point."""

import pytest

from reelmix import cli
from reelmix.errors import CatalogError
from reelmix.models import Video
from reelmix.toolkit import Toolkit


class WritingEngine:
    def __init__(self, ffmpeg="ffmpeg"):
        self.ffmpeg = ffmpeg

    def trim(self, source_path, start, duration, output_path):
        with open(output_path, "w") as f:
            f.write("clip")

    def concat(self, clip_paths, output_path):
        with open(output_path, "w") as f:
            f.write("merged")


@pytest.fixture
def wired(monkeypatch, tmp_path):
    config_path = tmp_path / "config.ini"
    config_path.write_text("num_combinations = 2\ntarget_duration = 30\n", encoding="utf-8")

    catalog = [Video(path="a.mp4", duration=30.0), Video(path="b.mp4", duration=40.0)]
    monkeypatch.setattr(cli, "resolve_toolkit", lambda: Toolkit(ffmpeg="ffmpeg", ffprobe="ffprobe"))
    monkeypatch.setattr(cli, "discover_catalog", lambda source_dir, config, probe, rng: catalog)
    monkeypatch.setattr(cli, "FFmpegEngine", WritingEngine)
    return config_path


class TestParseArgs:
    def test_defaults(self):
        """Defaults come from settings."""
        args = cli.parse_args([])
        assert args.seed is None
        assert args.log_level == "INFO"

    def test_overrides(self):
        """Paths and seed can be set on the command line."""
        args = cli.parse_args(["--config", "x.ini", "--source-dir", "src", "--output-dir", "out", "--seed", "3"])
        assert (args.config, args.source_dir, args.output_dir, args.seed) == ("x.ini", "src", "out", 3)


class TestMain:
    def test_writes_outputs(self, wired, tmp_path):
        """A successful run writes combined files and exits 0."""
        out_dir = tmp_path / "results"
        code = cli.main(["--config", str(wired), "--output-dir", str(out_dir), "--seed", "1"])

        assert code == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["combined_1.mp4", "combined_2.mp4"]

    def test_missing_config_exits_nonzero(self, tmp_path):
        """An unreadable configuration is fatal."""
        assert cli.main(["--config", str(tmp_path / "missing.ini")]) == 1

    def test_insufficient_videos_exits_nonzero(self, wired, monkeypatch, tmp_path):
        """Fewer than two videos is fatal."""
        monkeypatch.setattr(
            cli, "discover_catalog", lambda source_dir, config, probe, rng: [Video(path="a.mp4", duration=30.0)]
        )
        assert cli.main(["--config", str(wired), "--output-dir", str(tmp_path / "out")]) == 1

    def test_catalog_error_exits_nonzero(self, wired, monkeypatch, tmp_path):
        """A missing source directory is fatal."""

        def fail(source_dir, config, probe, rng):
            raise CatalogError("Source directory not found")

        monkeypatch.setattr(cli, "discover_catalog", fail)
        assert cli.main(["--config", str(wired), "--output-dir", str(tmp_path / "out")]) == 1

    def test_uncreatable_output_dir_exits_nonzero(self, wired, tmp_path):
        """An output directory that cannot be created is fatal but not a crash."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert cli.main(["--config", str(wired), "--output-dir", str(blocker / "out")]) == 1

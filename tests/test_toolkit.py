"""Tests for ffmpeg/ffprobe resolution."""

import os

import pytest

from reelmix import toolkit
from reelmix.errors import ToolkitError
from reelmix.settings import Settings
from reelmix.toolkit import extract_bundle, resolve_toolkit


def make_settings(**values):
    cfg = Settings()
    cfg.FFMPEG_BUNDLE = ""
    for key, value in values.items():
        setattr(cfg, key, value)
    return cfg


@pytest.fixture
def bundle(tmp_path):
    bundle_dir = tmp_path / "bundle"
    bundle_dir.mkdir()
    (bundle_dir / "ffmpeg").write_bytes(b"bin")
    (bundle_dir / "ffprobe").write_bytes(b"bin")
    return bundle_dir


class TestResolveFromPath:
    def test_uses_path_binaries(self, monkeypatch):
        """Binaries on PATH are used when no bundle is configured."""
        monkeypatch.setattr(toolkit.shutil, "which", lambda name: f"/usr/bin/{name}")
        kit = resolve_toolkit(make_settings())
        assert kit.ffmpeg == "/usr/bin/ffmpeg"
        assert kit.ffprobe == "/usr/bin/ffprobe"
        assert kit.extracted_dir is None

    def test_missing_binary_raises(self, monkeypatch):
        """A missing binary is fatal."""
        monkeypatch.setattr(toolkit.shutil, "which", lambda name: None if name == "ffprobe" else "/x")
        with pytest.raises(ToolkitError, match="not found"):
            resolve_toolkit(make_settings())


class TestBundle:
    def test_extracts_and_cleans_up(self, bundle, tmp_path):
        """A bundle is copied into the work dir and removed on exit."""
        work = tmp_path / "work"
        work.mkdir()
        cfg = make_settings(FFMPEG_BUNDLE=str(bundle), WORK_DIR=str(work))

        with resolve_toolkit(cfg) as kit:
            assert kit.ffmpeg == os.path.join(str(work), "ffmpeg", "ffmpeg")
            assert os.access(kit.ffprobe, os.X_OK)

        assert not (work / "ffmpeg").exists()

    def test_windows_executables_found(self, tmp_path):
        """Bundled .exe binaries are recognised."""
        bundle_dir = tmp_path / "bundle"
        bundle_dir.mkdir()
        (bundle_dir / "ffmpeg.exe").write_bytes(b"bin")
        (bundle_dir / "ffprobe.exe").write_bytes(b"bin")
        cfg = make_settings(FFMPEG_BUNDLE=str(bundle_dir), WORK_DIR=str(tmp_path))

        kit = resolve_toolkit(cfg)
        assert kit.ffmpeg.endswith("ffmpeg.exe")
        kit.cleanup()

    def test_incomplete_bundle_raises(self, tmp_path):
        """A bundle without ffprobe is rejected and nothing is left behind."""
        bundle_dir = tmp_path / "bundle"
        bundle_dir.mkdir()
        (bundle_dir / "ffmpeg").write_bytes(b"bin")
        cfg = make_settings(FFMPEG_BUNDLE=str(bundle_dir), WORK_DIR=str(tmp_path))

        with pytest.raises(ToolkitError, match="must contain"):
            resolve_toolkit(cfg)
        assert not (tmp_path / "ffmpeg").exists()

    def test_missing_bundle_dir_raises(self, tmp_path):
        """A configured bundle directory that does not exist is fatal."""
        with pytest.raises(ToolkitError):
            extract_bundle(str(tmp_path / "missing"), str(tmp_path))

    def test_failed_copy_removes_partial_extraction(self, bundle, tmp_path, monkeypatch):
        """A copy error part way through leaves no extracted directory."""
        work = tmp_path / "work"
        work.mkdir()
        real_copyfile = toolkit.shutil.copyfile

        def flaky_copyfile(src, dst):
            if os.path.basename(src) == "ffprobe":
                raise OSError("disk full")
            return real_copyfile(src, dst)

        monkeypatch.setattr(toolkit.shutil, "copyfile", flaky_copyfile)
        with pytest.raises(ToolkitError, match="disk full"):
            extract_bundle(str(bundle), str(work))
        assert not (work / "ffmpeg").exists()

"""Tests for archive extraction, metadata discovery and the local provider."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from pluginguard.errors import AcquisitionError
from pluginguard.sources.archive import extract_archive
from pluginguard.sources.base import ScanSource, SourceKind, SourceProvider
from pluginguard.sources.local import LocalSourceProvider
from pluginguard.sources.metadata import extract_metadata
from pluginguard.sources.repository import clone_repository


def _make_tar(path: Path, files: dict[str, str]) -> Path:
    with tarfile.open(path, "w:gz") as tf:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return path


class TestScanSource:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("plugin.zip", "plugin"),
            ("plugin.tar.gz", "plugin"),
            ("Plugin.TGZ", "Plugin"),
            ("plugin.tar", "plugin"),
            ("plugin", "plugin"),
        ],
    )
    def test_upload_fallback_name(self, name, expected):
        assert ScanSource.upload(f"/tmp/uploads/abc-{name}", name).fallback_name == expected

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/org/plugin.git", "plugin"),
            ("https://github.com/org/plugin", "plugin"),
            ("https://github.com/org/plugin/", "plugin"),
            ("git@github.com:org/plugin.git", "plugin"),
        ],
    )
    def test_repository_fallback_name(self, url, expected):
        source = ScanSource.repository(url)
        assert source.kind == SourceKind.REPOSITORY
        assert source.fallback_name == expected

    def test_upload_defaults(self, tmp_path: Path):
        source = ScanSource.upload(tmp_path / "x.zip")
        assert source.kind == SourceKind.UPLOAD
        assert source.display_name == "x.zip"
        assert not source.remove_archive


class TestExtractArchive:
    def test_zip_descends_into_single_directory(self, make_zip, tmp_path: Path):
        archive = make_zip({"plugin/index.js": "x", "plugin/lib/a.js": "y"})
        root = extract_archive(archive, tmp_path / "out")
        assert root == tmp_path / "out" / "plugin"
        assert (root / "lib" / "a.js").read_text() == "y"

    def test_zip_with_several_entries(self, make_zip, tmp_path: Path):
        archive = make_zip({"index.js": "x", "lib/a.js": "y"})
        root = extract_archive(archive, tmp_path / "out")
        assert root == tmp_path / "out"

    def test_tar_gz(self, tmp_path: Path):
        archive = _make_tar(tmp_path / "plugin.tar.gz", {"pkg/main.py": "print(1)"})
        root = extract_archive(archive, tmp_path / "out")
        assert (root / "main.py").read_text() == "print(1)"

    def test_detects_format_by_content(self, make_zip, tmp_path: Path):
        archive = make_zip({"a.js": "x"}, name="misnamed.tar.gz")
        root = extract_archive(archive, tmp_path / "out")
        assert (root / "a.js").exists()

    def test_unsupported(self, tmp_path: Path):
        archive = tmp_path / "notes.zip"
        archive.write_text("just text")
        with pytest.raises(AcquisitionError, match="Unsupported archive format"):
            extract_archive(archive, tmp_path / "out")

    def test_zip_slip_rejected(self, make_zip, tmp_path: Path):
        archive = make_zip({"../escape.js": "eval(x)"})
        with pytest.raises(AcquisitionError, match="escapes"):
            extract_archive(archive, tmp_path / "out")
        assert not (tmp_path / "escape.js").exists()

    def test_tar_traversal_rejected(self, tmp_path: Path):
        archive = _make_tar(tmp_path / "evil.tar.gz", {"../escape.js": "eval(x)"})
        with pytest.raises(AcquisitionError, match="Failed to extract"):
            extract_archive(archive, tmp_path / "out")
        assert not (tmp_path / "escape.js").exists()


class TestExtractMetadata:
    def test_package_json(self, make_tree):
        root = make_tree(
            {
                "package.json": (
                    '{"name": "shop-widget", "version": "3.1.0", '
                    '"description": "A widget", "author": {"name": "Dana"}, '
                    '"license": "MIT"}'
                )
            }
        )
        meta = extract_metadata(root)
        assert meta.name == "shop-widget"
        assert meta.version == "3.1.0"
        assert meta.description == "A widget"
        assert meta.author == "Dana"
        assert meta.license == "MIT"

    def test_composer_fills_gaps(self, make_tree):
        root = make_tree(
            {
                "package.json": '{"name": "from-npm"}',
                "composer.json": (
                    '{"name": "vendor/from-composer", "version": "0.9.0", '
                    '"authors": [{"name": "Sam"}]}'
                ),
            }
        )
        meta = extract_metadata(root)
        assert meta.name == "from-npm"
        assert meta.version == "0.9.0"
        assert meta.author == "Sam"

    def test_setup_py(self, make_tree):
        root = make_tree({"setup.py": 'setup(name="pyplug", version="0.2")\n'})
        meta = extract_metadata(root)
        assert (meta.name, meta.version) == ("pyplug", "0.2")

    def test_broken_manifest_ignored(self, make_tree):
        root = make_tree({"package.json": "{not json", "composer.json": "[1, 2]"})
        meta = extract_metadata(root)
        assert meta.name is None
        assert meta.version is None

    def test_empty_directory(self, tmp_path: Path):
        assert extract_metadata(tmp_path).name is None


class TestCloneRepository:
    def test_clone_failure_is_acquisition_error(self, tmp_path: Path):
        pytest.importorskip("git")
        from git.exc import GitCommandError

        error = GitCommandError(["git", "clone"], 128, stderr="repository not found")
        with patch("git.Repo.clone_from", side_effect=error):
            with pytest.raises(AcquisitionError, match="repository not found"):
                clone_repository("https://example.com/missing.git", tmp_path / "r")

    def test_shallow_clone(self, tmp_path: Path):
        pytest.importorskip("git")
        with patch("git.Repo.clone_from") as clone_from:
            dest = clone_repository("https://example.com/ok.git", tmp_path / "r")
        clone_from.assert_called_once_with(
            "https://example.com/ok.git", tmp_path / "r", depth=1
        )
        assert dest == tmp_path / "r"


class TestLocalSourceProvider:
    def test_is_a_source_provider(self, tmp_path: Path):
        assert isinstance(LocalSourceProvider(tmp_path), SourceProvider)

    def test_acquire_and_cleanup(self, make_zip, tmp_path: Path):
        archive = make_zip({"plugin/a.js": "eval(x)"})
        work_dir = tmp_path / "work"
        provider = LocalSourceProvider(work_dir)

        root = provider.acquire(ScanSource.upload(archive, remove_archive=True))
        assert (root / "a.js").exists()
        assert root.is_relative_to(work_dir)

        provider.cleanup(root)
        assert list(work_dir.iterdir()) == []
        assert not archive.exists()

    def test_cleanup_keeps_archive_by_default(self, make_zip, tmp_path: Path):
        archive = make_zip({"a.js": "x"})
        provider = LocalSourceProvider(tmp_path / "work")
        provider.cleanup(provider.acquire(ScanSource.upload(archive)))
        assert archive.exists()

    def test_failed_acquire_leaves_nothing(self, tmp_path: Path):
        archive = tmp_path / "bad.zip"
        archive.write_text("nope")
        work_dir = tmp_path / "work"
        provider = LocalSourceProvider(work_dir)
        with pytest.raises(AcquisitionError):
            provider.acquire(ScanSource.upload(archive, remove_archive=True))
        assert list(work_dir.iterdir()) == []
        assert not archive.exists()

    def test_cleanup_unknown_root_is_noop(self, tmp_path: Path):
        LocalSourceProvider(tmp_path).cleanup(tmp_path / "never-acquired")

    def test_metadata_errors_swallowed(self, tmp_path: Path):
        provider = LocalSourceProvider(tmp_path)
        with patch(
            "pluginguard.sources.local.extract_metadata",
            side_effect=PermissionError("denied"),
        ):
            meta = provider.extract_metadata(tmp_path)
        assert meta.name is None

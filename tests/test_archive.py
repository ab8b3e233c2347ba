"""Tests for archive materialization."""

import pytest

from LabRepo.archive import materialize
from LabRepo.errors import ArchiveWriteError, FileIOError


class TestMaterialize:
    def test_writes_file(self, tmp_path):
        path = materialize([b"abc", b"def"], "repo.tar.gz", tmp_path, default_directory="/unused")
        assert path == tmp_path / "repo.tar.gz"
        assert path.read_bytes() == b"abcdef"

    def test_overwrites_existing_file(self, tmp_path):
        first = materialize([b"first version"], "repo.tar.gz", tmp_path, default_directory=tmp_path)
        second = materialize([b"second"], "repo.tar.gz", tmp_path, default_directory=tmp_path)
        assert first == second
        assert second.read_bytes() == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["repo.tar.gz"]

    def test_uses_default_directory(self, tmp_path):
        path = materialize([b"x"], "a.zip", None, default_directory=tmp_path)
        assert path == tmp_path / "a.zip"

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ArchiveWriteError, match="does not exist"):
            materialize([b"x"], "a.zip", tmp_path / "nope", default_directory=tmp_path)

    def test_failed_stream_leaves_no_file(self, tmp_path):
        def chunks():
            yield b"partial"
            raise OSError("connection dropped")

        with pytest.raises(ArchiveWriteError) as exc_info:
            materialize(chunks(), "repo.tar.gz", tmp_path, default_directory=tmp_path)
        assert isinstance(exc_info.value, FileIOError)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert list(tmp_path.iterdir()) == []

    def test_failed_overwrite_keeps_previous_file(self, tmp_path):
        materialize([b"good"], "repo.tar.gz", tmp_path, default_directory=tmp_path)

        def chunks():
            yield b"bad"
            raise RuntimeError("decoder blew up")

        with pytest.raises(RuntimeError):
            materialize(chunks(), "repo.tar.gz", tmp_path, default_directory=tmp_path)
        assert (tmp_path / "repo.tar.gz").read_bytes() == b"good"
        assert [p.name for p in tmp_path.iterdir()] == ["repo.tar.gz"]

"""Tests for gcovtool.loader."""

from __future__ import annotations

import errno
import io
from pathlib import Path

import pytest

from gcovtool.loader import ArtifactBuffer, ArtifactLoadError, load_artifact


def test_load_artifact_reads_whole_file(tmp_path: Path) -> None:
    path = tmp_path / "foo.gcno"
    path.write_bytes(b"oncg\x00\x01")

    buffer = load_artifact(str(path))

    assert isinstance(buffer, ArtifactBuffer)
    assert buffer.name == str(path)
    assert buffer.data == b"oncg\x00\x01"
    assert len(buffer) == 6


def test_load_artifact_accepts_unterminated_and_empty_files(tmp_path: Path) -> None:
    path = tmp_path / "partial.gcda"
    path.write_bytes(b"")

    assert load_artifact(str(path)).data == b""


def test_missing_file_is_classified_as_missing(tmp_path: Path) -> None:
    name = str(tmp_path / "absent.gcda")

    with pytest.raises(ArtifactLoadError) as info:
        load_artifact(name)

    assert info.value.is_missing
    assert info.value.errno == errno.ENOENT
    assert info.value.describe() == f"{name}: No such file or directory"


def test_directory_is_not_classified_as_missing(tmp_path: Path) -> None:
    with pytest.raises(ArtifactLoadError) as info:
        load_artifact(str(tmp_path))

    assert not info.value.is_missing
    assert info.value.describe().startswith(f"{tmp_path}: ")


def test_dash_reads_standard_input() -> None:
    buffer = load_artifact("-", stdin=io.BytesIO(b"adcg"))

    assert buffer.name == "-"
    assert buffer.data == b"adcg"

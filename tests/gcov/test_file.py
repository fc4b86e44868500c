"""Tests for GCOVFile notes/data parsing and count solving."""

from __future__ import annotations

import io

import pytest

from gcovtool.gcov import GCOVBuffer, GCOVFile
from tests._fixtures.gcov_builder import build_gcda, build_gcno, sample_function


def _loaded_graph(byteorder: str = "little") -> GCOVFile:
    graph = GCOVFile()
    assert graph.read_gcno(GCOVBuffer(build_gcno([sample_function()], byteorder=byteorder)))
    return graph


def test_read_gcno_builds_functions_blocks_and_lines() -> None:
    graph = _loaded_graph()

    assert graph.version == "408*"
    assert graph.checksum == 0xC0FFEE
    [function] = graph.functions
    assert function.name == "main"
    assert function.filename == "foo.c"
    assert function.start_line == 1
    assert len(function.blocks) == 5
    assert len(function.arcs) == 5
    assert len(function.instrumented_arcs) == 2
    assert function.blocks[2].lines == [("foo.c", 1), ("foo.c", 2)]
    assert graph.source_files() == ["foo.c"]


def test_read_gcno_handles_big_endian_files() -> None:
    graph = _loaded_graph("big")

    assert graph.functions[0].name == "main"


def test_read_gcno_rejects_wrong_magic_and_truncation() -> None:
    assert not GCOVFile().read_gcno(GCOVBuffer(b"not a notes file"))

    data = build_gcno([sample_function()])
    graph = GCOVFile()
    assert not graph.read_gcno(GCOVBuffer(data[:-6]))
    assert graph.functions == []


def test_read_gcda_solves_block_counts() -> None:
    graph = _loaded_graph()
    function = graph.functions[0]

    assert graph.read_gcda(GCOVBuffer(build_gcda([sample_function()], {1: [3, 1]}, runs=2)))

    assert graph.run_count == 2
    assert [block.count for block in function.blocks] == [4, 4, 4, 3, 1]
    assert function.entry_count == 4
    assert function.executed_blocks == 5


def test_read_gcda_rejects_checksum_mismatch_without_applying_counts() -> None:
    graph = _loaded_graph()

    data = build_gcda([sample_function()], {1: [3, 1]}, stamp=0xBAD)
    assert not graph.read_gcda(GCOVBuffer(data))

    assert graph.run_count == 0
    assert all(arc.count == 0 for arc in graph.functions[0].arcs)
    assert not graph.gcda_loaded


def test_read_gcda_rejects_counter_count_mismatch() -> None:
    graph = _loaded_graph()
    function = sample_function()
    function.arcs.append((3, 4, 0))  # one more counter than the notes expect

    assert not graph.read_gcda(GCOVBuffer(build_gcda([function], {1: [1, 2, 3]})))
    assert all(arc.count == 0 for arc in graph.functions[0].arcs)


def test_read_gcda_requires_notes_first() -> None:
    data = build_gcda([sample_function()], {1: [3, 1]})

    assert not GCOVFile().read_gcda(GCOVBuffer(data))


def test_dump_lists_functions_and_blocks() -> None:
    graph = _loaded_graph()
    graph.read_gcda(GCOVBuffer(build_gcda([sample_function()], {1: [3, 1]})))
    stream = io.StringIO()

    graph.dump(stream)

    text = stream.getvalue()
    assert "===== main (1) @ foo.c:1" in text
    assert "Block : 3 Counter : 3" in text
    assert "Lines : 1,2" in text


@pytest.mark.parametrize(
    ("version", "cwd"),
    [
        ("408*", ""),
        ("801*", ""),
        ("903*", "/build"),
        ("B01*", "/build"),
    ],
)
def test_notes_and_data_layouts_across_gcc_releases(version: str, cwd: str) -> None:
    spec = sample_function()
    spec.column = 5
    spec.end_line = 6
    graph = GCOVFile()

    assert graph.read_gcno(GCOVBuffer(build_gcno([spec], version=version, cwd="/build")))
    assert graph.read_gcda(GCOVBuffer(build_gcda([spec], {1: [3, 1]}, version=version, runs=2)))

    [function] = graph.functions
    assert graph.version == version
    assert graph.cwd == cwd
    assert function.filename == "foo.c"
    assert function.start_line == 1
    assert len(function.blocks) == 5
    assert function.blocks[3].lines == [("foo.c", 3)]
    assert graph.run_count == 2
    assert [block.count for block in function.blocks] == [4, 4, 4, 3, 1]


def test_newer_layouts_carry_columns_and_artificial_flag() -> None:
    spec = sample_function()
    spec.column = 5
    spec.end_line = 6
    spec.artificial = True
    graph = GCOVFile()

    assert graph.read_gcno(GCOVBuffer(build_gcno([spec], version="A03*")))

    [function] = graph.functions
    assert function.start_column == 5
    assert function.end_line == 6
    assert function.artificial


def test_read_gcno_rejects_gcc_12_layout() -> None:
    graph = GCOVFile()

    assert not graph.read_gcno(GCOVBuffer(build_gcno([sample_function()], version="C01*")))
    assert not graph.gcno_loaded
    assert graph.functions == []


def test_read_gcda_rejects_version_mismatch() -> None:
    graph = _loaded_graph()

    data = build_gcda([sample_function()], {1: [3, 1]}, version="A03*")
    assert not graph.read_gcda(GCOVBuffer(data))
    assert not graph.gcda_loaded

"""Tests for gcovtool.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from gcovtool.config import ConfigError, GcovToolConfig, load_config
from gcovtool.models import GCOVOptions


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, GcovToolConfig)
    assert config.root == tmp_path.resolve()
    assert config.object_directory is None
    assert config.source_prefix is None
    assert config.options == {}


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".gcovtool.yml"
    config_file.write_text(
        """
object_directory: build/obj
source_prefix: /home/dev/project
options:
  branch_probabilities: true
  preserve-paths: yes
  no_output: false
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.object_directory == "build/obj"
    assert config.source_prefix == "/home/dev/project"
    assert config.options == {"branch_info": True, "preserve_paths": True, "no_output": False}


def test_explicit_config_file_with_other_name(tmp_path: Path) -> None:
    config_file = tmp_path / "coverage.yml"
    config_file.write_text("source_prefix: /src\n", encoding="utf-8")

    assert load_config(config_file).source_prefix == "/src"


def test_apply_keeps_cli_values_and_enables_config_switches(tmp_path: Path) -> None:
    config = GcovToolConfig(
        root=tmp_path,
        source_prefix="/from/config",
        options={"branch_info": True, "no_output": False},
    )

    merged = config.apply(GCOVOptions(all_blocks=True, no_output=True, source_prefix="/from/cli"))

    assert merged == GCOVOptions(
        all_blocks=True, branch_info=True, no_output=True, source_prefix="/from/cli"
    )
    assert config.apply(GCOVOptions()).source_prefix == "/from/config"


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "options: [a, b]\n",
        "options:\n  unknown_flag: true\n",
        "options:\n  stdout: maybe\n",
        "options: {stdout: true\n",
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, content: str) -> None:
    (tmp_path / ".gcovtool.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)

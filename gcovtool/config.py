"""Configuration loading for gcovtool (.gcovtool.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import GCOVOptions

CONFIG_FILENAME = ".gcovtool.yml"

# Long flag names (with "_") accepted under `options:` and the GCOVOptions field they set.
OPTION_KEYS: Dict[str, str] = {
    "all_blocks": "all_blocks",
    "branch_probabilities": "branch_info",
    "branch_counts": "branch_count",
    "function_summaries": "func_coverage",
    "preserve_paths": "preserve_paths",
    "unconditional_branches": "uncond_branch",
    "intermediate_format": "intermediate",
    "long_file_names": "long_file_names",
    "demangled_names": "demangle",
    "no_output": "no_output",
    "relative_only": "relative_only",
    "stdout": "use_stdout",
    "hash_filenames": "hash_filenames",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GcovToolConfig:
    """Represents the defaults defined in .gcovtool.yml."""

    root: Path
    object_directory: Optional[str] = None
    source_prefix: Optional[str] = None
    options: Dict[str, bool] = field(default_factory=dict)

    def apply(self, options: GCOVOptions) -> GCOVOptions:
        """Return *options* with config switches turned on and the prefix filled in."""
        updates: Dict[str, Any] = {}
        for name, enabled in self.options.items():
            if enabled and not getattr(options, name):
                updates[name] = True
        if not options.source_prefix and self.source_prefix:
            updates["source_prefix"] = self.source_prefix
        return replace(options, **updates) if updates else options


def load_config(config_path: Path) -> GcovToolConfig:
    """Load configuration from disk; a missing file yields empty defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GcovToolConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    options_data = data.get("options") or {}
    if not isinstance(options_data, dict):
        raise ConfigError("`options` must be a mapping of flag names to booleans")
    valid_fields = {item.name for item in fields(GCOVOptions)}
    options: Dict[str, bool] = {}
    for key, value in options_data.items():
        name = OPTION_KEYS.get(str(key).replace("-", "_"))
        if name is None or name not in valid_fields:
            raise ConfigError(f"Unknown option in {CONFIG_FILENAME}: {key}")
        flag = _as_bool(value)
        if flag is None:
            raise ConfigError(f"Option {key} must be true or false")
        options[name] = flag

    return GcovToolConfig(
        root=root,
        object_directory=_as_str(data.get("object_directory")),
        source_prefix=_as_str(data.get("source_prefix")),
        options=options,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc.strerror or exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["CONFIG_FILENAME", "ConfigError", "GcovToolConfig", "load_config"]

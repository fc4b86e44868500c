"""Core data models shared across gcovtool components."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GCOVOptions:
    """Report switches selected on the command line.

    Passed unchanged from the CLI to the renderer; the pipeline never
    inspects them.
    """

    all_blocks: bool = False
    branch_info: bool = False
    branch_count: bool = False
    func_coverage: bool = False
    preserve_paths: bool = False
    uncond_branch: bool = False
    intermediate: bool = False
    long_file_names: bool = False
    demangle: bool = False
    no_output: bool = False
    relative_only: bool = False
    use_stdout: bool = False
    hash_filenames: bool = False
    source_prefix: str = ""

"""CLI entrypoint for the gcov-compatible coverage tool."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, load_config
from .logging import configure_logging, get_logger
from .models import GCOVOptions
from .pipeline import CoverageReporter

# (short flag, long flags, GCOVOptions field, help)
_SWITCHES: tuple[tuple[str, tuple[str, ...], str, str], ...] = (
    ("-a", ("--all-blocks",), "all_blocks", "Display all basic blocks"),
    ("-b", ("--branch-probabilities",), "branch_info", "Display branch probabilities"),
    (
        "-c",
        ("--branch-counts",),
        "branch_count",
        "Display branch counts instead of percentages (requires -b)",
    ),
    ("-l", ("--long-file-names",), "long_file_names", "Prefix filenames with the main file"),
    ("-f", ("--function-summaries",), "func_coverage", "Show coverage for each function"),
    ("-i", ("--intermediate-format",), "intermediate", "Output .gcov in intermediate text format"),
    ("-m", ("--demangled-names",), "demangle", "Demangle function names"),
    ("-n", ("--no-output",), "no_output", "Do not output any .gcov files"),
    ("-p", ("--preserve-paths",), "preserve_paths", "Preserve path components"),
    (
        "-r",
        ("--relative-only",),
        "relative_only",
        "Only dump files with relative paths or absolute paths with the prefix specified by -s",
    ),
    ("-t", ("--stdout",), "use_stdout", "Print to stdout"),
    (
        "-u",
        ("--unconditional-branches",),
        "uncond_branch",
        "Display unconditional branch info (requires -b)",
    ),
    ("-x", ("--hash-filenames",), "hash_filenames", "Hash long pathnames"),
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcovtool",
        description="gcov compatible code coverage tool.",
    )
    parser.add_argument("source_files", nargs="+", metavar="SOURCEFILE")
    for short, longs, dest, help_text in _SWITCHES:
        parser.add_argument(short, *longs, dest=dest, action="store_true", help=help_text)
    parser.add_argument(
        "-o",
        "--object-directory",
        "--object-file",
        dest="object_directory",
        metavar="DIR|FILE",
        default="",
        help="Find objects in DIR or based on FILE's path",
    )
    parser.add_argument(
        "-s",
        "--source-prefix",
        dest="source_prefix",
        default="",
        help="Source prefix to elide",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to a {CONFIG_FILENAME} file or the directory holding one.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )

    debug = parser.add_argument_group("Internal and debugging options")
    debug.add_argument("--dump", action="store_true", help="Dump the gcov file to stderr")
    debug.add_argument("--gcno", default="", help="Override inferred gcno file")
    debug.add_argument("--gcda", default="", help="Override inferred gcda file")
    return parser


def _options_from_args(args: argparse.Namespace) -> GCOVOptions:
    values = {dest: bool(getattr(args, dest)) for _short, _longs, dest, _help in _SWITCHES}
    return GCOVOptions(source_prefix=args.source_prefix, **values)


def _tolerate_raw_file_names() -> None:
    # Notes files may name sources in any byte encoding; echo them back unchanged.
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="surrogateescape")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns 0 once arguments parse, whatever happens per file."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _tolerate_raw_file_names()
    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")

    try:
        config = load_config(args.config if args.config is not None else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"gcovtool: {exc}\n")

    options = config.apply(_options_from_args(args))
    object_directory = args.object_directory or config.object_directory or ""
    logger.debug("Effective options: %s", options)

    reporter = CoverageReporter(
        options,
        object_directory=object_directory,
        gcno_override=args.gcno,
        gcda_override=args.gcda,
        dump=bool(args.dump),
    )
    return reporter.run(args.source_files)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

"""Command-line entry point: parse flags, run the concatenation, print a summary."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Iterable

from .config import ConfigError, load_config
from .helpers import PatternError, process_extensions, validate_pattern
from .manual_files import resolve_under
from .summary import write_summary
from .walk import generate_concatenated_code

VERSION = "0.4.0"
PROJECT_EXCLUDE_FILE = ".codecat_exclude"

_PACKAGE_LOGGER = "codecat"
_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
Concatenate source code files relative to the Current Working Directory (CWD).

Modes:
1. Positional Argument: 'codecat <dir>' implies scanning ONLY <dir>. Cannot be used with -d.
2. Flags Only: Use '-d <dirs>' to specify scan directories (comma-separated).
   If -d is omitted and -n (no-scan) is NOT used, CWD ('.') is scanned by default.
   If -n is used, -d is ignored.

Exclusion Hierarchy:
1. Basename excludes from global config ({config_path}).
2. CWD-relative excludes from '.codecat_exclude' in CWD.
3. CWD-relative excludes from '-x' flag.
4. .gitignore rules (if enabled).

Output:
- Code to stdout (default) or -o <file>.
- Summary/Logs to stderr (default) or stdout (if -o is used).
"""


def parse_comma_separated(values: Iterable[str] | None) -> list[str]:
    """Split each value on commas and return the non-empty, stripped parts."""
    if values is None:
        return []
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def load_project_excludes(cwd: str) -> list[str]:
    """Read CWD-relative exclude patterns from .codecat_exclude in cwd.

    Blank lines, '#' comments and malformed patterns are skipped. A missing
    or unreadable file gives an empty list.
    """
    path = os.path.join(cwd, PROJECT_EXCLUDE_FILE)
    try:
        handle = open(path, encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.debug("No .codecat_exclude file found in CWD. path=%s", path)
        return []
    except OSError as exc:
        logger.warning("Error opening .codecat_exclude file, ignoring. path=%s error=%s", path, exc)
        return []

    logger.info("Loading project-specific excludes. path=%s", path)
    patterns: list[str] = []
    with handle:
        try:
            for line_number, raw in enumerate(handle, start=1):
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    validate_pattern(line)
                except PatternError as exc:
                    logger.warning(
                        "Invalid pattern in .codecat_exclude, skipping. "
                        "path=%s line=%d pattern=%s error=%s",
                        path, line_number, line, exc,
                    )
                    continue
                patterns.append(line)
        except OSError as exc:
            logger.warning(
                "Error reading .codecat_exclude file, using patterns read so far. "
                "path=%s error=%s",
                path, exc,
            )
    logger.debug("Loaded project exclude patterns. patterns=%s", patterns)
    return patterns


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the codecat command."""
    config_path = os.path.join("~", ".config", "codecat", "config.toml")
    parser = argparse.ArgumentParser(
        prog="codecat",
        usage="%(prog)s [target_directory] [flags]\n   or: %(prog)s [flags]",
        description=_DESCRIPTION.format(config_path=config_path),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("targets", nargs="*", metavar="target_directory",
                        help="Directory to scan (at most one).")
    parser.add_argument("-d", "--directory", default=None,
                        help="Target directory/directories to scan (comma-separated, optional).")
    parser.add_argument("-e", "--extensions", action="append", default=None,
                        help="Extensions to include (overrides config, comma-separated).")
    parser.add_argument("-f", "--files", action="append", default=None,
                        help="Manual files to include (paths relative to CWD, comma-separated).")
    parser.add_argument("-x", "--exclude", action="append", default=None,
                        help="CWD-relative path glob patterns to exclude "
                             "(adds to .codecat_exclude, comma-separated).")
    parser.add_argument("--no-gitignore", dest="no_gitignore", action="store_const",
                        const=True, default=None, help="Disable .gitignore processing.")
    parser.add_argument("--loglevel", default="warn",
                        help="Log level (debug, info, warn, error).")
    parser.add_argument("-o", "--output", default="",
                        help="Output file path (instead of stdout). "
                             "Summary/Logs go to stderr/stdout respectively.")
    parser.add_argument("-c", "--config", default="", help="Custom config file path.")
    parser.add_argument("-v", "--version", action="store_true",
                        help="Print version and exit.")
    parser.add_argument("-n", "--no-scan", dest="no_scan", action="store_true",
                        help="Skip directory scanning. Requires -f flag.")
    return parser


def _configure_logging(level_name: str, stream) -> int:
    level = _LOG_LEVELS.get(level_name.strip().lower())
    effective = logging.WARNING if level is None else level
    fmt = "time=%(asctime)s level=%(levelname)s msg=%(message)s"
    if effective <= logging.DEBUG:
        fmt += " source=%(pathname)s:%(lineno)d"
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
    package_logger.addHandler(handler)
    package_logger.setLevel(effective)
    package_logger.propagate = False
    if level is None:
        logger.error("Invalid log level specified, using 'warn'. input=%s", level_name)
    logger.debug("Logging setup complete. level=%s", logging.getLevelName(effective))
    return effective


def main(argv=None) -> int:
    """Run codecat with argv (defaults to sys.argv[1:]); return the exit code."""
    start = time.monotonic()
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if args.version:
        print(f"codecat version {VERSION}")
        return 0

    log_output = sys.stdout if args.output else sys.stderr
    _configure_logging(args.loglevel, log_output)

    try:
        cwd = os.getcwd()
    except OSError as exc:
        logger.error("Failed to get current working directory. Cannot proceed. error=%s", exc)
        print(f"Fatal Error: Could not determine current working directory: {exc}",
              file=sys.stderr)
        return 1
    logger.debug("Current working directory determined. cwd=%s", cwd)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        logger.error("Fatal error loading configuration. error=%s", exc)
        print(f"Fatal Error loading configuration: {exc}", file=sys.stderr)
        return 1

    targets = args.targets
    directory_given = args.directory is not None
    if len(targets) > 1:
        logger.error("Too many positional arguments. args=%s", targets)
        print(f"Error: Expected at most one positional argument (target directory), "
              f"got {len(targets)}: {targets}", file=sys.stderr)
        sys.stderr.write(parser.format_help())
        return 1
    if targets:
        if directory_given:
            logger.error("Cannot use both positional argument and -d flag. positional=%s flag=%s",
                         targets[0], args.directory)
            print(f"Error: Cannot specify a target directory via positional argument "
                  f"('{targets[0]}') and the -d flag ('{args.directory}') simultaneously.",
                  file=sys.stderr)
            sys.stderr.write(parser.format_help())
            return 1
        scan_dirs = [targets[0]]
    elif directory_given:
        scan_dirs = parse_comma_separated([args.directory])
    elif not args.no_scan:
        scan_dirs = ["."]
    else:
        scan_dirs = []
    scan_dirs = [resolve_under(cwd, directory) for directory in scan_dirs]
    if scan_dirs:
        logger.debug("Resolved absolute scan directories. dirs=%s", scan_dirs)

    no_scan = args.no_scan
    manual_files = parse_comma_separated(args.files)
    flag_excludes = parse_comma_separated(args.exclude)
    project_excludes = load_project_excludes(cwd)

    use_gitignore = config.use_gitignore
    if args.no_gitignore is not None:
        use_gitignore = not args.no_gitignore
        logger.debug("Overriding gitignore setting via flag. use_gitignore=%s", use_gitignore)

    if args.extensions is not None:
        extension_list = parse_comma_separated(args.extensions)
        logger.debug("Overriding extensions via flag. extensions=%s", extension_list)
    else:
        extension_list = config.include_extensions
    extensions = process_extensions(extension_list)

    if no_scan and not manual_files:
        logger.error("Processing criteria missing. --no-scan used and no manual files (-f) provided.")
        print("Error: --no-scan flag requires specifying files to include with -f.",
              file=sys.stderr)
        return 1
    if not no_scan and not extensions and not manual_files and scan_dirs:
        logger.error("Processing criteria missing. Scan requested but no extensions/manual files given.")
        print("Error: No file extensions specified (config or -e) and no manual files (-f) "
              "given, but a scan was requested.", file=sys.stderr)
        return 1

    logger.info("Starting code concatenation process.")
    result = generate_concatenated_code(
        cwd,
        scan_dirs,
        extensions,
        manual_files,
        config.exclude_basenames,
        project_excludes,
        flag_excludes,
        use_gitignore,
        config.header_text,
        config.comment_marker,
        no_scan,
    )

    exit_code = 0
    if result.error is not None:
        logger.error("Error(s) reported during file processing. error=%s", result.error)
        exit_code = 1
    if result.error_files and exit_code == 0:
        exit_code = 1
        logger.warning("Individual file errors were encountered during processing.")

    output_handle = None
    code_writer = sys.stdout
    if args.output:
        try:
            output_handle = open(args.output, "w", encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to create output file, writing to stdout instead. path=%s error=%s",
                         args.output, exc)
            print(f"Error creating output file '{args.output}': {exc}", file=sys.stderr)
            print("Writing code output to standard output.", file=sys.stderr)
            exit_code = exit_code or 1
        else:
            code_writer = output_handle
            logger.info("Writing concatenated code to file. path=%s", args.output)
    else:
        logger.info("Writing concatenated code to stdout.")

    try:
        if result.output:
            try:
                code_writer.write(result.output)
            except OSError as exc:
                logger.error("Failed to write concatenated code output. error=%s", exc)
                print(f"Error writing output: {exc}", file=sys.stderr)
                exit_code = exit_code or 1
        elif exit_code == 0 and not result.included_files:
            logger.warning("No content generated. Output is empty.")
    finally:
        if output_handle is not None:
            try:
                output_handle.close()
            except OSError as exc:
                logger.error("Failed to close output file. path=%s error=%s", args.output, exc)
                exit_code = exit_code or 1

    write_summary(result, cwd, log_output)
    logger.info("Execution finished. duration=%.3fs", time.monotonic() - start)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
"""Inclusion of files named explicitly on the command line."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from .helpers import format_file_block
from .summary import ConcatResult, FileInfo

logger = logging.getLogger(__name__)


def resolve_under(cwd: str, path: str) -> str:
    """Return path made absolute against cwd (if relative) and normalised."""
    joined = path if os.path.isabs(path) else os.path.join(cwd, path)
    return os.path.normpath(joined)


def relative_display(cwd: str, abs_path: str) -> str:
    """Return abs_path relative to cwd with '/' separators.

    Falls back to the absolute path when no relative path exists.
    """
    try:
        rel = os.path.relpath(abs_path, cwd)
    except ValueError as exc:
        logger.warning(
            "Could not get relative path, using absolute. absolutePath=%s cwd=%s error=%s",
            abs_path, cwd, exc,
        )
        rel = abs_path
    return rel.replace(os.sep, "/")


def process_manual_files(
    cwd: str,
    manual_paths: Iterable[str],
    marker: str,
    result: ConcatResult,
    processed: set[str],
) -> None:
    """Add the named files to result, bypassing every exclusion rule.

    Each absolute path handled, successfully or not, is added to processed;
    paths already in processed are skipped.
    """
    paths = list(manual_paths)
    if not paths:
        return

    logger.debug(
        "Processing manually specified files (-f overrides excludes). count=%d", len(paths)
    )
    for raw in paths:
        abs_path = resolve_under(cwd, raw)
        rel_path = relative_display(cwd, abs_path)

        if abs_path in processed:
            logger.debug("Skipping duplicate manual file. path=%s", rel_path)
            continue
        processed.add(abs_path)

        logger.debug(
            "Attempting to process manual file. raw=%s absolute=%s relativeToCwd=%s",
            raw, abs_path, rel_path,
        )

        try:
            stat = os.stat(abs_path)
        except OSError as exc:
            message = (
                "Manual file not found."
                if isinstance(exc, FileNotFoundError)
                else "Cannot stat manual file."
            )
            logger.warning("%s path=%s absolute=%s error=%s", message, rel_path, abs_path, exc)
            result.error_files[rel_path] = exc
            continue

        if os.path.isdir(abs_path):
            logger.warning("Manual path points to a directory, skipping. path=%s", rel_path)
            result.error_files[rel_path] = IsADirectoryError("path is a directory")
            continue

        try:
            with open(abs_path, "rb") as handle:
                content = handle.read()
        except OSError as exc:
            logger.warning("Error reading manual file content. path=%s error=%s", rel_path, exc)
            result.error_files[rel_path] = exc
            continue

        if not content:
            logger.debug("Manual file is empty. path=%s", rel_path)
            result.empty_files.append(rel_path)
            continue

        logger.debug("Including manual file (bypassing excludes). path=%s", rel_path)
        result.output += format_file_block(marker, rel_path, content)
        result.included_files.append(FileInfo(rel_path, stat.st_size, is_manual=True))
        result.total_size += stat.st_size
"""Directory scanning and generation of the concatenated code output."""

from __future__ import annotations

import logging
import os
import posixpath
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from .exclusion import DefaultExcluder, PathInfo
from .helpers import PatternError, format_file_block, validate_pattern
from .manual_files import process_manual_files, relative_display
from .summary import ConcatResult, FileInfo

logger = logging.getLogger(__name__)

_IGNORE_FILE_NAMES = (".gitignore", ".ignore")


@dataclass(frozen=True)
class _Rule:
    base_dir: str
    regex: re.Pattern[str]
    negated: bool
    dir_only: bool
    anchored: bool


def _translate(pattern: str) -> str:
    """Translate a gitignore glob into a regular expression."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                j = i + 2
                at_start = i == 0 or pattern[i - 1] == "/"
                at_end = j == n or pattern[j] == "/"
                if at_start and at_end:
                    if j == n:
                        out.append(".*")
                        i = j
                    else:
                        out.append("(?:.*/)?")
                        i = j + 1
                    continue
                out.append("[^/]*")
                i = j
                continue
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                out.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1:end]
            negated = body[:1] in ("!", "^")
            if negated:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("[", "\\[")
            out.append(f"[{'^' if negated else ''}{body}]")
            i = end + 1
        elif c == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def _parse_rule(line: str, base_dir: str) -> _Rule | None:
    line = line.rstrip("\r\n")
    if not line or line.startswith("#"):
        return None
    stripped = line.rstrip(" ")
    if stripped.endswith("\\") and len(stripped) < len(line):
        stripped += " "
    line = stripped
    negated = line.startswith("!")
    if negated:
        line = line[1:]
    dir_only = line.endswith("/")
    line = line.rstrip("/")
    anchored = "/" in line
    line = line.lstrip("/")
    if not line:
        return None
    return _Rule(
        base_dir=base_dir,
        regex=re.compile(_translate(line), re.DOTALL),
        negated=negated,
        dir_only=dir_only,
        anchored=anchored,
    )


class IgnoreRules:
    """Gitignore-style rules collected from ignore files, each scoped to its directory.

    Later rules take precedence; '!' re-includes. Ancestor directories are not
    consulted: a walker prunes ignored directories instead.
    """

    def __init__(self):
        self._rules: list[_Rule] = []

    def add_file(self, path, base_dir) -> int:
        """Read rules from the ignore file at path, applying below base_dir.

        Returns the number of rules added.
        """
        base = os.path.abspath(base_dir)
        with open(path, encoding="utf-8", errors="replace") as handle:
            rules = [rule for line in handle if (rule := _parse_rule(line, base))]
        self._rules.extend(rules)
        logger.debug("Loaded ignore rules. path=%s count=%d", path, len(rules))
        return len(rules)

    def is_ignored(self, abs_path, is_dir) -> bool:
        """Return True if the rules ignore abs_path."""
        path = os.path.abspath(abs_path)
        ignored = False
        for rule in self._rules:
            rel = os.path.relpath(path, rule.base_dir).replace(os.sep, "/")
            if rel == "." or rel == ".." or rel.startswith("../"):
                continue
            if rule.dir_only and not is_dir:
                continue
            target = rel if rule.anchored else posixpath.basename(rel)
            if rule.regex.fullmatch(target):
                ignored = not rule.negated
        return ignored


def _extension(name: str) -> str:
    return os.path.splitext(name)[1].lower().lstrip(".")


def walk_files(
    root,
    use_gitignore: bool = True,
    extensions: Iterable[str] | None = None,
    on_error: Callable[[OSError], bool] | None = None,
) -> Iterator[str]:
    """Yield absolute paths of files below root, depth first in name order.

    Hidden entries are skipped. With use_gitignore, .gitignore and .ignore
    files are honoured. A non-empty extensions list limits files to those
    extensions. Errors go to on_error, which returns true to continue; without
    on_error they are raised.
    """
    allowed = {ext.strip().lower().lstrip(".") for ext in extensions or ()}
    allowed.discard("")
    rules = IgnoreRules()

    def report(exc: OSError) -> bool:
        if on_error is None:
            raise exc
        return bool(on_error(exc))

    stack = [os.path.abspath(root)]
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as listing:
                entries = sorted(listing, key=lambda entry: entry.name)
        except OSError as exc:
            if not report(exc):
                return
            continue

        if use_gitignore:
            for name in _IGNORE_FILE_NAMES:
                candidate = os.path.join(directory, name)
                if os.path.isfile(candidate):
                    try:
                        rules.add_file(candidate, directory)
                    except OSError as exc:
                        if not report(exc):
                            return

        subdirs: list[str] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as exc:
                if not report(exc):
                    return
                continue
            if use_gitignore and rules.is_ignored(entry.path, is_dir):
                continue
            if is_dir:
                subdirs.append(entry.path)
                continue
            if allowed and _extension(entry.name) not in allowed:
                continue
            yield entry.path
        stack.extend(reversed(subdirs))


def _valid_patterns(patterns: Iterable[str], message: str, sources=None) -> list[str]:
    valid = []
    for pattern in patterns:
        try:
            validate_pattern(pattern)
        except PatternError as exc:
            source = sources(pattern) if sources else ""
            logger.warning("%s pattern=%s source=%s error=%s", message, pattern, source, exc)
            continue
        valid.append(pattern)
    return valid


def _scan_directory(
    cwd: str,
    scan_dir: str,
    exts: set[str],
    use_gitignore: bool,
    marker: str,
    excluder: DefaultExcluder,
    result: ConcatResult,
    processed: set[str],
) -> None:
    logger.debug("Scanning directory. path=%s", scan_dir)
    try:
        is_dir = os.path.isdir(scan_dir)
        os.stat(scan_dir)
    except OSError as exc:
        message = (
            "Target scan directory does not exist."
            if isinstance(exc, FileNotFoundError)
            else "Cannot stat target scan directory."
        )
        logger.error("%s path=%s error=%s", message, scan_dir, exc)
        result.error_files[relative_display(cwd, scan_dir) + "/"] = exc
        if result.error is None:
            result.error = exc
        return
    if not is_dir:
        error = NotADirectoryError(f"target scan path '{scan_dir}' is not a directory")
        logger.error("%s path=%s", error, scan_dir)
        result.error_files[relative_display(cwd, scan_dir)] = error
        if result.error is None:
            result.error = error
        return

    abs_scan_dir = os.path.abspath(scan_dir)
    walk_errors: list[OSError] = []

    def on_error(exc: OSError) -> bool:
        logger.warning("Error reported by file walker. scanDir=%s error=%s", abs_scan_dir, exc)
        walk_errors.append(exc)
        return True

    walker_exts = [ext.lstrip(".") for ext in exts if ext]
    for abs_path in walk_files(abs_scan_dir, use_gitignore, walker_exts, on_error):
        base_name = os.path.basename(abs_path)
        rel_path = relative_display(cwd, abs_path)
        logger.debug(
            "Processing item from walker. absPath=%s relPathCwd=%s baseName=%s",
            abs_path, rel_path, base_name,
        )
        if abs_path in processed:
            logger.debug("Walk: Skipping item already processed manually. path=%s", rel_path)
            continue
        processed.add(abs_path)

        try:
            stat = os.stat(abs_path)
        except OSError as exc:
            logger.warning("Could not stat path from walker. path=%s error=%s", rel_path, exc)
            result.error_files[rel_path] = exc
            continue

        item_is_dir = os.path.isdir(abs_path)
        exclusion = excluder.is_excluded(PathInfo(abs_path, rel_path, base_name, item_is_dir))
        if exclusion is not None:
            message = (
                "Excluding directory and its contents." if item_is_dir else "Excluding file."
            )
            logger.debug(
                "%s path=%s reason=%s pattern=%s",
                message, rel_path, exclusion.reason, exclusion.pattern,
            )
            continue
        if item_is_dir:
            logger.debug("Walk: Processing directory (not excluded). path=%s", rel_path)
            continue

        ext = os.path.splitext(base_name)[1].lower()
        if exts and ext not in exts:
            logger.debug(
                "Walk: Skipping file with non-matching extension. path=%s ext=%s", rel_path, ext
            )
            continue

        try:
            with open(abs_path, "rb") as handle:
                content = handle.read()
        except OSError as exc:
            logger.warning("Error reading file content. path=%s error=%s", rel_path, exc)
            result.error_files[rel_path] = exc
            continue

        if not content:
            logger.debug("Found empty file during scan. path=%s", rel_path)
            result.empty_files.append(rel_path)
            continue

        result.output += format_file_block(marker, rel_path, content)
        result.included_files.append(FileInfo(rel_path, stat.st_size, is_manual=False))
        result.total_size += stat.st_size

    if walk_errors:
        logger.warning(
            "Walk completed with non-critical errors. scanDir=%s first_error=%s",
            abs_scan_dir, walk_errors[0],
        )
        if result.error is None:
            result.error = walk_errors[0]


def generate_concatenated_code(
    cwd,
    scan_dirs,
    exts,
    manual_file_paths,
    exclude_basenames,
    project_exclude_patterns,
    flag_exclude_patterns,
    use_gitignore,
    header,
    marker,
    no_scan,
) -> ConcatResult:
    """Concatenate manual files and scanned files into one output.

    Manual files bypass all exclusions. Per-file problems are recorded in
    error_files; the first scan-level problem is stored in the result's error.
    """
    exts = set(exts)
    result = ConcatResult(output=header or "")

    basename_excludes = _valid_patterns(
        exclude_basenames, "Invalid global exclude basename pattern syntax, ignoring."
    )
    flag_patterns = list(flag_exclude_patterns)
    cwd_excludes = _valid_patterns(
        [*project_exclude_patterns, *flag_patterns],
        "Invalid CWD-relative exclude pattern syntax, ignoring.",
        lambda p: "flag" if p in flag_patterns else "project",
    )
    logger.debug(
        "Using exclude patterns. basename=%s cwd_relative=%s", basename_excludes, cwd_excludes
    )

    manual = list(manual_file_paths)
    processed: set[str] = set()
    process_manual_files(cwd, manual, marker, result, processed)

    scan_dirs = list(scan_dirs)
    if not no_scan and scan_dirs:
        excluder = DefaultExcluder(basename_excludes, cwd_excludes)
        if not exts and not manual:
            logger.warning(
                "Scanning requested, but no extensions/manual files provided. "
                "Scan will find nothing."
            )
        logger.info("Starting file scan. scanDirs=%s useGitignore=%s", scan_dirs, use_gitignore)
        for scan_dir in scan_dirs:
            _scan_directory(
                cwd, scan_dir, exts, use_gitignore, marker, excluder, result, processed
            )
        if result.error is None:
            logger.info("File scan completed.")
        else:
            logger.error("File scan finished with errors. first_error=%s", result.error)
    elif no_scan:
        logger.info("Skipping directory scan due to --no-scan flag.")
    else:
        logger.info("Skipping directory scan as no scan directories were provided or determined.")

    return result
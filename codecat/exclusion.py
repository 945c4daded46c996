"""Decide whether scanned paths are excluded by basename or CWD-relative rules."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass

from .helpers import matches_glob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathInfo:
    """A path considered for exclusion."""

    abs_path: str
    rel_path_cwd: str
    base_name: str
    is_dir: bool


@dataclass(frozen=True)
class Exclusion:
    """Why a path was excluded and which pattern caused it."""

    reason: str
    pattern: str


def _parent(path: str) -> str:
    directory = posixpath.dirname(path)
    return posixpath.normpath(directory) if directory else "."


class DefaultExcluder:
    """Excludes paths by basename globs and CWD-relative globs or prefixes.

    Directories found to be excluded are remembered so that their contents
    are reported as excluded through that ancestor.
    """

    def __init__(self, basename_patterns, cwd_relative_patterns):
        self._basename_patterns = list(basename_patterns)
        self._cwd_relative_patterns = list(cwd_relative_patterns)
        self._excluded_dirs: dict[str, str] = {}

    def _check_ancestors(self, rel_path: str) -> Exclusion | None:
        parent = rel_path
        while True:
            parent = _parent(parent)
            if parent in (".", "", "/"):
                return None

            causing = self._excluded_dirs.get(parent)
            if causing is not None:
                return Exclusion(f"ancestor {parent} excluded", causing)

            pattern = matches_glob(posixpath.basename(parent), self._basename_patterns)
            if pattern is not None:
                return Exclusion(f"ancestor {parent} basename match", pattern)

            pattern = matches_glob(parent, self._cwd_relative_patterns)
            if pattern is not None:
                return Exclusion(f"ancestor {parent} CWD match", pattern)

            for pattern in self._cwd_relative_patterns:
                clean = pattern.rstrip("\\/")
                if clean and (parent == clean or parent.startswith(clean + "/")):
                    return Exclusion(f"ancestor {parent} CWD prefix match", pattern)

    def _remember(self, info: PathInfo, pattern: str) -> None:
        if info.is_dir:
            self._excluded_dirs.setdefault(info.rel_path_cwd, pattern)

    def is_excluded(self, info: PathInfo) -> Exclusion | None:
        """Return the Exclusion for info, or None if it is not excluded."""
        found = self._check_ancestors(info.rel_path_cwd)
        if found is not None:
            logger.debug(
                "Exclusion check: path excluded via ancestor. path=%s reason=%s pattern=%s",
                info.rel_path_cwd, found.reason, found.pattern,
            )
            return found

        pattern = matches_glob(info.base_name, self._basename_patterns)
        if pattern is not None:
            self._remember(info, pattern)
            logger.debug(
                "Exclusion check: item excluded by basename. path=%s pattern=%s",
                info.rel_path_cwd, pattern,
            )
            return Exclusion("basename match", pattern)

        pattern = matches_glob(info.rel_path_cwd, self._cwd_relative_patterns)
        if pattern is not None:
            self._remember(info, pattern)
            logger.debug(
                "Exclusion check: item excluded by CWD-relative glob. path=%s pattern=%s",
                info.rel_path_cwd, pattern,
            )
            return Exclusion("CWD-relative match", pattern)

        logger.debug("Exclusion check: path not excluded. path=%s", info.rel_path_cwd)
        return None
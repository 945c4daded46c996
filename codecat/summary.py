"""Summary of a concatenation run: file tree, empty files and errors."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TextIO

from .helpers import format_bytes

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = "codecat"


@dataclass
class FileInfo:
    """A file included in the output."""

    path: str
    size: int
    is_manual: bool = False


@dataclass
class TreeNode:
    """A node of the included-files tree; leaves carry their FileInfo."""

    name: str
    children: dict[str, TreeNode] = field(default_factory=dict)
    file_info: FileInfo | None = None


@dataclass
class ConcatResult:
    """Everything a concatenation run produces."""

    output: str = ""
    included_files: list[FileInfo] = field(default_factory=list)
    empty_files: list[str] = field(default_factory=list)
    error_files: dict[str, Exception] = field(default_factory=dict)
    total_size: int = 0
    error: Exception | None = None


def build_tree(files: Iterable[FileInfo]) -> TreeNode:
    """Arrange slash-separated file paths into a tree rooted at '.'."""
    root = TreeNode(".")
    for info in sorted(files, key=lambda f: f.path):
        parts = [part for part in info.path.split("/") if part]
        node = root
        for index, part in enumerate(parts):
            node = node.children.setdefault(part, TreeNode(part))
            if index == len(parts) - 1:
                if node.file_info is not None:
                    logger.warning(
                        "Tree building conflict: Node already has FileInfo, overwriting. "
                        "nodeName=%s existingPath=%s newPath=%s",
                        node.name, node.file_info.path, info.path,
                    )
                node.file_info = info
    return root


def _render_children(node: TreeNode, indent: str, show_manual: bool) -> Iterator[str]:
    names = sorted(node.children)
    for position, name in enumerate(names):
        yield from _render_node(
            node.children[name], indent, position == len(names) - 1, show_manual
        )


def _render_node(
    node: TreeNode, indent: str, is_last: bool, show_manual: bool
) -> Iterator[str]:
    connector = "└── " if is_last else "├── "
    details = ""
    manual = ""
    if node.file_info is not None:
        details = f" ({format_bytes(node.file_info.size)})"
        if node.file_info.is_manual and show_manual:
            manual = " [M]"
    yield f"{indent}{connector}{node.name}{manual}{details}\n"
    child_indent = indent + ("    " if is_last else "│   ")
    yield from _render_children(node, child_indent, show_manual)


def render_tree(root: TreeNode, show_manual: bool = False) -> str:
    """Render a tree with box-drawing connectors, one node per line.

    Manually included files get an ' [M]' marker when show_manual is true.
    """
    if root.name == ".":
        return "".join(_render_children(root, "", show_manual))
    return "".join(_render_node(root, "", True, show_manual))


def _cwd_display(cwd: str) -> str:
    base = os.path.basename(os.path.normpath(cwd)) if cwd else "."
    if base in ("", ".", os.sep):
        return f"'{cwd}'"
    return f"'{base}'"


def _list_section(title: str, items: Mapping[str, str]) -> Iterator[str]:
    yield title.format(len(items))
    for path in sorted(items):
        details = items[path]
        yield f"- {path}: {details}\n" if details else f"- {path}\n"


def format_summary(
    included_files: list[FileInfo],
    empty_files: Iterable[str],
    error_files: Mapping[str, Exception],
    total_size: int,
    cwd: str,
    show_manual: bool = False,
) -> str:
    """Return the summary text printed after a run."""
    lines = ["\n--- Summary ---\n"]
    if included_files:
        lines.append(
            f"Included {len(included_files)} files ({format_bytes(total_size)} total) "
            f"relative to CWD {_cwd_display(cwd)}:\n"
        )
        lines.append(render_tree(build_tree(included_files), show_manual))
    else:
        lines.append("No files included in the output.\n")

    lines.extend(_list_section("\nEmpty files found ({}):\n", dict.fromkeys(empty_files, "")))
    lines.extend(
        _list_section(
            "\nErrors encountered ({}):\n",
            {path: str(err) for path, err in error_files.items()},
        )
    )
    lines.append("---------------\n")
    return "".join(lines)


def write_summary(result: ConcatResult, cwd: str, stream: TextIO) -> None:
    """Write the summary of result to stream.

    The manual-file marker is shown only when debug logging is enabled.
    """
    show_manual = logging.getLogger(_PACKAGE_LOGGER).isEnabledFor(logging.DEBUG)
    stream.write(
        format_summary(
            result.included_files,
            result.empty_files,
            result.error_files,
            result.total_size,
            cwd,
            show_manual,
        )
    )
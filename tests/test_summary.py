import io
import logging
import os

import pytest

from codecat.summary import (
    ConcatResult,
    FileInfo,
    build_tree,
    format_summary,
    render_tree,
    write_summary,
)


@pytest.fixture
def package_log_level():
    package_logger = logging.getLogger("codecat")
    old_level = package_logger.level

    def set_level(level):
        package_logger.setLevel(level)

    yield set_level
    package_logger.setLevel(old_level)


def test_build_tree_simple():
    files = [FileInfo("b.txt", 3), FileInfo("a.txt", 5)]
    root = build_tree(files)
    assert root.name == "."
    assert sorted(root.children) == ["a.txt", "b.txt"]
    assert root.children["a.txt"].file_info.size == 5
    assert root.children["a.txt"].children == {}


def test_build_tree_nested():
    files = [FileInfo("sub/deep/x.py", 1), FileInfo("sub/y.py", 2)]
    root = build_tree(files)
    sub = root.children["sub"]
    assert sub.file_info is None
    assert sorted(sub.children) == ["deep", "y.py"]
    assert sub.children["deep"].children["x.py"].file_info.path == "sub/deep/x.py"


def test_build_tree_manual_files_keep_flag():
    root = build_tree([FileInfo("m.txt", 4, is_manual=True)])
    assert root.children["m.txt"].file_info.is_manual is True


def test_build_tree_skips_empty_segments():
    root = build_tree([FileInfo("/abs/file.txt", 1)])
    assert list(root.children) == ["abs"]
    assert list(root.children["abs"].children) == ["file.txt"]


def test_render_tree_layout():
    root = build_tree([FileInfo("a.txt", 10), FileInfo("sub/b.py", 2048)])
    assert render_tree(root) == (
        "├── a.txt (10 B)\n"
        "└── sub\n"
        "    └── b.py (2 KiB)\n"
    )


def test_render_tree_non_last_branch_indent():
    root = build_tree([FileInfo("d/x.txt", 1), FileInfo("e.txt", 1)])
    assert render_tree(root) == (
        "├── d\n"
        "│   └── x.txt (1 B)\n"
        "└── e.txt (1 B)\n"
    )


def test_render_tree_manual_marker():
    root = build_tree([FileInfo("m.txt", 1, is_manual=True)])
    assert render_tree(root, True) == "└── m.txt [M] (1 B)\n"
    assert render_tree(root, False) == "└── m.txt (1 B)\n"


def test_format_summary_no_files():
    text = format_summary([], [], {}, 0, "/work/project")
    assert text == (
        "\n--- Summary ---\n"
        "No files included in the output.\n"
        "\nEmpty files found (0):\n"
        "\nErrors encountered (0):\n"
        "---------------\n"
    )


def test_format_summary_basic():
    files = [FileInfo("a.txt", 10)]
    text = format_summary(files, [], {}, 10, os.path.join(os.sep, "work", "project"))
    assert "Included 1 files (10 B total) relative to CWD 'project':\n" in text
    assert "└── a.txt (10 B)\n" in text


def test_format_summary_root_cwd_shows_full_path():
    text = format_summary([FileInfo("a.txt", 1)], [], {}, 1, os.sep)
    assert f"relative to CWD '{os.sep}':" in text


def test_format_summary_with_errors_and_empty():
    errors = {"z.txt": FileNotFoundError("missing"), "a.txt": ValueError("")}
    text = format_summary([], ["b.txt", "a.txt", "b.txt"], errors, 0, "/w")
    assert "\nEmpty files found (2):\n- a.txt\n- b.txt\n" in text
    assert "\nErrors encountered (2):\n- a.txt\n- z.txt: missing\n" in text
    assert text.endswith("---------------\n")


def test_write_summary_matches_format(package_log_level):
    package_log_level(logging.WARNING)
    result = ConcatResult(
        included_files=[FileInfo("m.txt", 3, is_manual=True)], total_size=3
    )
    stream = io.StringIO()
    write_summary(result, "/w/proj", stream)
    expected = format_summary(result.included_files, [], {}, 3, "/w/proj", False)
    assert stream.getvalue() == expected
    assert "[M]" not in stream.getvalue()


def test_write_summary_debug_shows_manual_marker(package_log_level):
    package_log_level(logging.DEBUG)
    result = ConcatResult(
        included_files=[FileInfo("m.txt", 3, is_manual=True)], total_size=3
    )
    stream = io.StringIO()
    write_summary(result, "/w/proj", stream)
    assert "└── m.txt [M] (3 B)\n" in stream.getvalue()
import pytest

from codecat.helpers import (
    PatternError,
    format_bytes,
    format_file_block,
    glob_match,
    matches_glob,
    process_extensions,
    validate_pattern,
)


@pytest.mark.parametrize(
    ("given", "expected"),
    [
        ([], set()),
        (["py", "txt", "json"], {".py", ".txt", ".json"}),
        ([".py", "txt", ".json"], {".py", ".txt", ".json"}),
        (["Py", ".TXT", "jSoN"], {".py", ".txt", ".json"}),
        ([" py ", " .txt"], {".py", ".txt"}),
        (["py", "", " ", ".txt"], {".py", ".txt"}),
        (["go, mod, sum", ".yaml, .yml"], {".go", ".mod", ".sum", ".yaml", ".yml"}),
    ],
    ids=[
        "empty",
        "basic",
        "leading-dots",
        "mixed-case",
        "whitespace",
        "empty-strings",
        "comma-separated",
    ],
)
def test_process_extensions(given, expected):
    assert process_extensions(given) == expected


def test_process_extensions_ignores_bare_dot():
    assert process_extensions([".", "py"]) == {".py"}


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1 KiB"),
        (1536, "1.5 KiB"),
        (1024 * 1024, "1 MiB"),
        (3 * 1024**3, "3 GiB"),
    ],
)
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected


def test_format_file_block_layout():
    block = format_file_block("---", "file1.txt", "Content of file 1.")
    assert block == "--- file1.txt\nContent of file 1.---\n"


def test_format_file_block_with_trailing_newline_content():
    block = format_file_block("%%%", "local_file.txt", b"Local content.\n")
    assert "%%% local_file.txt\nLocal content.\n%%%" in block
    assert block.endswith("%%%\n")


@pytest.mark.parametrize(
    ("pattern", "name", "expected"),
    [
        ("*.log", "other.log", True),
        ("*.log", "other.txt", False),
        ("*", "a/b", False),
        ("a/*", "a/b", True),
        ("data/sub/*", "data/sub/model.bin", True),
        ("?", "a", True),
        ("?", "/", False),
        ("temp_*", "temp_report", True),
        ("[a-c]x", "bx", True),
        ("[a-c]x", "dx", False),
        ("[^a-c]x", "dx", True),
        ("[^a-c]x", "ax", False),
        ("\\*", "*", True),
        ("\\*", "a", False),
        ("build", "build", True),
        ("build", "builds", False),
        ("", "", True),
        ("*a*b", "xxayyb", True),
        ("*a*b", "xxayy", False),
    ],
)
def test_glob_match(pattern, name, expected):
    assert glob_match(pattern, name) is expected


@pytest.mark.parametrize("pattern", ["[a-z", "[]", "[-a]", "abc\\", "[a-]"])
def test_malformed_patterns_raise(pattern):
    with pytest.raises(PatternError):
        validate_pattern(pattern)
    with pytest.raises(PatternError):
        glob_match(pattern, "a")


def test_validate_pattern_accepts_good_pattern():
    assert validate_pattern("*.py") is None
    assert glob_match("*.py", "x.py")


def test_matches_glob_returns_first_matching_pattern():
    assert matches_glob("notes.log", ["*.txt", "*.log", "notes.*"]) == "*.log"


def test_matches_glob_no_match():
    assert matches_glob("script.py", ["*.log", "build"]) is None


def test_matches_glob_skips_malformed_patterns():
    assert matches_glob("[a-z.txt", ["[a-z"]) is None
    assert matches_glob("file.txt", ["[a-z", "*.txt"]) == "*.txt"
import posixpath

from codecat.exclusion import DefaultExcluder, Exclusion, PathInfo


def _info(rel, is_dir=False):
    return PathInfo(
        abs_path="/project/" + rel,
        rel_path_cwd=rel,
        base_name=posixpath.basename(rel),
        is_dir=is_dir,
    )


def test_file_excluded_by_basename():
    excluder = DefaultExcluder(["*.log"], [])
    assert excluder.is_excluded(_info("other.log")) == Exclusion("basename match", "*.log")


def test_nested_file_excluded_by_basename():
    excluder = DefaultExcluder(["*.log"], [])
    result = excluder.is_excluded(_info("other_dir/bar.log"))
    assert result == Exclusion("basename match", "*.log")


def test_file_excluded_by_cwd_relative_glob():
    excluder = DefaultExcluder([], ["*.zip"])
    assert excluder.is_excluded(_info("archive.zip")) == Exclusion("CWD-relative match", "*.zip")


def test_cwd_glob_does_not_cross_separator_for_item():
    excluder = DefaultExcluder([], ["*.zip"])
    assert excluder.is_excluded(_info("sub/archive.zip")) is None


def test_nested_cwd_glob():
    excluder = DefaultExcluder([], ["data/sub/*"])
    result = excluder.is_excluded(_info("data/sub/model.bin"))
    assert result == Exclusion("CWD-relative match", "data/sub/*")
    assert excluder.is_excluded(_info("data/config.json")) is None


def test_not_excluded_returns_none():
    excluder = DefaultExcluder(["*.log", "build"], ["docs"])
    assert excluder.is_excluded(_info("src/main.py")) is None


def test_file_under_basename_excluded_ancestor():
    excluder = DefaultExcluder(["build"], [])
    result = excluder.is_excluded(_info("build/output"))
    assert result is not None
    assert result.pattern == "build"
    assert result.reason == "ancestor build basename match"


def test_remembered_directory_reported_as_excluded_ancestor():
    excluder = DefaultExcluder([], ["docs"])
    assert excluder.is_excluded(_info("docs", is_dir=True)) == Exclusion("CWD-relative match", "docs")
    child = excluder.is_excluded(_info("docs/README.md"))
    assert child is not None
    assert child.pattern == "docs"
    assert child.reason.endswith("excluded")
    assert "docs" in child.reason


def test_excluded_file_is_not_remembered_as_directory():
    excluder = DefaultExcluder([], ["d*"])
    assert excluder.is_excluded(_info("data")) == Exclusion("CWD-relative match", "d*")
    child = excluder.is_excluded(_info("data/nested.txt"))
    assert child is not None
    assert child.pattern == "d*"
    assert child.reason.endswith("CWD match")


def test_prefix_match_with_trailing_slash_pattern():
    excluder = DefaultExcluder([], ["exclude_dir_no_slash/"])
    result = excluder.is_excluded(_info("exclude_dir_no_slash/a"))
    assert result is not None
    assert result.pattern == "exclude_dir_no_slash/"
    assert result.reason.endswith("CWD prefix match")


def test_prefix_match_reaches_deep_descendants():
    excluder = DefaultExcluder([], ["vendor"])
    result = excluder.is_excluded(_info("vendor/x/y/z.txt"))
    assert result is not None
    assert result.pattern == "vendor"


def test_malformed_patterns_never_exclude():
    excluder = DefaultExcluder(["[a-z"], ["[a-z"])
    assert excluder.is_excluded(_info("[a-z.txt")) is None
    assert excluder.is_excluded(_info("file1.txt")) is None


def test_parent_outside_cwd_checked_by_basename():
    excluder = DefaultExcluder(["other"], [])
    result = excluder.is_excluded(_info("../other/a.txt"))
    assert result is not None
    assert result.pattern == "other"


def test_directory_excluded_by_basename_then_contents():
    excluder = DefaultExcluder(["node_modules"], [])
    first = excluder.is_excluded(_info("web/node_modules", is_dir=True))
    assert first == Exclusion("basename match", "node_modules")
    inner = excluder.is_excluded(_info("web/node_modules/pkg/index.js"))
    assert inner is not None
    assert inner.pattern == "node_modules"
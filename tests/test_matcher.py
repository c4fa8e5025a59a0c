"""
Unit tests for glob resolution.

Builds small directory trees under tmp_path and checks include/exclude
semantics, ordering and the empty-match policy.
"""

import os
from pathlib import Path

import pytest

from swift_artifact.uploader import NoMatchError, PatternError, expand, resolve


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create /data-like tree: a.txt, b.txt, c.log, sub/d.txt, sub/deep/e.txt."""
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "c.log").write_text("c")
    (tmp_path / "sub" / "deep").mkdir(parents=True)
    (tmp_path / "sub" / "d.txt").write_text("d")
    (tmp_path / "sub" / "deep" / "e.txt").write_text("e")
    return tmp_path


class TestExpand:
    """Test expand function."""

    def test_single_path(self, data_dir: Path):
        """Test a literal path expands to itself."""
        path = str(data_dir / "a.txt")
        assert expand(path) == [path]

    def test_star_stays_within_segment(self, data_dir: Path):
        """Test * does not cross directory boundaries."""
        matches = expand(str(data_dir / "*.txt"))
        assert matches == [str(data_dir / "a.txt"), str(data_dir / "b.txt")]

    def test_double_star_descends(self, data_dir: Path):
        """Test ** matches files at any depth."""
        matches = expand(str(data_dir / "**" / "*.txt"))
        assert str(data_dir / "a.txt") in matches
        assert str(data_dir / "sub" / "d.txt") in matches
        assert str(data_dir / "sub" / "deep" / "e.txt") in matches
        assert str(data_dir / "c.log") not in matches

    def test_trailing_double_star_strips_separator(self, data_dir: Path):
        """Test directory matches from ** carry no trailing separator."""
        matches = expand(str(data_dir / "**"))
        assert all(not m.endswith(os.sep) for m in matches)
        assert str(data_dir) in matches
        assert str(data_dir / "sub") in matches

    def test_sorted_and_stable(self, data_dir: Path):
        """Test repeated expansion of the same snapshot gives the same order."""
        pattern = str(data_dir / "**")
        first = expand(pattern)
        assert first == sorted(first)
        assert expand(pattern) == first

    def test_empty_pattern_raises(self):
        """Test empty pattern is rejected."""
        with pytest.raises(PatternError):
            expand("")


class TestResolve:
    """Test resolve function."""

    def test_no_excludes_returns_all_matches(self, data_dir: Path):
        """Test resolve without excludes equals expand."""
        pattern = str(data_dir / "*")
        assert resolve(pattern, []) == expand(pattern)

    def test_exclude_removes_matching_files(self, data_dir: Path):
        """Test /data/*.txt minus /data/b.* leaves only a.txt."""
        result = resolve(str(data_dir / "*.txt"), [str(data_dir / "b.*")])
        assert result == [str(data_dir / "a.txt")]

    def test_excludes_are_unioned(self, data_dir: Path):
        """Test every exclude pattern contributes to the exclusion set."""
        result = resolve(
            str(data_dir / "**" / "*.txt"),
            [str(data_dir / "a.*"), str(data_dir / "sub" / "**" / "*.txt")],
        )
        assert result == [str(data_dir / "b.txt")]

    def test_exclude_preserves_include_order(self, data_dir: Path):
        """Test the result is the include order minus excluded entries."""
        pattern = str(data_dir / "**")
        excludes = [str(data_dir / "b.txt")]
        expected = [p for p in expand(pattern) if p != str(data_dir / "b.txt")]
        assert resolve(pattern, excludes) == expected

    def test_exclude_matching_nothing_changes_nothing(self, data_dir: Path):
        """Test exclude patterns with no matches leave the include set intact."""
        pattern = str(data_dir / "*.txt")
        assert resolve(pattern, [str(data_dir / "*.zip")]) == expand(pattern)

    def test_exclusion_is_by_path_not_pattern(self, data_dir: Path):
        """Test a differently spelled pattern still excludes the same file."""
        result = resolve(str(data_dir / "*.txt"), [str(data_dir / "[b].txt")])
        assert result == [str(data_dir / "a.txt")]

    def test_directories_are_not_filtered(self, data_dir: Path):
        """Test directory matches are returned to the caller."""
        result = resolve(str(data_dir / "*"), [])
        assert str(data_dir / "sub") in result

    def test_no_match_raises(self, data_dir: Path):
        """Test an empty include set raises NoMatchError."""
        with pytest.raises(NoMatchError, match="no files match"):
            resolve(str(data_dir / "*.zip"), [])

    def test_everything_excluded_raises(self, data_dir: Path):
        """Test excluding every match raises NoMatchError."""
        with pytest.raises(NoMatchError) as exc_info:
            resolve(str(data_dir / "*.txt"), [str(data_dir / "*")])
        assert exc_info.value.excludes == [str(data_dir / "*")]

    def test_no_match_is_file_not_found(self, data_dir: Path):
        """Test NoMatchError can be handled as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            resolve(str(data_dir / "missing"), [])

    def test_allow_empty_returns_empty_list(self, data_dir: Path):
        """Test allow_empty turns no matches into an empty result."""
        assert resolve(str(data_dir / "*.zip"), [], allow_empty=True) == []

    def test_blank_excludes_are_ignored(self, data_dir: Path):
        """Test empty exclude strings do not raise PatternError."""
        result = resolve(str(data_dir / "a.txt"), [""])
        assert result == [str(data_dir / "a.txt")]


class TestHiddenAndLinkedPaths:
    """Test names starting with "." and symlinked directories."""

    @pytest.fixture
    def site_dir(self, tmp_path: Path) -> Path:
        (tmp_path / "index.html").write_text("<html></html>")
        (tmp_path / ".htaccess").write_text("Deny from all")
        (tmp_path / ".well-known").mkdir()
        (tmp_path / ".well-known" / "security.txt").write_text("Contact: ci")
        return tmp_path

    def test_star_matches_dotfile(self, site_dir: Path):
        matches = resolve(str(site_dir / "*"))
        assert str(site_dir / ".htaccess") in matches
        assert str(site_dir / ".well-known") in matches
        assert str(site_dir / "index.html") in matches

    def test_double_star_enters_dot_directory(self, site_dir: Path):
        matches = resolve(str(site_dir / "**"))
        assert str(site_dir / ".htaccess") in matches
        assert str(site_dir / ".well-known" / "security.txt") in matches

    def test_double_star_suffix_matches_dotfile(self, site_dir: Path):
        matches = resolve(str(site_dir / "**" / "*.txt"))
        assert matches == [str(site_dir / ".well-known" / "security.txt")]

    def test_dotfile_can_be_excluded(self, site_dir: Path):
        matches = resolve(str(site_dir / "**"), [str(site_dir / "**" / ".*")])
        assert str(site_dir / ".htaccess") not in matches
        assert str(site_dir / ".well-known") not in matches
        assert str(site_dir / "index.html") in matches

    def test_double_star_follows_symlinked_directory(self, tmp_path: Path):
        real = tmp_path / "real"
        real.mkdir()
        (real / "c.txt").write_text("c")
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "linked").symlink_to(real, target_is_directory=True)

        matches = resolve(str(tree / "**" / "*.txt"))

        assert matches == [str(tree / "linked" / "c.txt")]

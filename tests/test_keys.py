"""Tests for key/path mapping."""

import os

import pytest

from garage_cli.keys import is_within, normalize_key, to_key, to_local_path


class TestNormalizeKey:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("a/b.txt", "a/b.txt"),
            ("/a/b.txt", "a/b.txt"),
            ("//a/b.txt", "a/b.txt"),
            ("a\\b\\c.txt", "a/b/c.txt"),
            ("\\a\\b.txt", "a/b.txt"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_key(raw) == expected


class TestToKey:
    """Tests for to_key."""

    def test_joins_with_slash(self):
        assert to_key("p", "b/c.txt") == "p/b/c.txt"

    def test_empty_prefix(self):
        assert to_key("", "a.txt") == "a.txt"

    def test_seams_are_collapsed(self):
        """Trailing and leading slashes at the seam produce one slash."""
        assert to_key("p/", "/a.txt") == "p/a.txt"

    def test_host_separators_normalized(self):
        assert to_key("backups\\2024", "b\\c.txt") == "backups/2024/b/c.txt"

    def test_never_leading_slash(self):
        assert not to_key("/p", "a.txt").startswith("/")

    @pytest.mark.parametrize(
        "prefix, relative, expected",
        [
            (".", "a.txt", "a.txt"),
            ("./", "b/c.txt", "b/c.txt"),
            ("p//q", "a.txt", "p/q/a.txt"),
            ("p/./q", "a.txt", "p/q/a.txt"),
            ("p", "b//c.txt", "p/b/c.txt"),
            (".", "", ""),
            ("", "", ""),
        ],
    )
    def test_dot_and_repeated_slash_segments_dropped(self, prefix, relative, expected):
        assert to_key(prefix, relative) == expected


class TestToLocalPath:
    """Tests for to_local_path."""

    def test_strips_prefix(self, tmp_path):
        path = to_local_path(str(tmp_path), "p/b/c.txt", "p")
        assert path == os.path.join(str(tmp_path), "b", "c.txt")

    def test_prefix_with_trailing_slash(self, tmp_path):
        path = to_local_path(str(tmp_path), "p/a.txt", "p/")
        assert path == os.path.join(str(tmp_path), "a.txt")

    def test_empty_prefix_keeps_full_key(self, tmp_path):
        path = to_local_path(str(tmp_path), "p/a.txt", "")
        assert path == os.path.join(str(tmp_path), "p", "a.txt")

    def test_key_equal_to_prefix_maps_to_root(self, tmp_path):
        assert to_local_path(str(tmp_path), "p/a.txt", "p/a.txt") == str(tmp_path)

    def test_round_trip(self, tmp_path):
        """Keys produced by to_key map back to the same relative paths."""
        relative = ["a.txt", "b/c.txt"]
        keys = [to_key("p", r) for r in relative]
        assert keys == ["p/a.txt", "p/b/c.txt"]

        paths = [to_local_path(str(tmp_path), k, "p") for k in keys]
        assert [os.path.relpath(p, str(tmp_path)).replace(os.sep, "/") for p in paths] == relative


class TestIsWithin:
    def test_child_is_within(self, tmp_path):
        assert is_within(str(tmp_path), os.path.join(str(tmp_path), "a", "b.txt"))

    def test_root_is_within_itself(self, tmp_path):
        assert is_within(str(tmp_path), str(tmp_path))

    def test_parent_escape_is_not_within(self, tmp_path):
        escaped = os.path.join(str(tmp_path), "..", "evil.txt")
        assert not is_within(str(tmp_path), escaped)

"""Tests for dotted-identifier hierarchy helpers."""

import pytest

from lazybeads.data.hierarchy import depth, is_direct_child_of, parent_id


class TestParentId:
    @pytest.mark.parametrize(
        "issue_id, expected",
        [
            ("bd-abc", ""),
            ("bd-abc.1", "bd-abc"),
            ("bd-abc.1.2", "bd-abc.1"),
            ("", ""),
        ],
    )
    def test_parent(self, issue_id, expected):
        assert parent_id(issue_id) == expected

    def test_parent_has_one_less_level(self):
        for issue_id in ["x.1", "x.1.2", "x.1.2.3"]:
            assert depth(parent_id(issue_id)) == depth(issue_id) - 1


class TestDepth:
    def test_root_is_zero(self):
        assert depth("bd-abc") == 0

    def test_counts_dots(self):
        assert depth("bd-abc.1") == 1
        assert depth("bd-abc.1.2") == 2


class TestIsDirectChildOf:
    def test_direct_child(self):
        assert is_direct_child_of("bd-abc.1", "bd-abc")

    def test_grandchild_is_not_direct(self):
        assert not is_direct_child_of("bd-abc.1.2", "bd-abc")

    def test_prefix_without_dot_is_not_child(self):
        assert not is_direct_child_of("bd-abcd", "bd-abc")

    def test_unrelated(self):
        assert not is_direct_child_of("bd-xyz.1", "bd-abc")

    def test_agrees_with_parent_id(self):
        for child in ["a.1", "a.1.2", "a.2", "b"]:
            parent = parent_id(child)
            if parent:
                assert is_direct_child_of(child, parent)

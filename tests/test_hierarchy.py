"""
Tests for the group hierarchy summary.

Tests cover:
- Group records and index substitution
- Dropped cubes and non-exportable groups
- Structural errors (unknown nodes, cyclic groups)
- Well-formedness check
"""

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from open_model.hierarchy import (
    HierarchyError, compile_groups, group_record, is_well_formed, iter_indices,
)
from open_model.scene import Cube, Group


# ============== Record Tests ==============

class TestGroupRecord:
    """Test the base record of one group."""

    def test_unrotated_group(self):
        record = group_record(Group("body", origin=[8, 0, 8], color=2))
        assert record == {
            "name": "body",
            "origin": [8.0, 0.0, 8.0],
            "color": 2,
            "children": [],
        }

    def test_rotated_group(self):
        record = group_record(Group("arm", rotation=[0, 0, 30]))
        assert record["rotation"] == [0.0, 0.0, 30.0]
        assert list(record) == ["name", "origin", "color", "rotation", "children"]


# ============== Compile Tests ==============

class TestCompileGroups:
    """Test hierarchy reconstruction."""

    def test_cubes_become_indices(self):
        a, b, c = Cube(uuid="a"), Cube(uuid="b"), Cube(uuid="c")
        root = [Group("body", children=[a, Group("arm", children=[b])]), c]
        groups = compile_groups(root, {"a": 0, "b": 1, "c": 2})

        assert groups[1] == 2
        body = groups[0]
        assert body["name"] == "body"
        assert body["children"][0] == 0
        assert body["children"][1]["name"] == "arm"
        assert body["children"][1]["children"] == [1]

    def test_dropped_cubes_omitted(self):
        root = [Group("g", children=[Cube(uuid="kept"), Cube(uuid="dropped")])]
        groups = compile_groups(root, {"kept": 0})
        assert groups[0]["children"] == [0]

    def test_non_exportable_group_skipped_with_subtree(self):
        root = [
            Group("hidden", export=False, children=[Cube(uuid="a")]),
            Group("shown", children=[Cube(uuid="b")]),
        ]
        groups = compile_groups(root, {"a": 0, "b": 1})
        assert [g["name"] for g in groups] == ["shown"]

    def test_unknown_node_raises(self):
        with pytest.raises(HierarchyError):
            compile_groups([Group("g", children=[object()])], {})

    def test_cyclic_group_raises(self):
        loop = Group("loop")
        loop.children.append(loop)
        with pytest.raises(HierarchyError, match="contains itself"):
            compile_groups([loop], {})

    def test_shared_subgroup_is_not_a_cycle(self):
        shared = Group("shared", children=[Cube(uuid="a")])
        root = [Group("one", children=[shared]), Group("two", children=[shared])]
        groups = compile_groups(root, {"a": 0})
        assert len(groups) == 2

    def test_shared_subgroup_takes_indices_in_order(self):
        shared = Group("shared", children=[Cube(uuid="a")])
        root = [Group("one", children=[shared]), Group("two", children=[shared])]
        groups = compile_groups(root, {"a": [0, 1]})
        assert groups[0]["children"][0]["children"] == [0]
        assert groups[1]["children"][0]["children"] == [1]

    def test_hidden_group_uses_up_its_indices(self):
        shared = Group("shared", children=[Cube(uuid="a")])
        root = [
            Group("hidden", export=False, children=[shared]),
            Group("shown", children=[shared]),
        ]
        groups = compile_groups(root, {"a": [0, 1]})
        assert groups[0]["children"][0]["children"] == [1]

    def test_iter_indices(self):
        groups = [{"name": "g", "children": [2, {"name": "h", "children": [0]}]}, 1]
        assert list(iter_indices(groups)) == [2, 0, 1]


class TestIsWellFormed:
    """Test the top-level group check."""

    def test_indices_only(self):
        assert is_well_formed([0, 1, 2]) is False

    def test_empty(self):
        assert is_well_formed([]) is False

    def test_with_group(self):
        assert is_well_formed([0, {"name": "g", "children": []}]) is True

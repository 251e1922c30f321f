"""
Tests for outliner traversal.

Tests cover:
- Depth-first, child-order visiting through nested groups
- Non-exportable and faceless cubes
- Index lookup table and texture usage accumulation
- Tolerance of unknown nodes and empty groups
"""

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from open_model.config import ExportSettings
from open_model.encoder import encode_cube
from open_model.scene import Cube, Face, Group, ModelProject, Texture
from open_model.walker import walk_scene


# ============== Fixtures ==============

@pytest.fixture
def textures():
    return [
        Texture(name="a.png", folder="block", uuid="tex-a"),
        Texture(name="b.png", folder="block", uuid="tex-b"),
    ]


def cube(name, texture="tex-a", **kwargs):
    return Cube(name=name, faces={"north": Face(texture=texture)}, uuid=name, **kwargs)


def walk(project):
    settings = ExportSettings()
    return walk_scene(project.root, lambda c: encode_cube(c, project, settings))


# ============== Traversal Tests ==============

class TestTraversalOrder:
    """Test visiting order."""

    def test_depth_first_child_order(self, textures):
        root = [
            cube("c0"),
            Group("g1", children=[
                cube("c1"),
                Group("g2", children=[cube("c2")]),
                cube("c3"),
            ]),
            cube("c4"),
        ]
        result = walk(ModelProject(root=root, textures=textures))
        assert [e["name"] for e in result.elements] == ["c0", "c1", "c2", "c3", "c4"]

    def test_empty_root(self):
        result = walk(ModelProject(root=[]))
        assert result.elements == []
        assert result.index_lut == {}
        assert len(result.usage) == 0

    def test_empty_groups_are_harmless(self, textures):
        root = [Group("empty"), Group("nested", children=[Group("deeper")]), cube("c0")]
        result = walk(ModelProject(root=root, textures=textures))
        assert len(result.elements) == 1

    def test_unknown_nodes_skipped(self, textures):
        root = [object(), cube("c0"), "not a node", Group("g", children=[None, cube("c1")])]
        result = walk(ModelProject(root=root, textures=textures))
        assert [e["name"] for e in result.elements] == ["c0", "c1"]


class TestSkippingAndIndices:
    """Test non-exportable/faceless cubes and the index table."""

    def test_non_exportable_not_encoded(self, textures):
        calls = []
        project = ModelProject(root=[cube("c0"), cube("hidden", export=False)], textures=textures)
        settings = ExportSettings()

        def encode(c):
            calls.append(c.name)
            return encode_cube(c, project, settings)

        result = walk_scene(project.root, encode)
        assert calls == ["c0"]
        assert "hidden" not in result.index_lut

    def test_faceless_cube_dropped_and_absent(self, textures):
        root = [
            cube("c0"),
            Cube(name="ghost", uuid="ghost", faces={"north": Face(texture=None)}),
            cube("c1"),
        ]
        result = walk(ModelProject(root=root, textures=textures))
        assert len(result.elements) == 2
        assert result.index_lut == {"c0": 0, "c1": 1}

    def test_lut_points_at_matching_element(self, textures):
        root = [
            Group("g", children=[cube("c0", from_=[1, 2, 3], to=[4, 5, 6])]),
            cube("c1", from_=[0, 0, 0], to=[8, 8, 8], export=False),
            cube("c2", from_=[7, 7, 7], to=[9, 9, 9]),
        ]
        result = walk(ModelProject(root=root, textures=textures))
        assert result.elements[result.index_lut["c0"]]["from"] == [1, 2, 3]
        assert result.elements[result.index_lut["c2"]]["to"] == [9, 9, 9]

    def test_shared_group_records_every_occurrence(self, textures):
        shared = Group("shared", children=[cube("c0")])
        root = [Group("a", children=[shared]), Group("b", children=[shared])]
        result = walk(ModelProject(root=root, textures=textures))
        assert len(result.elements) == 2
        assert result.occurrences == {"c0": [0, 1]}
        assert result.index_lut == {"c0": 0}


class TestTextureUsage:
    """Test texture accumulation across elements."""

    def test_first_reference_order(self, textures):
        root = [cube("c0", texture="tex-b"), cube("c1", texture="tex-a"), cube("c2", texture="tex-b")]
        result = walk(ModelProject(root=root, textures=textures))
        assert [t.uuid for t in result.usage] == ["tex-b", "tex-a"]

    def test_fresh_state_per_walk(self, textures):
        project = ModelProject(root=[cube("c0")], textures=textures)
        first = walk(project)
        second = walk(project)
        assert first.usage is not second.usage
        assert len(second.usage) == 1
        assert len(second.elements) == 1

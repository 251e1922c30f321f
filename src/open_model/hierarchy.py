"""
Group hierarchy summary.

Rebuilds the outliner as nested group records where every cube is
replaced by its output element index. Structural problems raise
HierarchyError so the caller can leave the field out entirely.

A cube reached through a shared group is emitted once per parent, so
the index table may hold several indices per cube. They are handed out
in walk order, which keeps every emitted element referenced once.
"""

from typing import Any, Dict, List, Mapping, Sequence, Union

import numpy as np

from .scene import Cube, Group, SceneNode

HierarchyEntry = Union[int, Dict[str, Any]]
IndexTable = Mapping[str, Union[int, Sequence[int]]]


class HierarchyError(ValueError):
    """Outliner tree cannot be summarized (unknown node, cyclic group)."""


class _IndexCursor:
    """Hands out the element indices of each cube in occurrence order."""

    def __init__(self, index_lut: IndexTable):
        self._lut = index_lut
        self._taken: Dict[str, int] = {}

    def next(self, uuid: str):
        indices = self._lut.get(uuid)
        if indices is None:
            return None
        if isinstance(indices, int):
            return indices
        if not indices:
            return None
        taken = self._taken.get(uuid, 0)
        self._taken[uuid] = taken + 1
        # Past the recorded occurrences, keep pointing at the last one
        return indices[min(taken, len(indices) - 1)]


def group_record(group: Group) -> Dict[str, Any]:
    """Base record of a group, children filled in by compile_groups."""
    record: Dict[str, Any] = {
        "name": group.name,
        "origin": group.origin.tolist(),
        "color": group.color,
    }
    if np.any(group.rotation != 0):
        record["rotation"] = group.rotation.tolist()
    record["children"] = []
    return record


def compile_groups(root: Sequence[SceneNode], index_lut: IndexTable) -> List[HierarchyEntry]:
    """
    Summarize the outliner for the "groups" field.

    Args:
        root: Top-level outliner nodes
        index_lut: cube uuid -> output element index, or the list of
            indices emitted for that cube in walk order

    Returns:
        Nested list of group records and element indices

    Raises:
        HierarchyError: On unknown node types or a group containing itself
    """
    result: List[HierarchyEntry] = []
    _compile_into(root, result, _IndexCursor(index_lut), [])
    return result


def _compile_into(nodes, save_array: list, cursor: _IndexCursor, path: list) -> None:
    for node in nodes:
        if isinstance(node, Group):
            if any(node is ancestor for ancestor in path):
                raise HierarchyError(f"Group {node.name!r} contains itself")
            if node.export is not True:
                _consume(node.children, cursor, {id(a) for a in path} | {id(node)})
                continue
            record = group_record(node)
            if node.children:
                path.append(node)
                _compile_into(node.children, record["children"], cursor, path)
                path.pop()
            save_array.append(record)
        elif isinstance(node, Cube):
            index = cursor.next(node.uuid)
            if index is not None and index >= 0:
                save_array.append(index)
        else:
            raise HierarchyError(f"Unknown outliner node: {type(node).__name__}")


def _consume(nodes, cursor: _IndexCursor, visiting: set) -> None:
    """Use up the indices of cubes the walker emitted under a hidden group."""
    for node in nodes or ():
        if isinstance(node, Cube):
            if node.export is not False:
                cursor.next(node.uuid)
        elif isinstance(node, Group) and id(node) not in visiting:
            visiting.add(id(node))
            _consume(node.children, cursor, visiting)
            visiting.discard(id(node))


def iter_indices(groups: Sequence[HierarchyEntry]):
    """Yield every element index in a summary, depth first."""
    for entry in groups:
        if isinstance(entry, dict):
            yield from iter_indices(entry.get("children", []))
        else:
            yield entry


def is_well_formed(groups: Sequence[HierarchyEntry]) -> bool:
    """A summary is only worth emitting when its top level holds a group."""
    return any(isinstance(entry, dict) for entry in groups)

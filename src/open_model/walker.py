"""
Outliner traversal.

Visits every cube reachable from the root in depth-first, child-array
order and threads the results through an explicit WalkResult instead of
shared accumulators.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from .encoder import EncodedElement
from .scene import Cube, Group, SceneNode
from .textures import TextureUsage

logger = logging.getLogger(__name__)


@dataclass
class WalkResult:
    """
    Output of one traversal.

    elements: encoded element records, in output order
    index_lut: cube uuid -> index of its first element; dropped and
        non-exportable cubes are absent
    occurrences: cube uuid -> indices of every element emitted for it,
        in walk order (a cube inside a shared group is emitted once per
        parent)
    usage: textures referenced by the emitted elements
    """
    elements: List[Dict[str, Any]] = field(default_factory=list)
    index_lut: Dict[str, int] = field(default_factory=dict)
    occurrences: Dict[str, List[int]] = field(default_factory=dict)
    usage: TextureUsage = field(default_factory=TextureUsage)

    def add(self, cube: Cube, encoded: EncodedElement) -> None:
        if encoded.is_empty:
            logger.debug(f"Dropping cube {cube.name!r}: no faces")
            return
        index = len(self.elements)
        self.index_lut.setdefault(cube.uuid, index)
        self.occurrences.setdefault(cube.uuid, []).append(index)
        self.elements.append(encoded.record)
        self.usage.update(encoded.textures)


def walk_scene(
    root: Sequence[SceneNode],
    encode: Callable[[Cube], EncodedElement]
) -> WalkResult:
    """
    Walk the outliner and encode every exportable cube.

    Args:
        root: Top-level outliner nodes
        encode: Element encoder applied to each exportable cube

    Returns:
        WalkResult with elements, index lookup table and texture usage
    """
    result = WalkResult()
    _walk(root, encode, result, set())
    logger.debug(f"Walked outliner: {len(result.elements)} elements")
    return result


def _walk(nodes, encode, result: WalkResult, visiting: set) -> None:
    if not nodes:
        return
    for node in nodes:
        if isinstance(node, Cube):
            if node.export is False:
                logger.debug(f"Skipping non-exportable cube {node.name!r}")
                continue
            result.add(node, encode(node))
        elif isinstance(node, Group):
            if id(node) in visiting:
                continue
            visiting.add(id(node))
            _walk(node.children, encode, result, visiting)
            visiting.discard(id(node))

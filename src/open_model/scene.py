"""
Scene model consumed by the compiler.

A project is a tree of Groups and Cubes (the outliner), a list of
Textures and a ProjectMetadata snapshot. All vectors are numpy float
arrays; the compiler only reads these objects and never keeps a
reference to them in its output.

Coordinates are in model pixels (16 per block).
"""

import uuid as uuid_module
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, List, Optional, Union

import numpy as np

# Canonical face directions, in output order
DIRECTIONS = ("north", "east", "south", "west", "up", "down")

AXES = ("x", "y", "z")

# Display slots, in output order
DISPLAY_SLOTS = (
    "thirdperson_righthand",
    "thirdperson_lefthand",
    "firstperson_righthand",
    "firstperson_lefthand",
    "ground",
    "gui",
    "head",
    "fixed",
)

DEFAULT_CUBE_NAME = "cube"


def _new_uuid() -> str:
    return uuid_module.uuid4().hex


def _vec(values, size: int = 3, fill: float = 0.0) -> np.ndarray:
    """Coerce a sequence (or None) to a float vector of the given size."""
    if values is None:
        return np.full(size, fill, dtype=float)
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"Expected {size} components, got {arr.tolist()}")
    return arr


@dataclass
class Texture:
    """
    Project texture.

    name is the file name (e.g. "oak_planks.png"); folder and namespace
    locate it as an asset ("block", "minecraft"). At most one texture
    should be flagged as the particle texture.
    """
    name: str
    folder: str = ""
    namespace: str = ""
    particle: bool = False
    uuid: str = field(default_factory=_new_uuid)

    @property
    def short_name(self) -> str:
        """File name without extension, used as the symbolic texture key."""
        return PurePosixPath(self.name).stem

    def java_texture_link(self) -> str:
        """
        Reference to this texture as written in the texture table.

        Asset textures resolve to "[namespace:]folder/name". A texture
        outside any asset folder links to its bare name.
        """
        link = self.name
        if link.lower().endswith(".png"):
            link = link[:-4]
        if self.folder:
            link = f"{self.folder}/{link}"
        if self.namespace and self.namespace != "minecraft":
            link = f"{self.namespace}:{link}"
        return link


@dataclass
class Face:
    """
    One directional face of a cube.

    texture has three states:
        None  - the face has no geometry and is not exported
        False - blank face, exported with the placeholder texture
        str   - uuid of a project texture
    """
    texture: Union[str, bool, None] = False
    uv: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 16.0, 16.0]))
    enabled: bool = True
    rotation: int = 0
    cullface: str = ""
    tint: int = -1

    def __post_init__(self):
        self.uv = _vec(self.uv, size=4)


def _default_faces() -> Dict[str, Face]:
    return {direction: Face() for direction in DIRECTIONS}


@dataclass
class Cube:
    """Axis-aligned cuboid element (before rotation)."""
    name: str = DEFAULT_CUBE_NAME
    from_: np.ndarray = field(default_factory=lambda: np.zeros(3))
    to: np.ndarray = field(default_factory=lambda: np.zeros(3))
    inflate: float = 0.0
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rescale: bool = False
    shade: bool = True
    color: int = 0
    export: bool = True
    faces: Dict[str, Face] = field(default_factory=_default_faces)
    uuid: str = field(default_factory=_new_uuid)

    def __post_init__(self):
        self.from_ = _vec(self.from_)
        self.to = _vec(self.to)
        self.rotation = _vec(self.rotation)
        self.origin = _vec(self.origin)

    def rotation_axis(self) -> Optional[str]:
        """First axis (x, y, z order) with a non-zero rotation, or None."""
        nonzero = np.flatnonzero(self.rotation)
        if len(nonzero) == 0:
            return None
        return AXES[int(nonzero[0])]


@dataclass
class Group:
    """Outliner group. Carries no geometry of its own."""
    name: str = "group"
    children: List["SceneNode"] = field(default_factory=list)
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    color: int = 0
    export: bool = True
    uuid: str = field(default_factory=_new_uuid)

    def __post_init__(self):
        self.origin = _vec(self.origin)
        self.rotation = _vec(self.rotation)


SceneNode = Union[Group, Cube]


@dataclass
class DisplaySlot:
    """Transform applied when the model is shown in one display context."""
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    mirror: List[bool] = field(default_factory=lambda: [False, False, False])

    def __post_init__(self):
        self.rotation = _vec(self.rotation)
        self.translation = _vec(self.translation)
        self.scale = _vec(self.scale, fill=1.0)
        self.mirror = [bool(m) for m in self.mirror]

    def export(self) -> Optional[Dict[str, List[float]]]:
        """
        Export record holding only the non-default parts of the slot.

        Returns:
            Dict with any of rotation/translation/scale, or None when the
            slot is entirely default (nothing to export)
        """
        build: Dict[str, List[float]] = {}
        if np.any(self.rotation != 0):
            build["rotation"] = self.rotation.tolist()
        if np.any(self.translation != 0):
            build["translation"] = self.translation.tolist()
        if np.any(self.scale != 1) or any(self.mirror):
            signs = np.where(self.mirror, -1.0, 1.0)
            build["scale"] = (self.scale * signs).tolist()
        return build or None


@dataclass
class ProjectMetadata:
    """Project-level values the document assembler reads."""
    parent: str = ""
    texture_width: int = 16
    texture_height: int = 16
    ambient_occlusion: bool = True
    front_gui_light: bool = False
    overrides: Any = None
    display_settings: Dict[str, DisplaySlot] = field(default_factory=dict)


@dataclass
class ModelProject:
    """
    Snapshot of one editor project: outliner tree, textures and metadata.
    """
    name: str = "model"
    root: List[SceneNode] = field(default_factory=list)
    textures: List[Texture] = field(default_factory=list)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)

    def find_texture(self, texture_uuid: str) -> Optional[Texture]:
        for texture in self.textures:
            if texture.uuid == texture_uuid:
                return texture
        return None

    def iter_nodes(self) -> Iterator[SceneNode]:
        """Depth-first iteration over every node of the outliner."""
        stack = list(reversed(self.root))
        seen = set()
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            if isinstance(node, Group):
                stack.extend(reversed(node.children))

    def all_cubes(self) -> List[Cube]:
        return [n for n in self.iter_nodes() if isinstance(n, Cube)]

    def all_groups(self) -> List[Group]:
        return [n for n in self.iter_nodes() if isinstance(n, Group)]

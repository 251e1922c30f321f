"""
Element encoding.

Turns one Cube into one output element record:
1. Bounding box, expanded by inflate
2. Optional name and shade flag
3. Rotation descriptor (single axis, rescale folded in)
4. Face map with UVs scaled to the 16-unit space
5. Color fallback when no face carries a texture

The encoder never mutates the cube; vectors are copied out as lists.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .config import ExportSettings
from .scene import AXES, DEFAULT_CUBE_NAME, DIRECTIONS, Cube, Face, ModelProject, Texture

logger = logging.getLogger(__name__)

MISSING_TEXTURE = "#missing"

# Output UV space is 16 units regardless of texture resolution
UV_SPACE = 16.0


@dataclass
class EncodedElement:
    """Element record plus the textures its faces reference."""
    record: Dict[str, Any]
    textures: List[Texture] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when every face was dropped (element is not exported)."""
        return not self.record.get("faces")


def inflate_box(
    from_: np.ndarray,
    to: np.ndarray,
    inflate: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Expand (or shrink, for negative inflate) a box symmetrically on all axes."""
    from_ = np.array(from_, dtype=float)
    to = np.array(to, dtype=float)
    if inflate:
        from_ -= inflate
        to += inflate
    return from_, to


def scale_uv(uv: np.ndarray, width: float, height: float) -> np.ndarray:
    """
    Scale a UV box from texture pixels to the 16-unit output space.

    U components are divided by the texture width, V components by the
    height: [u0, v0, u1, v1] -> [u0*16/w, v0*16/h, u1*16/w, v1*16/h].
    """
    resolution = np.array([width, height, width, height], dtype=float)
    return np.asarray(uv, dtype=float) * UV_SPACE / resolution


def rotation_descriptor(cube: Cube) -> Optional[Dict[str, Any]]:
    """
    Build the single-axis rotation descriptor of a cube.

    Emitted when the rotation or origin is non-zero, or when rescale is
    set. The axis is the first non-zero rotation axis, falling back to y.

    Returns:
        {"angle", "axis", "origin"[, "rescale"]} or None
    """
    rotated = np.any(cube.rotation != 0) or np.any(cube.origin != 0)
    if not rotated and not cube.rescale:
        return None

    axis = cube.rotation_axis() or "y"
    descriptor: Dict[str, Any] = {
        "angle": float(cube.rotation[AXES.index(axis)]),
        "axis": axis,
        "origin": cube.origin.tolist(),
    }
    if cube.rescale:
        descriptor["rescale"] = True
    return descriptor


def encode_face(
    face: Face,
    project: ModelProject
) -> Tuple[Dict[str, Any], Optional[Texture], bool]:
    """
    Encode one face that has geometry (texture is not None).

    Returns:
        Tuple of (face tag, resolved texture or None, textured) where
        textured is True whenever the face pointed at a texture, even an
        unresolved one
    """
    tag: Dict[str, Any] = {}
    metadata = project.metadata

    if face.enabled is not False:
        tag["uv"] = scale_uv(face.uv, metadata.texture_width, metadata.texture_height).tolist()

    if face.rotation:
        tag["rotation"] = int(face.rotation)

    texture = None
    textured = False
    if face.texture:
        texture = project.find_texture(face.texture)
        if texture is not None:
            tag["texture"] = "#" + texture.short_name
        else:
            logger.warning(f"Face texture {face.texture!r} does not resolve, using placeholder")
        textured = True
    if "texture" not in tag:
        tag["texture"] = MISSING_TEXTURE

    if face.cullface:
        tag["cullface"] = face.cullface

    if face.tint is not None and face.tint >= 0:
        tag["tintindex"] = int(face.tint)

    return tag, texture, textured


def encode_cube(
    cube: Cube,
    project: ModelProject,
    settings: ExportSettings
) -> EncodedElement:
    """
    Encode a cube into an element record.

    Args:
        cube: Source cube (exportable)
        project: Owning project, for textures and texture resolution
        settings: Global export settings

    Returns:
        EncodedElement; check is_empty before emitting it
    """
    element: Dict[str, Any] = {}

    if settings.export_cube_names and not settings.minified_output:
        if cube.name != DEFAULT_CUBE_NAME:
            element["name"] = cube.name

    from_, to = inflate_box(cube.from_, cube.to, cube.inflate)
    element["from"] = from_.tolist()
    element["to"] = to.tolist()

    if cube.shade is False:
        element["shade"] = False

    descriptor = rotation_descriptor(cube)
    if descriptor is not None:
        element["rotation"] = descriptor

    # Single-axis descriptor cannot carry this; pass the raw vector along
    if np.count_nonzero(cube.rotation) >= 2:
        element["rotated"] = cube.rotation.tolist()

    faces: Dict[str, Dict[str, Any]] = {}
    textures: List[Texture] = []
    has_texture = False
    for direction in DIRECTIONS:
        face = cube.faces.get(direction)
        if face is None or face.texture is None:
            continue
        tag, texture, textured = encode_face(face, project)
        if texture is not None and texture not in textures:
            textures.append(texture)
        has_texture = has_texture or textured
        faces[direction] = tag

    if not has_texture:
        element["color"] = cube.color
    element["faces"] = faces

    return EncodedElement(record=element, textures=textures)

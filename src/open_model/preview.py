"""
Mesh preview of a compiled document.

Builds one box mesh per compiled element, applies its rotation
descriptor about the element origin and exports the scene (GLB by
default). Model pixels are scaled to block units (16 px = 1 unit).
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False
    logger.warning("trimesh not available")

PIXELS_PER_UNIT = 16.0

# Degenerate (flat) elements still get a visible slab
MIN_EXTENT = 1e-3

AXIS_VECTORS = {
    "x": np.array([1.0, 0.0, 0.0]),
    "y": np.array([0.0, 1.0, 0.0]),
    "z": np.array([0.0, 0.0, 1.0]),
}


def _require_trimesh() -> None:
    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for previews. Install with: pip install trimesh")


def element_transform(rotation: Optional[Mapping[str, Any]]) -> np.ndarray:
    """
    4x4 transform for an element rotation descriptor.

    Rescaled rotations stretch the two axes perpendicular to the rotation
    axis by 1/cos(angle), as the block model loader does.
    """
    matrix = np.eye(4)
    if not rotation:
        return matrix

    angle = float(rotation.get("angle", 0.0))
    axis = rotation.get("axis", "y")
    origin = np.asarray(rotation.get("origin", [0, 0, 0]), dtype=float)

    if angle:
        matrix = trimesh.transformations.rotation_matrix(
            np.radians(angle), AXIS_VECTORS[axis], point=origin
        )

    if rotation.get("rescale") and angle:
        cos = abs(np.cos(np.radians(angle)))
        if cos > 1e-6:
            factors = np.full(3, 1.0 / cos)
            factors["xyz".index(axis)] = 1.0
            scale = np.diag(np.append(factors, 1.0))
            to_origin = trimesh.transformations.translation_matrix(-origin)
            back = trimesh.transformations.translation_matrix(origin)
            matrix = back @ scale @ to_origin @ matrix

    return matrix


def element_to_mesh(element: Mapping[str, Any]) -> "trimesh.Trimesh":
    """Box mesh of one compiled element, in block units."""
    _require_trimesh()

    from_ = np.asarray(element["from"], dtype=float)
    to = np.asarray(element["to"], dtype=float)
    extents = np.maximum(np.abs(to - from_), MIN_EXTENT)
    center = (from_ + to) / 2.0

    box = trimesh.creation.box(extents=extents)
    box.apply_translation(center)
    box.apply_transform(element_transform(element.get("rotation")))
    box.apply_scale(1.0 / PIXELS_PER_UNIT)
    return box


def document_to_scene(document: Mapping[str, Any]) -> "trimesh.Scene":
    """
    Scene with one box per element of a compiled (raw) document.

    Raises:
        ValueError: If the document has no components
    """
    _require_trimesh()

    elements = document.get("components") or []
    if not elements:
        raise ValueError("Document has no components to preview")

    scene = trimesh.Scene()
    for i, element in enumerate(elements):
        name = f"{i:04d}_{element.get('name', 'element')}"
        scene.add_geometry(element_to_mesh(element), geom_name=name)
    return scene


def save_preview(document: Mapping[str, Any], path: Union[str, Path]) -> Dict[str, Any]:
    """
    Export a preview scene of the document.

    Args:
        document: Compiled (raw) document
        path: Output path; the suffix selects the file type (.glb, .obj...)

    Returns:
        Preview statistics: element count, bounds in block units, path
    """
    scene = document_to_scene(document)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    scene.export(str(path))

    bounds = scene.bounds
    stats = {
        "path": str(path),
        "n_elements": len(scene.geometry),
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist(),
        },
    }
    logger.info(f"Saved preview: {path} ({stats['n_elements']} elements)")
    return stats

"""
Project snapshot loading and document writing.

Project snapshots are editor project files (.bbmodel style JSON):
- "elements": cubes with uuid, from/to, rotation, origin, faces
- "outliner": tree of group dicts and cube uuids
- "textures": name, folder, namespace, particle, uuid
- "resolution", "parent", "ambientocclusion", "front_gui_light",
  "overrides", "display"

Face textures may be given as a texture index, a texture uuid, null
(no face) or false (blank face).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .scene import (
    DIRECTIONS, Cube, DisplaySlot, Face, Group, ModelProject,
    ProjectMetadata, SceneNode, Texture,
)

logger = logging.getLogger(__name__)


def _require(data: Dict[str, Any], key: str, kind, where: str):
    if key not in data:
        raise ValueError(f"{where}: missing required field {key!r}")
    value = data[key]
    if not isinstance(value, kind):
        raise ValueError(f"{where}: field {key!r} has type {type(value).__name__}")
    return value


def texture_from_dict(data: Dict[str, Any]) -> Texture:
    name = _require(data, "name", str, "texture")
    kwargs = {
        "name": name,
        "folder": data.get("folder", "") or "",
        "namespace": data.get("namespace", "") or "",
        "particle": bool(data.get("particle", False)),
    }
    if data.get("uuid"):
        kwargs["uuid"] = str(data["uuid"])
    return Texture(**kwargs)


def face_from_dict(data: Dict[str, Any], textures: List[Texture]) -> Face:
    texture = data.get("texture", False)
    # Integer pointers index the project texture list
    if isinstance(texture, int) and not isinstance(texture, bool):
        if 0 <= texture < len(textures):
            texture = textures[texture].uuid
        else:
            logger.warning(f"Face texture index {texture} out of range")
            texture = f"missing-{texture}"
    elif texture is True:
        texture = False
    return Face(
        texture=texture,
        uv=data.get("uv", [0, 0, 16, 16]),
        enabled=data.get("enabled", True) is not False,
        rotation=int(data.get("rotation", 0) or 0),
        cullface=data.get("cullface", "") or "",
        tint=int(data.get("tint", -1) if data.get("tint") is not None else -1),
    )


def cube_from_dict(data: Dict[str, Any], textures: List[Texture]) -> Cube:
    faces_data = data.get("faces", {})
    faces = {
        direction: face_from_dict(faces_data[direction], textures)
        for direction in DIRECTIONS
        if isinstance(faces_data.get(direction), dict)
    }
    kwargs = {
        "name": data.get("name", "cube"),
        "from_": _require(data, "from", list, "element"),
        "to": _require(data, "to", list, "element"),
        "inflate": float(data.get("inflate", 0.0) or 0.0),
        "rotation": data.get("rotation"),
        "origin": data.get("origin"),
        "rescale": bool(data.get("rescale", False)),
        "shade": data.get("shade", True) is not False,
        "color": data.get("color", 0),
        "export": data.get("export", True) is not False,
        "faces": faces,
    }
    if data.get("uuid"):
        kwargs["uuid"] = str(data["uuid"])
    return Cube(**kwargs)


def _outliner_from_list(entries: List[Any], cubes: Dict[str, Cube]) -> List[SceneNode]:
    nodes: List[SceneNode] = []
    for entry in entries:
        if isinstance(entry, str):
            cube = cubes.get(entry)
            if cube is None:
                logger.warning(f"Outliner references unknown element {entry}")
                continue
            nodes.append(cube)
        elif isinstance(entry, dict):
            kwargs = {
                "name": entry.get("name", "group"),
                "children": _outliner_from_list(entry.get("children", []), cubes),
                "origin": entry.get("origin"),
                "rotation": entry.get("rotation"),
                "color": entry.get("color", 0),
                "export": entry.get("export", True) is not False,
            }
            if entry.get("uuid"):
                kwargs["uuid"] = str(entry["uuid"])
            nodes.append(Group(**kwargs))
        else:
            logger.warning(f"Ignoring outliner entry of type {type(entry).__name__}")
    return nodes


def project_from_dict(data: Dict[str, Any], name: Optional[str] = None) -> ModelProject:
    """
    Build a ModelProject from a parsed project snapshot.

    Args:
        data: Parsed JSON snapshot
        name: Project name (defaults to the snapshot's "name")

    Returns:
        ModelProject

    Raises:
        ValueError: If required fields are missing or ill-typed
    """
    if not isinstance(data, dict):
        raise ValueError("Project snapshot must be a JSON object")

    textures = [texture_from_dict(t) for t in data.get("textures", [])]

    cubes: Dict[str, Cube] = {}
    ordered: List[Cube] = []
    for element in data.get("elements", []):
        if element.get("type", "cube") != "cube":
            logger.debug(f"Skipping element of type {element.get('type')!r}")
            continue
        cube = cube_from_dict(element, textures)
        cubes[cube.uuid] = cube
        ordered.append(cube)

    if "outliner" in data:
        root = _outliner_from_list(data["outliner"], cubes)
    else:
        root = list(ordered)

    resolution = data.get("resolution", {})
    display = {
        slot: DisplaySlot(
            rotation=values.get("rotation"),
            translation=values.get("translation"),
            scale=values.get("scale"),
            mirror=values.get("mirror", [False, False, False]),
        )
        for slot, values in data.get("display", {}).items()
        if isinstance(values, dict)
    }
    metadata = ProjectMetadata(
        parent=data.get("parent", "") or "",
        texture_width=int(resolution.get("width", 16)),
        texture_height=int(resolution.get("height", 16)),
        ambient_occlusion=data.get("ambientocclusion", True) is not False,
        front_gui_light=bool(data.get("front_gui_light", False)),
        overrides=data.get("overrides"),
        display_settings=display,
    )

    return ModelProject(
        name=name or data.get("name") or "model",
        root=root,
        textures=textures,
        metadata=metadata,
    )


def load_project(path: Union[str, Path]) -> ModelProject:
    """
    Load a project snapshot from disk.

    Args:
        path: Path to project JSON

    Returns:
        ModelProject named after the file when the snapshot has no name
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    name = data.get("name") if isinstance(data, dict) else None
    project = project_from_dict(data, name=name or path.stem)
    logger.info(
        f"Loaded {path}: {len(project.all_cubes())} cubes, {len(project.textures)} textures"
    )
    return project


def write_document(content: str, path: Union[str, Path]) -> Path:
    """Write compiled document text, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Saved model: {path}")
    return path

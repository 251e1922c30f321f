"""
Open Model - block model compiler for Framework's Open Model format.

Compiles an editor project (outliner of groups and cubes, textures,
display settings) into an Open Model JSON document.

Usage:
    from open_model import OpenModelCodec, load_project
    codec = OpenModelCodec(load_project("chair.bbmodel"))
    codec.export("out/chair.json")
"""

__version__ = "0.1.0"

from .config import CompileOptions, ExportSettings, DEFAULT_SETTINGS
from .scene import Cube, DisplaySlot, Face, Group, ModelProject, ProjectMetadata, Texture
from .codec import OpenModelCodec, accepts_document
from .io import load_project, project_from_dict, write_document
from .serialize import serialize_document

__all__ = [
    'CompileOptions', 'ExportSettings', 'DEFAULT_SETTINGS',
    'Cube', 'DisplaySlot', 'Face', 'Group', 'ModelProject', 'ProjectMetadata', 'Texture',
    'OpenModelCodec', 'accepts_document',
    'load_project', 'project_from_dict', 'write_document',
    'serialize_document',
]

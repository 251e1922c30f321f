"""
Document assembly.

Combines the walked elements, the texture table, the display settings and
the group hierarchy into the output document. Every optional field has a
default inclusion condition which a CompileOptions override replaces.

Field order of the document is part of the output contract:
credit, loader, parent, ambientocclusion, texture_size, textures,
components, gui_light, overrides, display, groups.
"""

import copy
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .config import CompileOptions, ExportSettings
from .hierarchy import HierarchyError, compile_groups, is_well_formed
from .scene import DISPLAY_SLOTS, DisplaySlot, Group, ModelProject
from .textures import build_texture_table
from .walker import WalkResult

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Notifier = Callable[[str, str], None]

LOADER = "framework:open_model"

DEFAULT_TEXTURE_SIZE = 16

# Built-in item parents that render without geometry
RESERVED_ITEM_PARENTS = (
    "item/generated", "minecraft:item/generated",
    "item/handheld", "minecraft:item/handheld",
    "item/handheld_rod", "minecraft:item/handheld_rod",
    "builtin/generated", "minecraft:builtin/generated",
)

INVALID_PARENT_KEY = "invalid_builtin_parent"


def log_notifier(key: str, message: str) -> None:
    """Default warning sink when no UI collaborator is attached."""
    logger.warning(f"[{key}] {message}")


def guard_reserved_parent(
    parent: str,
    n_elements: int,
    prevent_dialog: bool = False,
    notify: Optional[Notifier] = None
) -> str:
    """
    Clear a built-in item parent when the document has geometry.

    The warning is surfaced through notify unless prevent_dialog is set;
    the parent is cleared either way.

    Returns:
        Parent to use for the rest of the compile
    """
    if not n_elements or parent not in RESERVED_ITEM_PARENTS:
        return parent
    if not prevent_dialog:
        message = (
            f"The parent \"{parent}\" is not compatible with elements. "
            "It has been removed from the exported model."
        )
        (notify or log_notifier)(INVALID_PARENT_KEY, message)
    logger.info(f"Cleared built-in parent {parent!r} ({n_elements} elements)")
    return ""


def compile_display(display_settings: Mapping[str, DisplaySlot]) -> Dict[str, Dict[str, Any]]:
    """Export records of all exportable display slots, in slot order."""
    display: Dict[str, Dict[str, Any]] = {}
    for slot in DISPLAY_SLOTS:
        settings = display_settings.get(slot)
        export = getattr(settings, "export", None)
        if not callable(export):
            continue
        exported = export()
        if exported:
            display[slot] = exported
    return display


def assemble_document(
    walk: WalkResult,
    project: ModelProject,
    settings: ExportSettings,
    options: CompileOptions,
    notify: Optional[Notifier] = None
) -> Document:
    """
    Assemble the output document.

    Args:
        walk: Result of walking the outliner
        project: Source project (metadata, textures, outliner)
        settings: Global export settings
        options: Per-call overrides
        notify: Sink for the reserved-parent warning

    Returns:
        Document dict, in output field order
    """
    metadata = project.metadata
    elements = walk.elements
    check = options.check

    textures_only = len(elements) == 0 and bool(check("parent", metadata.parent != ""))
    textures = build_texture_table(project.textures, walk.usage, textures_only=textures_only)

    parent = guard_reserved_parent(
        metadata.parent,
        len(elements),
        prevent_dialog=options.prevent_dialog,
        notify=notify,
    )

    document: Document = {}
    if check("comment", bool(settings.credit)):
        document["credit"] = settings.credit
    document["loader"] = LOADER
    if check("parent", parent != ""):
        document["parent"] = parent
    if check("ambientocclusion", metadata.ambient_occlusion is False):
        document["ambientocclusion"] = False
    if (metadata.texture_width != DEFAULT_TEXTURE_SIZE
            or metadata.texture_height != DEFAULT_TEXTURE_SIZE):
        document["texture_size"] = [int(metadata.texture_width), int(metadata.texture_height)]
    if check("textures", len(textures) >= 1):
        document["textures"] = textures
    if check("elements", len(elements) >= 1):
        document["components"] = elements
    if check("front_gui_light", bool(metadata.front_gui_light)):
        document["gui_light"] = "front"
    if check("overrides", bool(metadata.overrides)):
        document["overrides"] = copy.deepcopy(metadata.overrides)
    if check("display", len(metadata.display_settings) >= 1):
        display = compile_display(metadata.display_settings)
        if display:
            document["display"] = display

    has_groups = any(isinstance(node, Group) for node in project.root)
    if check("groups", settings.export_groups and has_groups):
        try:
            groups = compile_groups(project.root, walk.occurrences)
        except HierarchyError as e:
            logger.warning(f"Omitting groups: {e}")
        else:
            if is_well_formed(groups):
                document["groups"] = groups
            else:
                logger.debug("No exportable groups at top level, omitting groups")

    logger.info(
        f"Assembled document: {len(elements)} elements, {len(textures)} textures"
        f"{' (textures only)' if textures_only else ''}"
    )
    return document

"""
Texture resolution.

Collects the textures referenced by encoded faces and turns the project
texture list into the symbolic texture table of the output document.
"""

import logging
from typing import Dict, Iterable, Iterator, List

from .scene import Texture

logger = logging.getLogger(__name__)

PARTICLE_KEY = "particle"


class TextureUsage:
    """
    Ordered set of textures referenced during one compile pass.

    Insertion order is first-reference order; adding a texture again is a
    no-op. One instance per compile, never shared.
    """

    def __init__(self, textures: Iterable[Texture] = ()):
        self._textures: List[Texture] = []
        self._uuids = set()
        for texture in textures:
            self.add(texture)

    def add(self, texture: Texture) -> None:
        if texture.uuid in self._uuids:
            return
        self._uuids.add(texture.uuid)
        self._textures.append(texture)

    def update(self, textures: Iterable[Texture]) -> None:
        for texture in textures:
            self.add(texture)

    def __contains__(self, texture: Texture) -> bool:
        return texture.uuid in self._uuids

    def __iter__(self) -> Iterator[Texture]:
        return iter(self._textures)

    def __len__(self) -> int:
        return len(self._textures)


def build_texture_table(
    textures: Iterable[Texture],
    usage: TextureUsage,
    textures_only: bool = False
) -> Dict[str, str]:
    """
    Build the symbolic texture table.

    Every project texture is considered in project order:
    1. A particle texture contributes the "particle" entry
    2. Unreferenced textures are skipped unless the document is textures-only
    3. The texture is keyed by its short name, unless its link is just a
       reference to that same name

    Args:
        textures: All textures known to the project
        usage: Textures referenced by encoded faces
        textures_only: Relax the reference filter (no geometry in document)

    Returns:
        Mapping of symbolic name to texture link
    """
    table: Dict[str, str] = {}
    for texture in textures:
        link = texture.java_texture_link()
        if texture.particle:
            table[PARTICLE_KEY] = link
        if texture not in usage and not textures_only:
            continue
        name = texture.short_name
        bare_link = link[1:] if link.startswith("#") else link
        if name != bare_link:
            table[name] = link
        else:
            logger.debug(f"Texture {name!r} links to itself, not listed")
    return table

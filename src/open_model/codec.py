"""
Open Model codec.

Compiles a ModelProject into a Framework Open Model document, an
extension of block model JSON that lifts the 3x3x3 size limit and the
22.5 degree rotation step. Models written by this codec load only with
the Framework open model loader.

Usage:
    codec = OpenModelCodec(project, settings)
    text = codec.compile()
    document = codec.compile({"raw": True})
    codec.export("out/chair.json")
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .assembler import Document, Notifier, assemble_document
from .config import DEFAULT_SETTINGS, CompileOptions, ExportSettings
from .encoder import encode_cube
from .io import write_document
from .scene import ModelProject
from .serialize import serialize_document
from .walker import walk_scene

logger = logging.getLogger(__name__)

FORMAT_ID = "framework_open_model"
FORMAT_NAME = "Framework Open Model"
EXTENSION = "json"

COMPILE_EVENT = "compile"

Writer = Callable[[str, Path], Any]
OptionsLike = Union[CompileOptions, Mapping[str, Any], None]


def accepts_document(model: Any) -> bool:
    """Load filter: a parsed JSON model this format can open."""
    if not isinstance(model, dict):
        return False
    return bool(
        model.get("parent") or model.get("elements")
        or model.get("components") or model.get("textures")
    )


def _coerce_options(options: OptionsLike) -> CompileOptions:
    if isinstance(options, CompileOptions):
        return options
    return CompileOptions.from_dict(options)


class OpenModelCodec:
    """
    Compiles one project to the Open Model document format.

    Each compile call keeps its own traversal state, so one codec can be
    compiled repeatedly (or several codecs side by side) without sharing
    accumulators.
    """

    def __init__(
        self,
        project: ModelProject,
        settings: Optional[ExportSettings] = None,
        notify: Optional[Notifier] = None,
        writer: Optional[Writer] = None
    ):
        """
        Initialize codec.

        Args:
            project: Project snapshot to compile
            settings: Global export settings (defaults to DEFAULT_SETTINGS)
            notify: Receives user-facing warnings as (key, message)
            writer: Persists exported text, called as writer(content, path)
        """
        self.project = project
        self.settings = settings or DEFAULT_SETTINGS
        self.notify = notify
        self.writer = writer or write_document
        self._listeners: Dict[str, List[Callable[[Dict[str, Any]], None]]] = {}

    def on(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> Callable:
        """Register an observer; compile observers get {"model", "options"}."""
        self._listeners.setdefault(event, []).append(callback)
        return callback

    def remove_listener(self, event: str, callback: Callable) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def dispatch_event(self, event: str, data: Dict[str, Any]) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(data)

    def compile(self, options: OptionsLike = None) -> Union[Document, str]:
        """
        Compile the project.

        Args:
            options: CompileOptions or flat mapping such as
                {"parent": False, "raw": True, "prevent_dialog": True}

        Returns:
            Document dict when options.raw is set, JSON text otherwise
        """
        options = _coerce_options(options)
        project = self.project
        settings = self.settings

        walk = walk_scene(project.root, lambda cube: encode_cube(cube, project, settings))
        document = assemble_document(walk, project, settings, options, notify=self.notify)

        self.dispatch_event(COMPILE_EVENT, {"model": document, "options": options})

        if options.raw:
            return document
        return serialize_document(
            document,
            minify=settings.minified_output,
            decimal_precision=settings.decimal_precision,
        )

    def default_path(self) -> Path:
        return Path(f"{self.project.name}.{EXTENSION}")

    def export(self, path: Union[str, Path, None] = None, options: OptionsLike = None) -> Path:
        """
        Compile to text and hand it to the writer.

        Args:
            path: Output path (defaults to "<project name>.json")
            options: Compile options; raw is ignored

        Returns:
            Path written
        """
        options = _coerce_options(options)
        text_options = CompileOptions(
            overrides=dict(options.overrides),
            raw=False,
            prevent_dialog=options.prevent_dialog,
            extra=dict(options.extra),
        )
        content = self.compile(text_options)
        path = Path(path) if path is not None else self.default_path()
        self.writer(content, path)
        logger.info(f"Exported {FORMAT_NAME} model: {path}")
        return path

"""
Configuration for Open Model compilation.

Two layers of configuration feed one compile pass:
- ExportSettings: the global settings snapshot (credit text, name/group
  export flags, minified output). Stable across compiles.
- CompileOptions: per-call overrides that force a document field in or
  out regardless of its default inclusion condition.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import json
from pathlib import Path

logger = logging.getLogger(__name__)


# Field keys a caller may force on or off
OVERRIDE_KEYS = (
    "parent",
    "comment",
    "ambientocclusion",
    "textures",
    "elements",
    "front_gui_light",
    "overrides",
    "display",
    "groups",
)


@dataclass
class ExportSettings:
    """
    Global settings snapshot read by the compiler.

    These mirror the editor preferences the codec consults; the compiler
    never fetches them itself, they are passed in.
    """

    # Written to the "credit" field when non-empty
    credit: str = "Made with Blockbench"

    # Emit element names (never when minified_output is on)
    export_cube_names: bool = True

    # Emit the "groups" hierarchy summary
    export_groups: bool = True

    # Compact text output, also suppresses element names
    minified_output: bool = False

    # Rounding applied to numbers in the serialized text
    decimal_precision: int = 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "credit": self.credit,
            "export_cube_names": self.export_cube_names,
            "export_groups": self.export_groups,
            "minified_output": self.minified_output,
            "decimal_precision": self.decimal_precision,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExportSettings":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_json(cls, path: Path) -> "ExportSettings":
        """Load settings from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save settings to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


@dataclass
class CompileOptions:
    """
    Per-call compile options.

    overrides maps a field key (see OVERRIDE_KEYS) to True/False, taking
    precedence over that field's default inclusion condition.
    raw returns the structured document instead of text.
    prevent_dialog suppresses the reserved-parent warning (the parent is
    still cleared).
    extra holds any other keys a caller passes along; the compiler never
    reads them but compile listeners receive them.
    """

    overrides: Dict[str, bool] = field(default_factory=dict)
    raw: bool = False
    prevent_dialog: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        unknown = [k for k in self.overrides if k not in OVERRIDE_KEYS]
        if unknown:
            self.overrides = dict(self.overrides)
            logger.debug(f"Passing through non-field options: {sorted(unknown)}")
            for key in unknown:
                self.extra[key] = self.overrides.pop(key)

    def check(self, key: str, default: Any) -> Any:
        """
        Resolve whether a field is included.

        Args:
            key: Override key for the field
            default: Computed default inclusion condition

        Returns:
            The explicit override if one is set, otherwise the default
        """
        value = self.overrides.get(key)
        if value is None:
            return default
        return value

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(self.overrides)
        data["raw"] = self.raw
        data["prevent_dialog"] = self.prevent_dialog
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CompileOptions":
        """Build options from the flat mapping form, e.g. {"parent": False, "raw": True}."""
        if data is None:
            return cls()
        data = dict(data)
        raw = bool(data.pop("raw", False))
        prevent_dialog = bool(data.pop("prevent_dialog", False))
        overrides = {k: v for k, v in data.items() if k in OVERRIDE_KEYS and v is not None}
        extra = {k: v for k, v in data.items() if k not in OVERRIDE_KEYS}
        if extra:
            logger.debug(f"Passing through non-field options: {sorted(extra)}")
        return cls(overrides=overrides, raw=raw, prevent_dialog=prevent_dialog, extra=extra)


# Global default settings
DEFAULT_SETTINGS = ExportSettings()

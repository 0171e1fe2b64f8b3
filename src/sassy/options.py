"""
Engine configuration.

EngineOptions is the configuration bundle handed to an Engine:
    - style: output style hint, only read by the renderer
    - load_paths: ordered directories searched by @import
    - filename: source file name, used for error attribution
    - attribute_syntax: which attribute syntax is accepted (None = both)

Options can be built directly, from a plain dict, or from a YAML file.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml


class OutputStyle(Enum):
    """Output styles understood by the CSS renderer."""
    NESTED = "nested"          # Rules indented under their parents
    EXPANDED = "expanded"      # One declaration per line, flat rules
    COMPACT = "compact"        # One rule per line
    COMPRESSED = "compressed"  # Minimal whitespace, no comments


class AttributeSyntax(Enum):
    """
    Attribute syntaxes.

    NORMAL is `:name value`, ALTERNATE is `name: value`.
    """
    NORMAL = "normal"
    ALTERNATE = "alternate"


@dataclass
class EngineOptions:
    """
    Options for one compilation unit.

    Nested engines created by @import receive a copy with `filename`
    pointing at the imported file (see with_filename).
    """

    style: OutputStyle = OutputStyle.NESTED
    load_paths: List[str] = field(default_factory=lambda: ["."])
    filename: Optional[str] = None
    attribute_syntax: Optional[AttributeSyntax] = None

    def with_filename(self, filename: str) -> EngineOptions:
        return replace(self, filename=filename, load_paths=list(self.load_paths))


_KNOWN_KEYS = {"style", "load_paths", "filename", "attribute_syntax"}


def options_from_dict(d: Dict[str, Any] | None) -> EngineOptions:
    """
    Build EngineOptions from a plain mapping.

    Enum-valued keys accept their string values ("compact", "normal").

    Raises:
        ValueError: On unknown keys or invalid enum values
    """
    if not d:
        return EngineOptions()

    unknown = set(d) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown option(s): {sorted(unknown)}")

    options = EngineOptions()
    if d.get("style") is not None:
        options.style = OutputStyle(d["style"])
    if d.get("load_paths") is not None:
        load_paths = d["load_paths"]
        if isinstance(load_paths, str):
            load_paths = [load_paths]
        options.load_paths = [str(p) for p in load_paths]
    if d.get("filename") is not None:
        options.filename = str(d["filename"])
    if d.get("attribute_syntax") is not None:
        options.attribute_syntax = AttributeSyntax(d["attribute_syntax"])
    return options


def options_to_dict(options: EngineOptions) -> Dict[str, Any]:
    return {
        "style": options.style.value,
        "load_paths": list(options.load_paths),
        "filename": options.filename,
        "attribute_syntax": options.attribute_syntax.value if options.attribute_syntax else None,
    }


def load_options(path: str) -> EngineOptions:
    """
    Read EngineOptions from a YAML file.

    An empty file yields the defaults.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Options file must contain a mapping: {path}")
    return options_from_dict(data)


__all__ = [
    "OutputStyle",
    "AttributeSyntax",
    "EngineOptions",
    "options_from_dict",
    "options_to_dict",
    "load_options",
]

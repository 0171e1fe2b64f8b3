"""
Line classification.

Every logical line has exactly one shape, decided by its first character
(falling back to a regex for the `name: value` attribute form):

    :name value      ATTRIBUTE
    !name = value    CONSTANT
    // text          SILENT_COMMENT
    /* text          CSS_COMMENT
    @name value      DIRECTIVE
    \\anything        ESCAPED_RULE
    =name            MIXIN_DEFINITION
    +name            MIXIN_INCLUDE   ("+" followed by space/end is a RULE)
    name: value      ALTERNATE_ATTRIBUTE
    anything else    RULE

detect_shape() is pure. Acting on a shape (symbol tables, imports) is
the Engine's job; its results are one of the three ParseResult variants
defined here.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from sassy.model import Marker, Node

# The character that begins a CSS attribute.
ATTRIBUTE_CHAR = ":"

# Follows the attribute name when the value is constant arithmetic.
SCRIPT_CHAR = "="

# Begins a comment, either Sass or CSS.
COMMENT_CHAR = "/"

# Follows COMMENT_CHAR in a silent comment, not output.
SASS_COMMENT_CHAR = "/"

# Follows COMMENT_CHAR in a CSS comment, output as is.
CSS_COMMENT_CHAR = "*"

DIRECTIVE_CHAR = "@"

# Designates a non-parsed rule.
ESCAPE_CHAR = "\\"

MIXIN_DEFINITION_CHAR = "="

MIXIN_INCLUDE_CHAR = "+"

CONSTANT_CHAR = "!"

# :name value  /  :name= expr
ATTRIBUTE = re.compile(r"^:([^\s=:]+)\s*(=?)(?:\s+|$)(.*)")

# name: value  /  name = expr  (detection only)
ATTRIBUTE_ALTERNATE_MATCHER = re.compile(r"^[^\s:]+\s*[=:](\s|$)")

# name: value  /  name = expr
ATTRIBUTE_ALTERNATE = re.compile(r"^([^\s=:]+)(\s*=|:)(?:\s+|$)(.*)")

# @import values that are plain CSS and must not be resolved
CSS_IMPORT = re.compile(r"^(url\(|\"|')")


class LineShape(Enum):
    ATTRIBUTE = "attribute"
    ALTERNATE_ATTRIBUTE = "alternate_attribute"
    CONSTANT = "constant"
    SILENT_COMMENT = "silent_comment"
    CSS_COMMENT = "css_comment"
    DIRECTIVE = "directive"
    ESCAPED_RULE = "escaped_rule"
    MIXIN_DEFINITION = "mixin_definition"
    MIXIN_INCLUDE = "mixin_include"
    RULE = "rule"


def detect_shape(text: str) -> LineShape:
    """Classify one trimmed line of text."""
    first = text[:1]
    second = text[1:2]

    if first == ATTRIBUTE_CHAR:
        return LineShape.ATTRIBUTE
    if first == CONSTANT_CHAR:
        return LineShape.CONSTANT
    if first == COMMENT_CHAR:
        if second == SASS_COMMENT_CHAR:
            return LineShape.SILENT_COMMENT
        if second == CSS_COMMENT_CHAR:
            return LineShape.CSS_COMMENT
        return LineShape.RULE
    if first == DIRECTIVE_CHAR:
        return LineShape.DIRECTIVE
    if first == ESCAPE_CHAR:
        return LineShape.ESCAPED_RULE
    if first == MIXIN_DEFINITION_CHAR:
        return LineShape.MIXIN_DEFINITION
    if first == MIXIN_INCLUDE_CHAR:
        if second == "" or second.isspace():
            return LineShape.RULE
        return LineShape.MIXIN_INCLUDE
    if ATTRIBUTE_ALTERNATE_MATCHER.match(text):
        return LineShape.ALTERNATE_ATTRIBUTE
    return LineShape.RULE


def split_attribute(text: str, shape: LineShape) -> Optional[Tuple[str, bool, str]]:
    """
    Split an attribute line into (name, is_script, value).

    Returns None when the line does not have a valid attribute shape.
    """
    regex = ATTRIBUTE if shape == LineShape.ATTRIBUTE else ATTRIBUTE_ALTERNATE
    m = regex.match(text)
    if m is None:
        return None
    name, eq, value = m.groups()
    return name, eq.strip()[:1] == SCRIPT_CHAR, value


def split_directive(text: str) -> Tuple[str, Optional[str]]:
    """Split `@name value` into (name, value); value is None when absent."""
    parts = text[1:].split(None, 1)
    if not parts:
        return "", None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


def is_sass_import(name: str, value: Optional[str]) -> bool:
    """True when an @import must be resolved rather than passed through."""
    return name == "import" and (value is None or CSS_IMPORT.match(value) is None)


# =========================================================================
# Parse results
# =========================================================================

@dataclass
class NodeResult:
    """The line produced one node."""
    node: Node


@dataclass
class MarkerResult:
    """The line produced no node (constant, mixin definition, silent comment)."""
    marker: Marker


@dataclass
class NodeListResult:
    """
    The line expanded into several nodes (@import, +mixin).

    Properties:
        nodes: Expanded nodes, in order
        source: "import" or "mixin", used in nesting errors
    """
    nodes: List[Node] = field(default_factory=list)
    source: str = "import"


ParseResult = Union[NodeResult, MarkerResult, NodeListResult]


__all__ = [
    "LineShape",
    "detect_shape",
    "split_attribute",
    "split_directive",
    "is_sass_import",
    "NodeResult",
    "MarkerResult",
    "NodeListResult",
    "ParseResult",
]

"""
Core Stylesheet Tree Objects

Defines the data structures produced by the sassy compiler.

These are plain data classes representing:
    - Lines (logical source lines, transient)
    - Rules (selectors)
    - Attributes (CSS properties)
    - Comments (CSS comments, output verbatim)
    - Directives (@-rules)
    - The root of a document

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about how they were parsed
        - Know nothing about CSS output formatting (belongs in backends)
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass
class Line:
    """
    One logical source line.

    Produced by the indentation tokenizer and regrouped by the tree
    builder. Lines exist only between tokenization and assembly, and as
    the stored bodies of mixins.

    Properties:
        text: Line content with surrounding whitespace removed
        depth: Number of indentation units before the text
        index: 1-based source line number
        children: Lines nested one level deeper (filled by the tree builder)
    """

    text: str
    depth: int
    index: int
    children: List["Line"] = field(default_factory=list)


@dataclass(eq=False)
class Node:
    """
    Base class for all tree nodes.

    Properties:
        line: Source line the node was produced from
        filename: File the node came from (set by the assembler)
        children: Ordered child nodes
    """

    line: Optional[int] = field(default=None, kw_only=True)
    filename: Optional[str] = field(default=None, kw_only=True)
    children: List["Node"] = field(default_factory=list, kw_only=True)

    def append(self, child: "Node") -> None:
        self.children.append(child)


@dataclass(eq=False)
class RootNode(Node):
    """The document root. Its children are the top-level nodes."""


@dataclass(eq=False)
class RuleNode(Node):
    """
    A selector line.

    A rule whose text ends in a comma is "continued": its selector list is
    not closed yet, and the assembler merges it with the following rule.
    The final tree never contains a continued rule.

    Properties:
        rules:
            One selector string per source line, trailing commas removed
            Example: ["a", "b"] for the lines "a," and "b"

        continued:
            True while the last merged line ended in a comma
    """

    rules: List[str] = field(default_factory=list)
    continued: bool = False

    @classmethod
    def from_text(cls, text: str) -> "RuleNode":
        continued = text.endswith(",")
        rule = text[:-1].rstrip() if continued else text
        return cls(rules=[rule], continued=continued)

    @property
    def selector(self) -> str:
        """All selectors of the rule, comma-joined."""
        return ", ".join(self.rules)

    def add_rules(self, other: "RuleNode") -> None:
        """Merge another rule's selectors into this one."""
        self.rules.extend(other.rules)
        self.continued = other.continued


@dataclass(eq=False)
class AttrNode(Node):
    """
    A CSS property.

    Children of an attribute are namespaced attributes:
        :font
          :family arial
    becomes `font-family: arial`.

    Properties:
        name: Property name
        value: Resolved value (constants already substituted)
    """

    name: str = ""
    value: str = ""


@dataclass(eq=False)
class CommentNode(Node):
    """
    A comment that survives into the tree.

    Comments are opaque: lines nested under a comment are kept as they
    were read and never interpreted.

    Properties:
        text: Raw text of the comment line, including the leading marker
        output: True for CSS comments (written to the output)
        lines: Nested source lines, uninterpreted
    """

    text: str = ""
    output: bool = True
    lines: List[Line] = field(default_factory=list)


@dataclass(eq=False)
class DirectiveNode(Node):
    """
    An @-directive that is passed through to the output.

    Properties:
        text: Raw directive text, e.g. "@import url(foo.css)"
    """

    text: str = ""

    @property
    def name(self) -> str:
        return self.text[1:].split(None, 1)[0] if len(self.text) > 1 else ""


class Marker(Enum):
    """
    Parse results that produce no node.

    CONSTANT and MIXIN still obey root-only placement rules.
    SILENT_COMMENT is discarded together with its nested lines.
    """
    CONSTANT = "constant"
    MIXIN = "mixin"
    SILENT_COMMENT = "silent_comment"


def walk(node: Node):
    """Yield a node and all of its descendants, depth first."""
    yield node
    for child in node.children:
        yield from walk(child)


__all__ = [
    "Line",
    "Node",
    "RootNode",
    "RuleNode",
    "AttrNode",
    "CommentNode",
    "DirectiveNode",
    "Marker",
    "walk",
]

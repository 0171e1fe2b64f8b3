"""
CSS generator for sassy stylesheet trees.

Converts a RootNode into CSS text.

Supports multiple styles:
    - NESTED: Child rules indented under their parents (default)
    - EXPANDED: Flat rules, one declaration per line
    - COMPACT: One rule per line
    - COMPRESSED: Minimal whitespace, comments dropped

Nested rules are flattened by resolving selectors against their parents:
    a          a b {
      b    ->    ...
      &:hover  a:hover { ... }
"""

from typing import List, Optional, Tuple

from sassy.errors import SassSyntaxError
from sassy.model import AttrNode, CommentNode, DirectiveNode, Line, Node, RootNode, RuleNode
from sassy.options import OutputStyle

PARENT_REFERENCE = "&"


def resolve_selectors(parents: Optional[List[str]], rules: List[str], node: Optional[Node] = None) -> List[str]:
    """
    Combine parent selectors with a rule's selectors.

    Every selector line may itself hold several comma-separated
    selectors. With parents ["a", "b"] and rules ["c"] the result is
    ["a c", "b c"].
    """
    selectors = [s.strip() for rule in rules for s in rule.split(",") if s.strip()]

    if parents is None:
        for selector in selectors:
            if PARENT_REFERENCE in selector:
                raise SassSyntaxError(
                    "Base-level rules cannot contain the parent-selector-referencing character '&'.",
                    node.line if node else None,
                    node.filename if node else None,
                )
        return selectors

    resolved = []
    for parent in parents:
        for selector in selectors:
            if PARENT_REFERENCE in selector:
                resolved.append(selector.replace(PARENT_REFERENCE, parent))
            else:
                resolved.append(f"{parent} {selector}")
    return resolved


def _flatten_lines(lines: List[Line]) -> List[Line]:
    flat = []
    for line in lines:
        flat.append(line)
        flat.extend(_flatten_lines(line.children))
    return flat


class _CSSRenderer:
    """Renders one tree in one style."""

    def __init__(self, style: OutputStyle):
        self.style = style

    @property
    def compressed(self) -> bool:
        return self.style == OutputStyle.COMPRESSED

    def render(self, root: RootNode) -> str:
        chunks = []
        for child in root.children:
            blocks = self._blocks(child, None, 0)
            if blocks:
                chunks.append(("" if self.compressed else "\n").join(blocks))

        if not chunks:
            return ""
        separator = {
            OutputStyle.NESTED: "\n\n",
            OutputStyle.EXPANDED: "\n\n",
            OutputStyle.COMPACT: "\n",
            OutputStyle.COMPRESSED: "",
        }[self.style]
        return separator.join(chunks) + "\n"

    def _blocks(self, node: Node, parents: Optional[List[str]], depth: int) -> List[str]:
        if isinstance(node, RuleNode):
            return self._rule_blocks(node, parents, depth)
        if isinstance(node, CommentNode):
            comment = self._comment(node, depth)
            return [comment] if comment else []
        if isinstance(node, DirectiveNode):
            return [self._directive(node)]
        if isinstance(node, AttrNode):
            raise SassSyntaxError("Attributes aren't allowed at the root of a document.", node.line, node.filename)
        return []

    # =========================================================================
    # Declarations
    # =========================================================================

    def _declarations(self, attr: AttrNode, prefix: str = "") -> List[Tuple[str, str]]:
        """Flatten an attribute and its namespaced children."""
        name = prefix + attr.name
        declarations = []
        if attr.value:
            declarations.append((name, attr.value))
        for child in attr.children:
            if not isinstance(child, AttrNode):
                raise SassSyntaxError(
                    "Illegal nesting: Only attributes may be nested beneath attributes.", child.line, child.filename
                )
            declarations.extend(self._declarations(child, name + "-"))
        return declarations

    def _format_declaration(self, name: str, value: str) -> str:
        if self.compressed:
            return f"{name}:{value}"
        return f"{name}: {value};"

    def _body(self, node: Node) -> Tuple[List[str], List[Node]]:
        """Split a node's children into formatted body lines and nested blocks."""
        body: List[str] = []
        nested: List[Node] = []
        for child in node.children:
            if isinstance(child, AttrNode):
                body.extend(self._format_declaration(n, v) for n, v in self._declarations(child))
            elif isinstance(child, CommentNode):
                comment = self._comment(child, 0)
                if comment:
                    body.append(comment)
            else:
                nested.append(child)
        return body, nested

    def _wrap(self, head: str, body: List[str], depth: int) -> str:
        indent = "  " * depth if self.style == OutputStyle.NESTED else ""
        # Multi-line entries (comments) are indented line by line
        lines = [line for entry in body for line in entry.split("\n")]
        if self.style == OutputStyle.NESTED:
            return f"{indent}{head} {{\n" + "\n".join(f"{indent}  {line}" for line in lines) + " }"
        if self.style == OutputStyle.EXPANDED:
            return f"{head} {{\n" + "\n".join(f"  {line}" for line in lines) + "\n}"
        if self.style == OutputStyle.COMPACT:
            return f"{head} {{ " + " ".join(body) + " }"
        return f"{head}{{" + ";".join(body) + "}"

    # =========================================================================
    # Nodes
    # =========================================================================

    def _rule_blocks(self, node: RuleNode, parents: Optional[List[str]], depth: int) -> List[str]:
        selectors = resolve_selectors(parents, node.rules, node)
        body, nested = self._body(node)

        blocks = []
        if body:
            joiner = "," if self.compressed else ", "
            blocks.append(self._wrap(joiner.join(selectors), body, depth))
            depth += 1
        for child in nested:
            blocks.extend(self._blocks(child, selectors, depth))
        return blocks

    def _comment(self, node: CommentNode, depth: int) -> str:
        if self.compressed or not node.output:
            return ""
        indent = "  " * depth if self.style == OutputStyle.NESTED else ""
        lines = [node.text] + [f" {line.text}" for line in _flatten_lines(node.lines)]
        text = "\n".join(indent + line for line in lines)
        if not text.rstrip().endswith("*/"):
            text += " */"
        return text

    def _directive(self, node: DirectiveNode) -> str:
        if not node.children:
            return node.text + ";"

        body, nested = self._body(node)
        blocks = [block for child in nested for block in self._blocks(child, None, 0)]
        if self.style == OutputStyle.COMPRESSED:
            return f"{node.text}{{" + ";".join(body) + "".join(blocks) + "}"
        body.extend(blocks)
        if self.style == OutputStyle.COMPACT:
            return f"{node.text} {{ " + " ".join(body) + " }"
        inner = "\n".join("  " + line for block in body for line in block.split("\n"))
        closing = " }" if self.style == OutputStyle.NESTED else "\n}"
        return f"{node.text} {{\n{inner}{closing}"


def render_css(root: RootNode, style: OutputStyle = OutputStyle.NESTED) -> str:
    """
    Render a stylesheet tree as CSS.

    Args:
        root: Tree produced by Engine.to_tree()
        style: Output style

    Returns:
        CSS text, ending in a newline unless empty

    Raises:
        SassSyntaxError: If attributes appear at the root, non-attributes
            are nested under an attribute, or a base-level rule uses `&`
    """
    return _CSSRenderer(style).render(root)


def save_css_file(root: RootNode, filepath: str, style: OutputStyle = OutputStyle.NESTED) -> None:
    """Render a tree and write it to a file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(render_css(root, style))

"""
Sass Engine (Layer 2: Nested Lines → Stylesheet Tree).

The Engine drives one compilation unit:

    template --tabulate--> Lines --build_line_tree--> nested Lines
             --append_children/build_tree--> RootNode --render--> CSS

Each line is classified (sassy.classifier), turned into a node or a
marker, checked against the nesting and root-only rules, and attached to
its parent. Constants, mixins and @import are resolved along the way.

Usage:
    engine = Engine(template, EngineOptions(load_paths=["styles"]))
    css = engine.render()

ARCHITECTURAL RULE:
    An Engine owns its ConstantTable and MixinTable. An @import runs a
    nested Engine over copies of both tables and then adopts the nested
    Engine's tables. There is no module-level state.
"""

import logging
import re
from typing import List, Optional

from sassy.backends.css_renderer import render_css
from sassy.classifier import (
    LineShape,
    MarkerResult,
    NodeListResult,
    NodeResult,
    ParseResult,
    detect_shape,
    is_sass_import,
    split_attribute,
    split_directive,
)
from sassy.constant import MATCH as CONSTANT_MATCH
from sassy.constant import evaluate
from sassy.errors import SassSyntaxError
from sassy.importer import CSS_EXTENSION, find_file_to_import, read_file
from sassy.indentation import parse_lines
from sassy.model import (
    AttrNode,
    CommentNode,
    DirectiveNode,
    Line,
    Marker,
    Node,
    RootNode,
    RuleNode,
)
from sassy.options import AttributeSyntax, EngineOptions
from sassy.symbols import ConstantTable, MixinTable

logger = logging.getLogger(__name__)

_IMPORT_SEPARATOR = re.compile(r",\s*")


class Engine:
    """
    Compiles one template.

    Args:
        template: Template text
        options: Engine options (defaults to EngineOptions())
        constants: Initial constants, taken over by this engine
        mixins: Initial mixins, taken over by this engine
    """

    def __init__(
        self,
        template: str,
        options: Optional[EngineOptions] = None,
        constants: Optional[ConstantTable] = None,
        mixins: Optional[MixinTable] = None,
    ):
        self.template = template
        self.options = options or EngineOptions()
        self.constants = constants if constants is not None else ConstantTable()
        self.mixins = mixins if mixins is not None else MixinTable()
        self._line: Optional[int] = None
        # Names of the mixins whose bodies are being assembled, outermost first
        self._including: List[str] = []

    @property
    def filename(self) -> Optional[str]:
        return self.options.filename

    def render(self) -> str:
        """Compile the template and return CSS text."""
        root = self.to_tree()
        try:
            return render_css(root, self.options.style)
        except SassSyntaxError as err:
            if not err.backtrace:
                err.add_backtrace_entry(err.filename or self.filename)
            raise

    to_css = render

    def to_tree(self) -> RootNode:
        """
        Compile the template into a node tree.

        Raises:
            SassSyntaxError: On any error. The error's backtrace gets one
                entry for this engine: the failing line if the error was
                raised here, or the @import line if it came from a nested
                engine.
        """
        try:
            root = RootNode(filename=self.filename)
            self.append_children(root, parse_lines(self.template), True)
            return root
        except SassSyntaxError as err:
            line = self._line if err.backtrace else err.line
            err.add_backtrace_entry(self.filename, line)
            raise

    # =====================================================================
    # Assembly
    # =====================================================================

    def build_tree(self, line: Line) -> ParseResult:
        """Turn one Line, with its nested Lines, into a parse result."""
        self._line = line.index
        result = self.parse_line(line)

        if not isinstance(result, NodeResult):
            if line.children:
                if isinstance(result, MarkerResult) and result.marker == Marker.CONSTANT:
                    raise SassSyntaxError(
                        "Illegal nesting: Nothing may be nested beneath constants.", line.children[0].index
                    )
                if isinstance(result, NodeListResult):
                    raise SassSyntaxError(
                        f"Illegal nesting: Nothing may be nested beneath {result.source} directives.",
                        line.children[0].index,
                    )
            return result

        node = result.node
        node.line = line.index
        node.filename = self.filename

        if isinstance(node, CommentNode):
            node.lines = line.children
        else:
            self.append_children(node, line.children, False)
        return result

    def append_children(self, parent: Node, children: List[Line], root: bool) -> None:
        """
        Build every Line in `children` and attach the results to `parent`.

        Rules ending in a comma are held back (continued_rule) until the
        next rule closes the selector list; continued_rule is None while
        no continuation is open.
        """
        continued_rule: Optional[RuleNode] = None

        for line in children:
            result = self.build_tree(line)
            child = result.node if isinstance(result, NodeResult) else None

            if isinstance(child, RuleNode) and child.continued:
                if child.children:
                    raise SassSyntaxError("Rules can't end in commas.", child.line)
                if continued_rule is None:
                    continued_rule = child
                else:
                    continued_rule.add_rules(child)
                continue

            if continued_rule is not None:
                if not isinstance(child, RuleNode):
                    raise SassSyntaxError("Rules can't end in commas.", continued_rule.line)
                continued_rule.add_rules(child)
                continued_rule.children = child.children
                result = NodeResult(continued_rule)
                continued_rule = None

            self.validate_and_append_child(parent, result, line, root)

        if continued_rule is not None:
            raise SassSyntaxError("Rules can't end in commas.", continued_rule.line)

    def validate_and_append_child(self, parent: Node, result: ParseResult, line: Line, root: bool) -> None:
        """
        Check root-only placement and attach.

        Expanded results (@import, +mixin) are checked element by element
        against the rootness of the line that produced them.
        """
        if not root:
            if isinstance(result, MarkerResult):
                if result.marker == Marker.CONSTANT:
                    raise SassSyntaxError("Constants may only be declared at the root of a document.", line.index)
                if result.marker == Marker.MIXIN:
                    raise SassSyntaxError("Mixins may only be defined at the root of a document.", line.index)
            elif isinstance(result, NodeResult) and isinstance(result.node, DirectiveNode):
                raise SassSyntaxError("Directives may only be used at the root of a document.", line.index)

        if isinstance(result, NodeListResult):
            for node in result.nodes:
                self.validate_and_append_child(parent, NodeResult(node), line, root)
        elif isinstance(result, NodeResult):
            parent.append(result.node)

    # =====================================================================
    # Line parsing
    # =====================================================================

    def parse_line(self, line: Line) -> ParseResult:
        text = line.text
        shape = detect_shape(text)

        if shape in (LineShape.ATTRIBUTE, LineShape.ALTERNATE_ATTRIBUTE):
            return NodeResult(self.parse_attribute(text, shape))
        if shape == LineShape.CONSTANT:
            return self.parse_constant(text)
        if shape == LineShape.SILENT_COMMENT:
            return MarkerResult(Marker.SILENT_COMMENT)
        if shape == LineShape.CSS_COMMENT:
            return NodeResult(CommentNode(text=text, output=True))
        if shape == LineShape.DIRECTIVE:
            return self.parse_directive(text)
        if shape == LineShape.ESCAPED_RULE:
            return NodeResult(RuleNode.from_text(text[1:]))
        if shape == LineShape.MIXIN_DEFINITION:
            return self.parse_mixin_definition(line)
        if shape == LineShape.MIXIN_INCLUDE:
            return self.parse_mixin_include(text)
        return NodeResult(RuleNode.from_text(text))

    def parse_attribute(self, text: str, shape: LineShape) -> AttrNode:
        syntax = self.options.attribute_syntax
        if syntax == AttributeSyntax.NORMAL and shape == LineShape.ALTERNATE_ATTRIBUTE:
            raise SassSyntaxError(
                "Illegal attribute syntax: can't use alternate syntax when attribute_syntax is normal.", self._line
            )
        if syntax == AttributeSyntax.ALTERNATE and shape == LineShape.ATTRIBUTE:
            raise SassSyntaxError(
                "Illegal attribute syntax: can't use normal syntax when attribute_syntax is alternate.", self._line
            )

        parts = split_attribute(text, shape)
        if parts is None:
            raise SassSyntaxError(f"Invalid attribute: \"{text}\".", self._line)

        name, is_script, value = parts
        if is_script:
            value = evaluate(value, self.constants, self._line)
        return AttrNode(name=name, value=value)

    def parse_constant(self, text: str) -> MarkerResult:
        m = CONSTANT_MATCH.match(text)
        if m is None:
            raise SassSyntaxError(f"Invalid constant: \"{text}\".", self._line)

        name, op, value = m.groups()
        constant = evaluate(value, self.constants, self._line)
        if op == "||=":
            self.constants.set_if_absent(name, constant)
        else:
            self.constants.set(name, constant)
        return MarkerResult(Marker.CONSTANT)

    def parse_directive(self, text: str) -> ParseResult:
        name, value = split_directive(text)
        if is_sass_import(name, value):
            if value is None:
                raise SassSyntaxError("Invalid import directive: a file name is required.", self._line)
            return NodeListResult(self.import_files(value), "import")
        return NodeResult(DirectiveNode(text=text))

    def parse_mixin_definition(self, line: Line) -> MarkerResult:
        name = line.text[1:].strip()
        if not name:
            raise SassSyntaxError(f"Invalid mixin definition: \"{line.text}\".", self._line)
        self.mixins.define(name, line.children)
        return MarkerResult(Marker.MIXIN)

    def parse_mixin_include(self, text: str) -> NodeListResult:
        """
        Expand `+name` into the mixin's nodes.

        The stored body is assembled again on every inclusion, against
        the constants in effect here. A mixin may not include itself,
        directly or through another mixin.
        """
        include_line = self._line
        name = text[1:].strip()
        body = self.mixins.include(name, include_line)
        if name in self._including:
            raise SassSyntaxError(f"Illegal recursion: mixin '{name}' includes itself.", include_line)

        container = RootNode()
        self._including.append(name)
        try:
            self.append_children(container, body, False)
        finally:
            self._including.pop()
        self._line = include_line
        return NodeListResult(container.children, "mixin")

    # =====================================================================
    # Imports
    # =====================================================================

    def import_files(self, files: str) -> List[Node]:
        """
        Import each comma-separated target, left to right.

        Every .sass target is compiled by a nested Engine seeded with
        copies of this engine's tables; afterwards this engine adopts the
        nested tables, so later targets and later lines see them.
        """
        import_line = self._line
        nodes: List[Node] = []

        for target in _IMPORT_SEPARATOR.split(files.strip()):
            try:
                path = find_file_to_import(target, self.options.load_paths)
            except OSError as e:
                raise SassSyntaxError(str(e), import_line) from e

            if path.endswith(CSS_EXTENSION):
                nodes.append(DirectiveNode(text=f"@import url({path})", line=import_line, filename=self.filename))
                continue

            try:
                template = read_file(path)
            except OSError as e:
                raise SassSyntaxError(f"File to import not found or unreadable: {target}.", import_line) from e

            logger.debug("Importing %s into %s", path, self.filename or "(sass)")
            engine = Engine(
                template,
                self.options.with_filename(path),
                constants=self.constants.copy(),
                mixins=self.mixins.copy(),
            )
            root = engine.to_tree()
            nodes.extend(root.children)
            self.constants = engine.constants
            self.mixins = engine.mixins

        return nodes


def render(template: str, options: Optional[EngineOptions] = None) -> str:
    """Compile a template string to CSS."""
    return Engine(template, options).render()


def compile_file(path: str, options: Optional[EngineOptions] = None) -> str:
    """
    Compile a .sass file to CSS.

    The file name is used for error attribution unless `options` already
    names one.
    """
    options = options or EngineOptions()
    if options.filename is None:
        options = options.with_filename(path)
    return Engine(read_file(path), options).render()


__all__ = ["Engine", "render", "compile_file"]

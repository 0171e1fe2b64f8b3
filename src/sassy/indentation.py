"""
Indentation handling (Layer 1: Raw Text → Nested Lines).

Two passes:
    1. tabulate() turns the template into a flat list of Lines, each with
       its indentation depth and source line number.
    2. build_line_tree() regroups the flat list into nested Lines using
       depth alone.

Syntax Notes:
    - Blank lines and lines starting with `//` are dropped, but still
      count towards line numbers
    - The first indented line fixes the indentation unit for the document
    - The unit may be spaces or tabs, never both
"""

import re
from typing import List, Optional, Tuple

from sassy.errors import SassSyntaxError
from sassy.model import Line

LINE_COMMENT = "//"

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_LEADING_WS_RE = re.compile(r"^\s*")


def human_indentation(indentation: str, was: bool = False) -> str:
    """
    Describe an indentation string for error messages.

    Examples:
        "    "      -> "4 spaces"
        "\\t"        -> "1 tab"
        "  " (was)  -> "2 spaces were"
    """
    if "\t" not in indentation:
        noun = "space"
    elif " " not in indentation:
        noun = "tab"
    else:
        return repr(indentation) + (" was" if was else "")

    singular = len(indentation) == 1
    suffix = ""
    if was:
        suffix = " was" if singular else " were"
    return f"{len(indentation)} {noun}{'' if singular else 's'}{suffix}"


def _split_lines(template: str) -> List[str]:
    return _NEWLINE_RE.split(template)


def tabulate(template: str) -> List[Line]:
    """
    Convert a template into a flat list of Lines.

    Args:
        template: Raw template text

    Returns:
        Lines in source order, with depth set and children empty

    Raises:
        SassSyntaxError: If the first line is indented, the indentation
            unit mixes tabs and spaces, or a line is not indented by a
            whole number of units
    """
    lines: List[Line] = []
    tab_str: Optional[str] = None
    first = True

    for index, raw in enumerate(_split_lines(template), start=1):
        if not raw.strip() or raw.startswith(LINE_COMMENT):
            continue

        line_tab_str = _LEADING_WS_RE.match(raw).group(0)
        if line_tab_str:
            if first:
                raise SassSyntaxError("Indenting at the beginning of the document is illegal.", index)
            if tab_str is None:
                tab_str = line_tab_str
                if " " in tab_str and "\t" in tab_str:
                    raise SassSyntaxError("Indentation can't use both tabs and spaces.", index)
        first = False

        if not line_tab_str:
            lines.append(Line(raw.strip(), 0, index))
            continue

        depth = len(line_tab_str) // len(tab_str)
        if tab_str * depth != line_tab_str:
            raise SassSyntaxError(
                f"Inconsistent indentation: {human_indentation(line_tab_str, True)} used for indentation, "
                f"but the rest of the document was indented using {human_indentation(tab_str)}.",
                index,
            )
        lines.append(Line(raw.strip(), depth, index))

    return lines


def build_line_tree(lines: List[Line], start: int = 0) -> Tuple[List[Line], int]:
    """
    Regroup a flat list of Lines into a tree.

    The depth of lines[start] is the base level. Lines at the base level
    are siblings; a run one level deeper becomes the children of the
    sibling before it; a shallower line ends the level.

    Args:
        lines: Output of tabulate()
        start: Index of the first line of this level

    Returns:
        (sibling lines at this level, index just after the consumed range)

    Raises:
        SassSyntaxError: If a line is indented more than one level deeper
            than the previous line
    """
    if start >= len(lines):
        return [], start

    base = lines[start].depth
    nodes: List[Line] = []
    i = start
    while i < len(lines) and lines[i].depth >= base:
        line = lines[i]
        if line.depth > base:
            if line.depth > base + 1:
                raise SassSyntaxError(
                    f"The line was indented {line.depth - base} levels deeper than the previous line.",
                    line.index,
                )
            nodes[-1].children, i = build_line_tree(lines, i)
        else:
            nodes.append(line)
            i += 1
    return nodes, i


def parse_lines(template: str) -> List[Line]:
    """Tokenize a template and return its top-level Lines."""
    roots, _ = build_line_tree(tabulate(template))
    return roots


__all__ = [
    "human_indentation",
    "tabulate",
    "build_line_tree",
    "parse_lines",
]

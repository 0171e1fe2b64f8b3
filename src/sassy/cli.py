"""
Command-line interface for sassy.

Compiles one .sass file to CSS, or dumps the compiled tree as JSON/YAML.
Output goes to stdout unless -o is given; errors and status go to stderr.

Exit codes:
    0  success
    1  syntax error, unreadable input, or invalid options
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from sassy.engine import Engine
from sassy.errors import SassSyntaxError
from sassy.importer import read_file
from sassy.options import (
    AttributeSyntax,
    EngineOptions,
    OutputStyle,
    load_options,
)
from sassy.serialization import tree_to_json, tree_to_yaml

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="sassy",
        description="Compile indented-syntax stylesheets (.sass) to CSS.",
    )
    parser.add_argument("input_file", help="Path to the .sass file to compile.")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the result to this file instead of stdout.",
    )
    parser.add_argument(
        "-t", "--style",
        choices=[s.value for s in OutputStyle],
        default=None,
        help="Output style (default: nested).",
    )
    parser.add_argument(
        "-I", "--load-path",
        dest="load_paths",
        action="append",
        default=None,
        help="Directory searched by @import. Repeatable; searched in order.",
    )
    parser.add_argument(
        "--attribute-syntax",
        choices=[s.value for s in AttributeSyntax],
        default=None,
        help="Accept only one attribute syntax (default: both).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file with engine options; command-line flags take precedence.",
    )
    parser.add_argument(
        "--tree",
        choices=["json", "yaml"],
        default=None,
        help="Print the compiled tree instead of CSS.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    return parser


def build_options(args: argparse.Namespace) -> EngineOptions:
    options = load_options(args.config) if args.config else EngineOptions()
    if args.style:
        options.style = OutputStyle(args.style)
    if args.load_paths:
        options.load_paths = list(args.load_paths)
    if args.attribute_syntax:
        options.attribute_syntax = AttributeSyntax(args.attribute_syntax)
    return options.with_filename(args.input_file)


def _format_error(err: SassSyntaxError) -> str:
    lines = [f"Syntax error on line {err.line} of {err.filename or '(sass)'}: {err.message}"]
    for entry in err.backtrace[1:]:
        lines.append(f"  imported from {entry}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = build_options(args)
        template = read_file(args.input_file)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine = Engine(template, options)
    try:
        if args.tree == "json":
            result = tree_to_json(engine.to_tree()) + "\n"
        elif args.tree == "yaml":
            result = tree_to_yaml(engine.to_tree())
        else:
            result = engine.render()
    except SassSyntaxError as err:
        print(_format_error(err), file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
        logger.info("Wrote %s", args.output)
    else:
        sys.stdout.write(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
sassy: a compiler for the indented stylesheet syntax.

Turns an indentation-structured template into a tree of rules,
attributes, comments and directives, resolving constants, mixins and
@import along the way, and renders the tree as CSS.

LAYERS:
-------
    indentation   raw text -> nested Lines
    engine        nested Lines -> stylesheet tree (with classifier,
                  symbols, constant, importer)
    backends      stylesheet tree -> CSS
    serialization stylesheet tree -> dict / JSON / YAML

Usage:
    from sassy.engine import Engine
    css = Engine(template).render()
"""

__version__ = "0.1.0"

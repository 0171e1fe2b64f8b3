"""
Serialization helpers for stylesheet trees.

Converts a node tree to an intermediate dict representation and from
there to JSON or YAML, and back. Used by the CLI's --tree option and for
inspecting what the engine produced.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from sassy.model import (
    AttrNode,
    CommentNode,
    DirectiveNode,
    Line,
    Node,
    RootNode,
    RuleNode,
)


def line_to_dict(line: Line) -> Dict[str, Any]:
    return {
        "text": line.text,
        "depth": line.depth,
        "index": line.index,
        "children": [line_to_dict(c) for c in line.children],
    }


def line_from_dict(d: Dict[str, Any]) -> Line:
    return Line(
        text=d["text"],
        depth=d.get("depth", 0),
        index=d.get("index", 0),
        children=[line_from_dict(c) for c in d.get("children", [])],
    )


def node_to_dict(node: Node) -> Dict[str, Any]:
    d: Dict[str, Any] = {"line": node.line, "filename": node.filename}
    if isinstance(node, RootNode):
        d["type"] = "root"
    elif isinstance(node, RuleNode):
        d["type"] = "rule"
        d["rules"] = list(node.rules)
    elif isinstance(node, AttrNode):
        d["type"] = "attr"
        d["name"] = node.name
        d["value"] = node.value
    elif isinstance(node, CommentNode):
        d["type"] = "comment"
        d["text"] = node.text
        d["output"] = node.output
        d["lines"] = [line_to_dict(line) for line in node.lines]
    elif isinstance(node, DirectiveNode):
        d["type"] = "directive"
        d["text"] = node.text
    else:
        raise TypeError(f"Unsupported Node type: {type(node)}")
    d["children"] = [node_to_dict(c) for c in node.children]
    return d


def node_from_dict(d: Dict[str, Any]) -> Node:
    t = d.get("type")
    common = {"line": d.get("line"), "filename": d.get("filename")}
    if t == "root":
        node: Node = RootNode(**common)
    elif t == "rule":
        node = RuleNode(rules=list(d.get("rules", [])), **common)
    elif t == "attr":
        node = AttrNode(name=d["name"], value=d.get("value", ""), **common)
    elif t == "comment":
        node = CommentNode(
            text=d.get("text", ""),
            output=d.get("output", True),
            lines=[line_from_dict(line) for line in d.get("lines", [])],
            **common,
        )
    elif t == "directive":
        node = DirectiveNode(text=d.get("text", ""), **common)
    else:
        raise TypeError(f"Unsupported node dict type: {t}")
    node.children = [node_from_dict(c) for c in d.get("children", [])]
    return node


def tree_to_json(root: Node) -> str:
    return json.dumps(node_to_dict(root), sort_keys=True, indent=2)


def tree_from_json(s: str) -> Node:
    return node_from_dict(json.loads(s))


def tree_to_yaml(root: Node) -> str:
    return yaml.safe_dump(node_to_dict(root), sort_keys=False)


def tree_from_yaml(s: str) -> Node:
    return node_from_dict(yaml.safe_load(s))

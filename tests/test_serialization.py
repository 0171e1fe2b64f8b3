"""
Tests for serialization and deserialization of stylesheet trees.

These tests ensure lossless JSON/YAML round-trip using the explicit
serialization functions in `sassy.serialization`.
"""

import json

import pytest
import yaml

from sassy.engine import Engine
from sassy.model import AttrNode, CommentNode, DirectiveNode, RootNode, RuleNode
from sassy.options import EngineOptions
from sassy.serialization import (
    node_from_dict,
    node_to_dict,
    tree_from_json,
    tree_from_yaml,
    tree_to_json,
    tree_to_yaml,
)


SAMPLE = "\n".join([
    "/* header",
    "  second line",
    "@import url(reset.css)",
    "a,",
    "b",
    "  :color red",
    "  :font",
    "    :family serif",
    "  c",
    "    :width 1px",
])


def build_sample_tree() -> RootNode:
    return Engine(SAMPLE, EngineOptions(filename="main.sass")).to_tree()


def assert_same_tree(a, b):
    assert type(a) is type(b)
    assert node_to_dict(a) == node_to_dict(b)


class TestDictShape:
    def test_root(self):
        d = node_to_dict(build_sample_tree())
        assert d["type"] == "root"
        assert d["filename"] == "main.sass"
        assert [c["type"] for c in d["children"]] == ["comment", "directive", "rule"]

    def test_rule(self):
        rule = node_to_dict(build_sample_tree())["children"][2]
        assert rule["rules"] == ["a", "b"]
        assert rule["line"] == 4
        assert [c["type"] for c in rule["children"]] == ["attr", "attr", "rule"]

    def test_attribute_namespace(self):
        font = node_to_dict(build_sample_tree())["children"][2]["children"][1]
        assert (font["name"], font["value"]) == ("font", "")
        assert font["children"][0]["name"] == "family"

    def test_comment_lines(self):
        comment = node_to_dict(build_sample_tree())["children"][0]
        assert comment["text"] == "/* header"
        assert comment["output"] is True
        assert comment["lines"][0]["text"] == "second line"
        assert comment["lines"][0]["index"] == 2

    def test_unknown_type(self):
        with pytest.raises(TypeError, match="Unsupported node dict type"):
            node_from_dict({"type": "mystery"})


class TestJSONRoundTrip:
    def test_round_trip(self):
        root = build_sample_tree()
        restored = tree_from_json(tree_to_json(root))
        assert_same_tree(root, restored)

    def test_node_types_restored(self):
        restored = tree_from_json(tree_to_json(build_sample_tree()))
        comment, directive, rule = restored.children
        assert isinstance(comment, CommentNode)
        assert isinstance(directive, DirectiveNode)
        assert isinstance(rule, RuleNode)
        assert isinstance(rule.children[0], AttrNode)
        assert comment.lines[0].text == "second line"

    def test_output_is_plain_json(self):
        data = json.loads(tree_to_json(build_sample_tree()))
        assert data["children"][1]["text"] == "@import url(reset.css)"


class TestYAMLRoundTrip:
    def test_round_trip(self):
        root = build_sample_tree()
        restored = tree_from_yaml(tree_to_yaml(root))
        assert_same_tree(root, restored)

    def test_output_is_safe_yaml(self):
        data = yaml.safe_load(tree_to_yaml(build_sample_tree()))
        assert data["type"] == "root"
        assert data["children"][2]["rules"] == ["a", "b"]

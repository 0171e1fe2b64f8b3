"""
Tests for @import resolution.

Import fixtures are written to pytest's tmp_path and found through
load_paths.
"""

import os

import pytest

import sassy.engine
from sassy.engine import Engine
from sassy.errors import SassSyntaxError
from sassy.importer import find_file_to_import, find_full_path
from sassy.model import AttrNode, DirectiveNode, RuleNode
from sassy.options import EngineOptions


def write(directory, name, content):
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return str(path)


def compile_tree(template, tmp_path, **options):
    options.setdefault("load_paths", [str(tmp_path)])
    return Engine(template, EngineOptions(**options)).to_tree()


@pytest.fixture
def no_reads(monkeypatch):
    def fail(path):
        raise AssertionError(f"unexpected read of {path}")

    monkeypatch.setattr(sassy.engine, "read_file", fail)


class TestFindFileToImport:
    def test_css_is_returned_unchanged(self, tmp_path):
        assert find_file_to_import("reset.css", [str(tmp_path)]) == "reset.css"

    def test_partial_is_found(self, tmp_path):
        path = write(tmp_path, "_x.sass", "")
        assert find_file_to_import("x", [str(tmp_path)]) == path

    def test_partial_preferred_over_bare_name(self, tmp_path):
        partial = write(tmp_path, "_x.sass", "")
        write(tmp_path, "x.sass", "")
        assert find_file_to_import("x.sass", [str(tmp_path)]) == partial

    def test_load_paths_searched_in_order(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        bare = write(first, "x.sass", "")
        write(second, "_x.sass", "")
        assert find_file_to_import("x", [str(first), str(second)]) == bare

    def test_subdirectory_partial(self, tmp_path):
        (tmp_path / "lib").mkdir()
        path = write(tmp_path / "lib", "_grid.sass", "")
        assert find_full_path(os.path.join("lib", "grid.sass"), [str(tmp_path)]) == path

    def test_unresolved_sass_fails(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File to import not found or unreadable: nope.sass."):
            find_file_to_import("nope.sass", [str(tmp_path)])

    def test_unresolved_bare_name_falls_back_to_css(self, tmp_path):
        assert find_file_to_import("nope", [str(tmp_path)]) == "nope.css"


class TestImportDirective:
    def test_css_import_is_passthrough(self, tmp_path, no_reads):
        root = compile_tree("@import x.css", tmp_path)
        directive = root.children[0]
        assert isinstance(directive, DirectiveNode)
        assert directive.text == "@import url(x.css)"
        assert directive.line == 1

    def test_plain_css_import_forms_are_untouched(self, tmp_path, no_reads):
        root = compile_tree('@import url(a.css)\n@import "b.css"', tmp_path)
        assert [d.text for d in root.children] == ["@import url(a.css)", '@import "b.css"']

    def test_unresolved_bare_name_is_passthrough(self, tmp_path):
        root = compile_tree("@import missing", tmp_path)
        assert root.children[0].text == "@import url(missing.css)"

    def test_unresolved_sass_fails_at_import_line(self, tmp_path):
        with pytest.raises(SassSyntaxError, match="File to import not found or unreadable: missing.sass.") as info:
            compile_tree("a\n  :x y\n@import missing.sass", tmp_path)
        assert info.value.line == 3

    def test_partial_contents_are_spliced(self, tmp_path):
        path = write(tmp_path, "_x.sass", "a\n  :color red")
        root = compile_tree("@import x\nb\n  :x y", tmp_path)
        assert [n.rules for n in root.children] == [["a"], ["b"]]
        assert root.children[0].filename == path
        assert root.children[1].filename is None

    def test_definitions_visible_after_import(self, tmp_path):
        write(tmp_path, "_vars.sass", "!main = #00ff00\n=box\n  :border 1px")
        root = compile_tree("@import vars\na\n  :color= !main\n  +box", tmp_path)
        assert [(a.name, a.value) for a in root.children[0].children] == [
            ("color", "#00ff00"),
            ("border", "1px"),
        ]

    def test_import_sees_importer_definitions(self, tmp_path):
        write(tmp_path, "child.sass", "a\n  :color= !c")
        root = compile_tree("!c = red\n@import child", tmp_path)
        assert root.children[0].children[0].value == "red"

    def test_conditional_defaults_in_import(self, tmp_path):
        write(tmp_path, "_defaults.sass", "!c ||= blue\n!d ||= green")
        engine = Engine("!c = red\n@import defaults", EngineOptions(load_paths=[str(tmp_path)]))
        engine.to_tree()
        assert engine.constants.get("c") == "red"
        assert engine.constants.get("d") == "green"

    def test_targets_processed_left_to_right(self, tmp_path):
        write(tmp_path, "one.sass", "!w = 10px")
        write(tmp_path, "two.sass", "!h = !w * 2")
        engine = Engine("@import one, two\na\n  :height= !h", EngineOptions(load_paths=[str(tmp_path)]))
        root = engine.to_tree()
        assert root.children[0].children[0].value == "20px"

    def test_nested_imports_thread_tables(self, tmp_path):
        write(tmp_path, "_inner.sass", "!deep = 3px")
        write(tmp_path, "_outer.sass", "@import inner")
        root = compile_tree("@import outer\na\n  :margin= !deep", tmp_path)
        assert root.children[0].children[0].value == "3px"

    def test_directives_in_imported_file_allowed_at_root(self, tmp_path):
        write(tmp_path, "_x.sass", "@import reset.css\n@media print\n  a\n    :x y")
        root = compile_tree("@import x", tmp_path)
        assert [type(n) for n in root.children] == [DirectiveNode, DirectiveNode]

    def test_nothing_beneath_imports(self, tmp_path):
        write(tmp_path, "_x.sass", "a\n  :x y")
        with pytest.raises(SassSyntaxError, match="Nothing may be nested beneath import directives") as info:
            compile_tree("@import x\n  b", tmp_path)
        assert info.value.line == 2


class TestImportRootness:
    """Expanded elements are checked against the rootness of the @import line."""

    def test_nested_import_of_rules_is_accepted(self, tmp_path):
        write(tmp_path, "_x.sass", "b\n  :x y")
        root = compile_tree("a\n  @import x", tmp_path)
        assert isinstance(root.children[0].children[0], RuleNode)

    def test_nested_css_import_fails(self, tmp_path):
        with pytest.raises(SassSyntaxError, match="Directives may only be used at the root") as info:
            compile_tree("a\n  @import x.css", tmp_path)
        assert info.value.line == 2

    def test_nested_import_expanding_to_attributes(self, tmp_path):
        write(tmp_path, "_props.sass", "=m\n  :x y\n+m")
        root = compile_tree("a\n  @import props", tmp_path)
        assert isinstance(root.children[0].children[0], AttrNode)


class TestImportErrors:
    def test_error_identifies_import_chain(self, tmp_path):
        child = write(tmp_path, "_child.sass", "a\n  !x = 1")
        with pytest.raises(SassSyntaxError, match="Constants may only be declared") as info:
            compile_tree("b\n  :x y\n@import child", tmp_path, filename="main.sass")
        err = info.value
        assert err.filename == child
        assert err.line == 2
        assert err.backtrace == [f"{child}:2", "main.sass:3"]

    def test_three_level_chain(self, tmp_path):
        inner = write(tmp_path, "_inner.sass", "  bad")
        outer = write(tmp_path, "_outer.sass", "\n@import inner")
        with pytest.raises(SassSyntaxError) as info:
            compile_tree("@import outer", tmp_path, filename="main.sass")
        assert info.value.backtrace == [f"{inner}:1", f"{outer}:2", "main.sass:1"]

    def test_read_failure_is_wrapped(self, tmp_path, monkeypatch):
        write(tmp_path, "_x.sass", "a\n  :x y")

        def fail(path):
            raise PermissionError(path)

        monkeypatch.setattr(sassy.engine, "read_file", fail)
        with pytest.raises(SassSyntaxError, match="File to import not found or unreadable: x.") as info:
            compile_tree("@import x", tmp_path)
        assert info.value.line == 1
        assert isinstance(info.value.__cause__, PermissionError)

# jatsmyst — JATS to MyST conversion for biomedical literature
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.


"""Tests for jatsmyst.tree."""

import xml.etree.ElementTree as ET

import pytest

from jatsmyst.tree import (
    REMOVE,
    Keep,
    ReplaceWithChildren,
    copy_node,
    label_attrs,
    lift_nodes,
    lift_type,
    normalize_label,
    parse_xml,
    remove_nodes,
    rewrite,
    select,
    select_all,
    to_text,
    to_xml,
    u,
)


def _sample():
    return u("root", children=[
        u("p", {"id": "p1"}, [
            u("text", value="Hello "),
            u("bold", children=[u("text", value="world")]),
        ]),
        u("comment", value="ignored"),
        u("sec", children=[u("p", {"id": "p2"}, [u("text", value="Nested")])]),
    ])


class TestNodes:
    def test_u_builds_nodes(self):
        assert u("text", value="x") == {"type": "text", "value": "x"}
        assert u("block", {"part": "a"}, []) == {"type": "block", "part": "a", "children": []}

    def test_to_text_skips_comments(self):
        assert to_text(_sample()) == "Hello worldNested"
        assert to_text(None) == ""
        assert to_text([u("text", value="a"), u("text", value="b")]) == "ab"

    def test_copy_node_is_deep(self):
        tree = _sample()
        copied = copy_node(tree)
        copied["children"][0]["id"] = "changed"
        assert tree["children"][0]["id"] == "p1"

    def test_select_all_document_order(self):
        ids = [n["id"] for n in select_all(_sample(), "p")]
        assert ids == ["p1", "p2"]

    def test_select_with_attrs_and_tuple_types(self):
        tree = _sample()
        assert select(tree, "p", {"id": "p2"})["id"] == "p2"
        assert [n["type"] for n in select_all(tree, ("bold", "sec"))] == ["bold", "sec"]
        assert select(tree, "p", {"id": "missing"}) is None

    def test_select_include_self(self):
        tree = _sample()
        assert select(tree, "root") is tree
        assert select(tree, "root", include_self=False) is None

    def test_normalize_label(self):
        assert normalize_label("  Fig \n 1 ") == ("Fig 1", "fig 1")
        assert normalize_label("") is None
        assert normalize_label("   ") is None
        assert label_attrs("B1") == {"label": "B1", "identifier": "b1"}
        assert label_attrs(None) == {}


class TestRewrite:
    def test_remove(self):
        tree = _sample()
        assert rewrite(tree, lambda n: REMOVE if n["type"] == "comment" else Keep(n))
        assert [c["type"] for c in tree["children"]] == ["p", "sec"]

    def test_no_change_returns_false(self):
        tree = _sample()
        assert rewrite(tree, Keep) is False

    def test_replace_with_children_revisits_lifted(self):
        tree = u("root", children=[
            u("sec", children=[u("sec", children=[u("p", children=[])])]),
        ])
        lift_type(tree, "sec")
        assert tree == {"type": "root", "children": [{"type": "p", "children": []}]}

    def test_keep_replacement(self):
        tree = _sample()
        rewrite(tree, lambda n: Keep({**n, "type": "paragraph"}) if n["type"] == "p" else Keep(n))
        assert len(select_all(tree, "paragraph")) == 2
        assert select(tree, "p") is None

    def test_remove_and_lift_by_identity(self):
        tree = _sample()
        first, second = select_all(tree, "p")
        remove_nodes(tree, [first])
        assert select_all(tree, "p") == [second]
        lift_nodes(tree, [select(tree, "sec")])
        assert tree["children"][-1] is second

    def test_replace_with_empty_children(self):
        tree = _sample()
        rewrite(tree, lambda n: ReplaceWithChildren([]) if n["type"] == "sec" else Keep(n))
        assert select(tree, "sec") is None


class TestXml:
    def test_parse_prefixes_and_type_attribute(self):
        tree = parse_xml(
            '<article xmlns:xlink="http://www.w3.org/1999/xlink" '
            'xmlns:mml="http://www.w3.org/1998/Math/MathML">'
            '<ext-link xlink:href="https://x.org" type="uri">x</ext-link>'
            "<mml:math><mml:mi>a</mml:mi></mml:math></article>"
        )
        link = select(tree, "ext-link")
        assert link["xlink:href"] == "https://x.org"
        assert link["_type"] == "uri"
        assert select(tree, "mml:math") is not None

    def test_whitespace_between_elements_dropped(self):
        tree = parse_xml("<sec>\n  <p>a</p>\n  <p>b</p>\n</sec>")
        assert [c["type"] for c in tree["children"]] == ["p", "p"]

    def test_trailing_indent_stripped(self):
        tree = parse_xml("<p>text\n    </p>")
        assert tree["children"] == [{"type": "text", "value": "text"}]

    def test_comments_kept(self):
        tree = parse_xml("<p><!-- note -->x</p>")
        assert tree["children"][0] == {"type": "comment", "value": " note "}

    def test_html_entities(self):
        tree = parse_xml("<p>a&nbsp;b</p>")
        assert to_text(tree) == "a\u00a0b"

    def test_html_entities_after_xml_declaration(self):
        tree = parse_xml('<?xml version="1.0" encoding="utf-8"?>\n<p>x&mdash;y</p>')
        assert tree["type"] == "p"
        assert to_text(tree) == "x\u2014y"

    def test_malformed_raises(self):
        with pytest.raises(ET.ParseError):
            parse_xml("<p>unclosed")

    def test_to_xml(self):
        tree = parse_xml('<p id="a">x<b>y</b>z</p>')
        assert to_xml(tree) == '<p id="a">x<b>y</b>z</p>'

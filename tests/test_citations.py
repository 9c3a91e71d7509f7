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


"""Tests for in-text citation grouping."""

import copy

from jatsmyst.convert.citations import (
    MAX_PASSES,
    combine_adjacent_cite_groups,
    inline_citations_transform,
    remove_cite_children,
)
from jatsmyst.tree import to_text, u

ORDER = ["a", "b", "c", "d"]


def cite(label, **attrs):
    return u("cite", {"label": label, "identifier": label, **attrs})


def text(value):
    return u("text", value=value)


def paragraph(*children):
    return u("paragraph", children=list(children))


def types(node):
    return [c["type"] for c in node["children"]]


def labels(group):
    return [c["label"] for c in group["children"]]


class TestRules:
    def test_cite_children_removed(self):
        tree = paragraph(u("cite", {"label": "a"}, [text("[1]")]))
        assert remove_cite_children(tree)
        assert "children" not in tree["children"][0]
        assert not remove_cite_children(tree)

    def test_adjacent_groups_combined(self):
        tree = paragraph(
            u("citeGroup", {"kind": "narrative"}, [cite("a")]),
            u("citeGroup", {"kind": "parenthetical"}, [cite("b")]),
        )
        assert combine_adjacent_cite_groups(tree)
        assert types(tree) == ["citeGroup"]
        assert tree["children"][0]["kind"] == "narrative"
        assert labels(tree["children"][0]) == ["a", "b"]


class TestInlineCitations:
    def test_standalone_cite_wrapped(self):
        tree = paragraph(text("See "), cite("a", kind="narrative"))
        inline_citations_transform(tree, ORDER)
        group = tree["children"][1]
        assert group["type"] == "citeGroup"
        assert group["kind"] == "narrative"
        assert "label" not in group
        assert labels(group) == ["a"]

    def test_separators_merge(self):
        tree = paragraph(cite("a"), text(", "), cite("b"), text(" and "), cite("c"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup"]
        assert labels(tree["children"][0]) == ["a", "b", "c"]

    def test_prose_is_not_a_separator(self):
        tree = paragraph(cite("a"), text(" was followed by "), cite("b"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup", "text", "citeGroup"]

    def test_range_expanded(self):
        tree = paragraph(cite("a"), text("–"), cite("d"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup"]
        assert labels(tree["children"][0]) == ["a", "b", "c", "d"]

    def test_hyphen_range(self):
        tree = paragraph(cite("b"), text(" - "), cite("c"))
        inline_citations_transform(tree, ORDER)
        assert labels(tree["children"][0]) == ["b", "c"]

    def test_reversed_range_left_alone(self):
        tree = paragraph(cite("d"), text("–"), cite("a"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup", "text", "citeGroup"]

    def test_em_dash_is_not_a_range(self):
        tree = paragraph(cite("a"), text("—"), cite("d"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup", "text", "citeGroup"]

    def test_unknown_label_not_expanded(self):
        tree = paragraph(cite("a"), text("-"), cite("z"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup", "text", "citeGroup"]

    def test_parentheses_removed(self):
        tree = paragraph(text("Known ("), cite("a"), text(", "), cite("b"), text(")."))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["text", "citeGroup", "text"]
        group = tree["children"][1]
        assert group["kind"] == "parenthetical"
        assert all(c["kind"] == "parenthetical" for c in group["children"])
        assert to_text(tree) == "Known ."

    def test_brackets_fully_consumed(self):
        tree = paragraph(text("["), cite("a"), text("]"))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["citeGroup"]

    def test_superscript_lifted(self):
        tree = paragraph(text("Shown"), u("superscript", children=[cite("a")]))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["text", "citeGroup"]
        assert tree["children"][0]["value"] == "Shown "

    def test_superscript_with_other_content_kept(self):
        tree = paragraph(u("superscript", children=[text("*"), cite("a")]))
        inline_citations_transform(tree, ORDER)
        assert types(tree) == ["superscript"]

    def test_space_before_cite(self):
        tree = paragraph(text("word"), cite("a"), text(" next"))
        inline_citations_transform(tree, ORDER)
        assert tree["children"][0]["value"] == "word "

    def test_fixed_point(self):
        tree = paragraph(text("Lipids ("), cite("a"), text("-"), cite("c"), text(")"))
        assert inline_citations_transform(tree, ORDER) < MAX_PASSES
        settled = copy.deepcopy(tree)
        assert inline_citations_transform(tree, ORDER) == 1
        assert tree == settled
        assert types(tree) == ["text", "citeGroup"]
        assert labels(tree["children"][1]) == ["a", "b", "c"]

    def test_nested_groups_flattened(self):
        tree = paragraph(u("citeGroup", {"kind": "parenthetical"}, [
            u("citeGroup", {"kind": "parenthetical"}, [cite("a"), cite("b")]),
            cite("c"),
        ]))
        inline_citations_transform(tree, ORDER)
        assert labels(tree["children"][0]) == ["a", "b", "c"]

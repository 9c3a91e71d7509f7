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


"""Tests for the inline clean-up and relocation passes."""

from jatsmyst.convert.relocation import (
    back_to_body_transform,
    float_to_end_transform,
    table_footnotes_to_legend,
)
from jatsmyst.convert.typography import (
    admonition_transform,
    citation_to_mixed_citation,
    fig_caption_title_transform,
    typography_transform,
)
from jatsmyst.tree import parse_xml, select, select_all, to_text, u


def _types(node):
    return [c["type"] for c in node.get("children", [])]


class TestTypography:
    def test_inline_aliases(self):
        tree = parse_xml("<p><b>a</b><i>b</i><em>c</em><strong>d</strong><u>e</u></p>")
        assert typography_transform(tree) == 5
        assert _types(tree) == ["bold", "italic", "italic", "bold", "underline"]

    def test_nbsp_only_text_becomes_space(self):
        tree = u("p", children=[u("text", value="\u00a0\u00a0"), u("text", value="a\u00a0b")])
        typography_transform(tree)
        assert [c["value"] for c in tree["children"]] == [" ", "a\u00a0b"]

    def test_break_in_title(self):
        tree = parse_xml("<sec><title>Line one<break/>line two</title></sec>")
        typography_transform(tree)
        assert to_text(select(tree, "title")) == "Line one line two"
        assert select(tree, "break") is None


class TestAdmonition:
    def test_caption_title(self):
        tree = parse_xml(
            "<body><boxed-text><caption><title>Key points</title></caption><p>x</p>"
            "</boxed-text></body>"
        )
        assert admonition_transform(tree) == 1
        box = select(tree, "boxed-text")
        assert _types(box) == ["admonitionTitle", "p"]
        assert to_text(box["children"][0]) == "Key points"

    def test_caption_with_content_kept(self):
        tree = parse_xml(
            "<boxed-text><caption><title>Box 1</title><p>Legend</p></caption><p>x</p>"
            "</boxed-text>"
        )
        admonition_transform(tree)
        assert _types(tree) == ["admonitionTitle", "caption", "p"]

    def test_bare_title(self):
        tree = parse_xml("<boxed-text><label>Box 1</label><title>Note</title><p>x</p></boxed-text>")
        admonition_transform(tree)
        assert _types(tree) == ["label", "admonitionTitle", "p"]

    def test_untitled_box_unchanged(self):
        tree = parse_xml("<boxed-text><p>x</p></boxed-text>")
        assert admonition_transform(tree) == 0


class TestFigures:
    def test_caption_title_hoisted(self):
        tree = parse_xml(
            '<fig id="F1"><label>Figure 1</label><caption><title>Cells.</title>'
            "<p>More.</p></caption></fig>"
        )
        assert fig_caption_title_transform(tree) == 1
        assert _types(tree) == ["title", "label", "caption"]
        assert _types(select(tree, "caption")) == ["p"]

    def test_table_wrap_caption_title_hoisted(self):
        tree = parse_xml("<table-wrap><caption><title>Counts.</title></caption></table-wrap>")
        assert fig_caption_title_transform(tree) == 1
        assert tree["children"][0]["type"] == "title"

    def test_citation_to_mixed_citation(self):
        tree = parse_xml("<ref><citation>Old style</citation></ref>")
        assert citation_to_mixed_citation(tree) == 1
        assert _types(tree) == ["mixed-citation"]


class TestRelocation:
    def test_back_to_body_copies(self):
        article = parse_xml(
            "<article><body><p>x</p></body><back>"
            "<ack><p>Thanks</p></ack><ref-list><ref id='r1'/></ref-list>"
            "<fn-group><fn id='f1'><p>n</p></fn></fn-group></back></article>"
        )
        body, back = select(article, "body"), select(article, "back")
        assert back_to_body_transform(body, back) == 2
        assert _types(body) == ["p", "hr", "ack", "fn-group"]
        assert _types(back) == ["ack", "ref-list", "fn-group"]
        assert body["children"][2] is not back["children"][0]

    def test_back_to_body_without_back(self):
        body = parse_xml("<body><p>x</p></body>")
        assert back_to_body_transform(body, None) == 0
        assert _types(body) == ["p"]

    def test_float_to_end(self):
        body = parse_xml(
            '<body><sec><supplementary-material id="S1" position="float"><p>s</p>'
            "</supplementary-material><p>x</p></sec><p>y</p></body>"
        )
        assert float_to_end_transform(body) == 1
        assert _types(body) == ["sec", "p", "hr", "supplementary-material"]
        assert "position" not in body["children"][-1]
        assert _types(body["children"][0]) == ["p"]

    def test_unreferenced_table_footnotes_become_paragraphs(self):
        tree = u("root", children=[
            u("paragraph", children=[u("footnoteReference", {"identifier": "t1"})]),
            u("legend", children=[
                u("footnoteDefinition", {"identifier": "t1"}, []),
                u("footnoteDefinition", {"identifier": "t2"}, []),
            ]),
        ])
        assert table_footnotes_to_legend(tree) == 1
        legend = select(tree, "legend")
        assert _types(legend) == ["footnoteDefinition", "paragraph"]
        assert len(select_all(tree, "footnoteDefinition")) == 1

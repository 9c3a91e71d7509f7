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


"""Tests for abbreviation extraction."""

import pytest

from jatsmyst.convert.abbreviations import (
    abbreviation_footnote_transform,
    abbreviation_section_transform,
    abbreviations_from_text,
    abbreviations_from_tree,
    parse_abbreviations,
)
from jatsmyst.jats.models import Frontmatter
from jatsmyst.tree import select_all, u


def section(title, body):
    return u("block", children=[
        u("heading", {"depth": 1}, [u("text", value=title)]),
        u("paragraph", children=[u("text", value=body)]),
    ])


def footnote(identifier, body):
    return u("footnoteDefinition", {"identifier": identifier, "label": identifier}, [
        u("paragraph", children=[u("text", value=body)]),
    ])


class TestParseAbbreviations:
    def test_pairs(self):
        text = "ACC1, acetyl-CoA carboxylase-1; FASN: fatty acid synthase."
        assert parse_abbreviations(text) == {
            "ACC1": "acetyl-CoA carboxylase-1",
            "FASN": "fatty acid synthase",
        }

    @pytest.mark.parametrize("text", [
        "ACC1 acetyl-CoA carboxylase-1",
        "ACC1, acetyl, CoA carboxylase",
        "AC C1, acetyl-CoA carboxylase-1",
    ])
    def test_invalid_entry(self, text):
        assert parse_abbreviations(text) is None


class TestSectionTransform:
    def test_section_moved_to_frontmatter(self):
        tree = u("root", children=[
            section("Abbreviations", "ACC1, acetyl-CoA carboxylase-1; FASN, fatty acid synthase."),
            section("Methods", "We did things."),
        ])
        frontmatter = Frontmatter()
        assert abbreviation_section_transform(tree, frontmatter) == 1
        assert frontmatter.abbreviations == {
            "ACC1": "acetyl-CoA carboxylase-1",
            "FASN": "fatty acid synthase",
        }
        assert len(tree["children"]) == 1

    def test_unparseable_section_kept(self):
        tree = u("root", children=[
            section("Abbreviations", "ACC1, acetyl-CoA carboxylase-1; we also used others."),
        ])
        frontmatter = Frontmatter()
        assert abbreviation_section_transform(tree, frontmatter) == 0
        assert frontmatter.abbreviations == {}
        assert len(tree["children"]) == 1

    def test_existing_entries_win(self):
        tree = u("root", children=[section("Abbreviations", "FASN, fatty acid synthetase")])
        frontmatter = Frontmatter(abbreviations={"FASN": "fatty acid synthase"})
        abbreviation_section_transform(tree, frontmatter)
        assert frontmatter.abbreviations == {"FASN": "fatty acid synthase"}


class TestFootnoteTransform:
    def test_unreferenced_footnote_moved(self):
        tree = u("root", children=[
            u("paragraph", children=[u("text", value="Body")]),
            footnote("fn1", "Abbreviations: ROS, reactive oxygen species."),
        ])
        frontmatter = Frontmatter()
        assert abbreviation_footnote_transform(tree, frontmatter) == 1
        assert frontmatter.abbreviations == {"ROS": "reactive oxygen species"}
        assert select_all(tree, "footnoteDefinition") == []

    def test_referenced_footnote_kept(self):
        tree = u("root", children=[
            u("paragraph", children=[u("footnoteReference", {"identifier": "fn1"})]),
            footnote("fn1", "Abbreviations: ROS, reactive oxygen species."),
        ])
        frontmatter = Frontmatter()
        assert abbreviation_footnote_transform(tree, frontmatter) == 0
        assert frontmatter.abbreviations == {}

    def test_other_footnotes_kept(self):
        tree = u("root", children=[footnote("fn2", "Funded by a grant.")])
        assert abbreviation_footnote_transform(tree, Frontmatter()) == 0
        assert len(tree["children"]) == 1


class TestDetection:
    def test_parenthesised_abbreviation(self):
        text = "Lipogenesis is driven by fatty acid synthase (FASN) in cells."
        assert abbreviations_from_text(text) == {"FASN": "fatty acid synthase"}

    def test_short_words_skipped(self):
        text = "We measured reactive species of oxygen (RSO) levels."
        assert abbreviations_from_text(text) == {"RSO": "reactive species of oxygen"}

    def test_no_match(self):
        assert abbreviations_from_text("Results were clear (see Table 1).") == {}

    def test_from_tree(self):
        tree = u("root", children=[
            u("paragraph", children=[u("text", value="Cells use acetyl carboxylase (AC).")]),
        ])
        frontmatter = Frontmatter()
        assert abbreviations_from_tree(tree, frontmatter) == 1
        assert frontmatter.abbreviations == {"AC": "acetyl carboxylase"}

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


"""Section flattening and heading depth assignment.

JATS nests ``sec`` elements arbitrarily deep.  The output tree is flat:
each top-level section becomes a ``block`` and the titles of nested
sections become ``heading`` nodes whose ``depth`` records the original
nesting level.
"""

from __future__ import annotations

import logging
from typing import Literal

from jatsmyst.tree import (
    GenericNode,
    children_of,
    lift_type,
    remove_nodes,
    rewrite,
    select_all,
    to_text,
    u,
)
from jatsmyst.tree.rewrite import Keep, ReplaceWithChildren

logger = logging.getLogger(__name__)

SECTION_TYPES = ("sec", "ack", "app")

SECTION_PARTS = {
    "ack": "acknowledgments",
    "app": "appendix",
}

TitleStyle = Literal["heading", "strong"]


def _label_sections(tree: GenericNode, depth: int, title_style: TitleStyle) -> None:
    for sec in children_of(tree):
        if sec.get("type") not in SECTION_TYPES:
            continue
        children = children_of(sec)
        # Section labels ("1.", "2.3") are not carried over
        if children and children[0].get("type") == "label":
            children = children[1:]
        first = children[0] if children else None
        if first is not None and first.get("type") == "title":
            if sec["type"] == "ack" and to_text(first).lower().startswith("ack"):
                children = children[1:]
            elif title_style == "strong":
                first["type"] = "p"
                first["children"] = [u("bold", children=children_of(first))]
            else:
                first["type"] = "heading"
                if sec.get("id"):
                    first["id"] = sec["id"]
                first["depth"] = depth
        if "children" in sec:
            sec["children"] = children
        if sec["type"] in SECTION_PARTS:
            sec["part"] = SECTION_PARTS[sec["type"]]
        _label_sections(sec, depth + 1, title_style)


def block_nesting_transform(tree: GenericNode) -> None:
    """Wrap runs of top-level non-block children into ``block`` nodes."""
    nested: list[GenericNode] = []
    pending: GenericNode | None = None
    for child in children_of(tree):
        if child.get("type") == "block":
            pending = None
            nested.append(child)
            continue
        if pending is None:
            pending = u("block", children=[])
            nested.append(pending)
        pending["children"].append(child)
    tree["children"] = nested


def section_transform(tree: GenericNode, title_style: TitleStyle = "heading") -> None:
    """Label, then flatten, the sections directly below *tree*.

    Titles become headings (or bold paragraphs with ``title_style="strong"``),
    top-level sections become blocks and nested sections are lifted into
    them.  Sections without a recognisable title pass through unchanged.
    """
    lift_type(tree, "app-group")
    _label_sections(tree, 1, title_style)
    for child in children_of(tree):
        if child.get("type") in SECTION_TYPES:
            child["type"] = "block"
    rewrite(
        tree,
        lambda n: (
            ReplaceWithChildren(children_of(n)) if n.get("type") in SECTION_TYPES else Keep(n)
        ),
    )
    block_nesting_transform(tree)


def data_availability_transform(tree: GenericNode) -> int:
    """Drop "Data availability" titles from data-availability sections."""
    titles = [
        title
        for sec in select_all(tree, "sec", {"sec-type": "data-availability"})
        for title in select_all(sec, "title")
        if to_text(title).lower() == "data availability"
    ]
    remove_nodes(tree, titles)
    return len(titles)

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


"""Inline clean-ups applied before emission.

These passes map publisher-specific markup onto the element kinds the
emitter understands.
"""

from __future__ import annotations

import logging

from jatsmyst.tree import (
    GenericNode,
    children_of,
    copy_node,
    remove_nodes,
    select,
    select_all,
    u,
    walk,
)

logger = logging.getLogger(__name__)

# HTML-ish inline tags some publishers use in place of JATS elements
INLINE_ALIASES = {
    "b": "bold",
    "strong": "bold",
    "i": "italic",
    "em": "italic",
    "u": "underline",
}

NBSP = "\u00a0"


def typography_transform(tree: GenericNode) -> int:
    """Normalise inline aliases, non-breaking spaces and breaks in titles."""
    changed = 0
    for node, _ in walk(tree):
        node_type = node.get("type")
        if node_type in INLINE_ALIASES:
            node["type"] = INLINE_ALIASES[node_type]
            changed += 1
        elif node_type == "text":
            value = node.get("value") or ""
            if value and not value.strip(NBSP):
                node["value"] = " "
                changed += 1
    for title in select_all(tree, "title"):
        for index, child in enumerate(children_of(title)):
            if child.get("type") == "break":
                title["children"][index] = u("text", value=" ")
                changed += 1
    return changed


def _significant_children(node: GenericNode) -> list[GenericNode]:
    return [
        child
        for child in children_of(node)
        if child.get("type") not in ("label", "comment")
        and not (child.get("type") == "text" and not (child.get("value") or "").strip())
    ]


def admonition_transform(tree: GenericNode) -> int:
    """Give titled ``boxed-text`` an ``admonitionTitle`` first child."""
    converted = 0
    for box in select_all(tree, "boxed-text"):
        significant = _significant_children(box)
        first = significant[0] if significant else None
        if first is None:
            continue
        if first.get("type") == "title":
            first["type"] = "admonitionTitle"
            converted += 1
            continue
        if first.get("type") != "caption":
            continue
        title = next((c for c in children_of(first) if c.get("type") == "title"), None)
        if title is None:
            continue
        remove_nodes(first, [title])
        doomed = [first] if not _significant_children(first) else []
        remove_nodes(box, doomed)
        box["children"] = [u("admonitionTitle", children=children_of(title)), *children_of(box)]
        converted += 1
    return converted


def fig_caption_title_transform(tree: GenericNode) -> int:
    """Hoist ``caption > title`` to be the first child of its figure or table."""
    hoisted = 0
    for figure in select_all(tree, ("fig", "table-wrap")):
        caption = select(figure, "caption", include_self=False)
        title = next((c for c in children_of(caption) if c.get("type") == "title"), None)
        if title is None:
            continue
        remove_nodes(caption, [title])
        figure["children"] = [copy_node(title), *children_of(figure)]
        hoisted += 1
    return hoisted


def citation_to_mixed_citation(tree: GenericNode | None) -> int:
    """Retype the non-JATS ``citation`` element used by some publishers."""
    citations = select_all(tree, "citation")
    for node in citations:
        node["type"] = "mixed-citation"
    return len(citations)

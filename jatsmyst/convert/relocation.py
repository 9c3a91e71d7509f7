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


"""Moving back-matter, floats and table footnotes to where they render."""

from __future__ import annotations

import logging

from jatsmyst.tree import (
    GenericNode,
    children_of,
    copy_node,
    remove_nodes,
    select_all,
    u,
)

logger = logging.getLogger(__name__)

BACK_TO_BODY_TYPES = ("fn-group", "sec", "ack", "app-group")


def back_to_body_transform(body: GenericNode | None, back: GenericNode | None) -> int:
    """Append copies of back-matter footnotes and sections to *body*.

    The copies follow an ``hr`` separator; *back* is not modified so that
    reference resolution still sees the original back matter.
    """
    if body is None or back is None:
        return 0
    back_nodes = [n for n in children_of(back) if n.get("type") in BACK_TO_BODY_TYPES]
    if not back_nodes:
        return 0
    body.setdefault("children", []).extend([u("hr"), *copy_node(back_nodes)])
    return len(back_nodes)


def float_to_end_transform(body: GenericNode | None) -> int:
    """Move ``supplementary-material[position=float]`` to the end of *body*."""
    floats = select_all(body, "supplementary-material", {"position": "float"})
    if not floats:
        return 0
    copies = []
    for node in floats:
        moved = copy_node(node)
        moved.pop("position", None)
        copies.append(moved)
    remove_nodes(body, floats)
    body.setdefault("children", []).extend([u("hr"), *copies])
    logger.debug("Moved %d floating supplementary items to the end", len(copies))
    return len(copies)


def table_footnotes_to_legend(tree: GenericNode) -> int:
    """Turn unreferenced footnotes inside table legends into paragraphs."""
    referenced = {ref.get("identifier") for ref in select_all(tree, "footnoteReference")}
    converted = 0
    for legend in select_all(tree, "legend"):
        for child in children_of(legend):
            if child.get("type") != "footnoteDefinition":
                continue
            if child.get("identifier") and child["identifier"] in referenced:
                continue
            child["type"] = "paragraph"
            converted += 1
    return converted

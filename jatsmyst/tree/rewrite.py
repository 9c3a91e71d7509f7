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

"""Tree rewriting with explicit keep / remove / lift decisions.

Transforms decide per node and :func:`rewrite` applies the decisions in a
single depth-first sweep::

    rewrite(tree, lambda n: REMOVE if n["type"] == "comment" else Keep(n))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from jatsmyst.tree.nodes import GenericNode


@dataclass(frozen=True)
class Keep:
    """Keep *node* (possibly a replacement) and descend into its children."""

    node: GenericNode


@dataclass(frozen=True)
class Remove:
    """Drop the node and its subtree."""


@dataclass(frozen=True)
class ReplaceWithChildren:
    """Splice *children* in place of the node; they are visited in turn."""

    children: list[GenericNode] = field(default_factory=list)


REMOVE = Remove()

Decision = Keep | Remove | ReplaceWithChildren
Visitor = Callable[[GenericNode], Decision]


def _rewrite_list(nodes: list[GenericNode], visit: Visitor) -> tuple[list[GenericNode], bool]:
    out: list[GenericNode] = []
    changed = False
    for node in nodes:
        decision = visit(node)
        if isinstance(decision, Remove):
            changed = True
        elif isinstance(decision, ReplaceWithChildren):
            lifted, _ = _rewrite_list(list(decision.children), visit)
            out.extend(lifted)
            changed = True
        else:
            kept = decision.node
            if kept is not node:
                changed = True
            if rewrite(kept, visit):
                changed = True
            out.append(kept)
    return out, changed


def rewrite(tree: GenericNode, visit: Visitor) -> bool:
    """Apply *visit* to every descendant of *tree*; return ``True`` on change.

    The root itself is never visited.
    """
    children = tree.get("children")
    if children is None:
        return False
    new_children, changed = _rewrite_list(children, visit)
    if changed:
        tree["children"] = new_children
    return changed


def remove_nodes(tree: GenericNode, nodes: Iterable[GenericNode]) -> bool:
    """Remove the given node objects (matched by identity) from *tree*."""
    doomed = {id(n) for n in nodes}
    if not doomed:
        return False
    return rewrite(tree, lambda n: REMOVE if id(n) in doomed else Keep(n))


def lift_nodes(tree: GenericNode, nodes: Iterable[GenericNode]) -> bool:
    """Replace each given node by its children (matched by identity)."""
    lifted = {id(n) for n in nodes}
    if not lifted:
        return False
    return rewrite(
        tree,
        lambda n: ReplaceWithChildren(n.get("children") or []) if id(n) in lifted else Keep(n),
    )


def lift_type(tree: GenericNode, node_type: str) -> bool:
    """Replace every node of *node_type* by its children, recursively."""
    return rewrite(
        tree,
        lambda n: (
            ReplaceWithChildren(n.get("children") or []) if n.get("type") == node_type else Keep(n)
        ),
    )

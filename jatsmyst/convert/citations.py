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


"""Grouping of in-text citations into ``citeGroup`` clusters.

The rules below run in order, repeatedly, until a full pass reports no
change.  Each rule returns ``True`` when it modified the tree.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Sequence

from jatsmyst.tree import GenericNode, children_of, copy_node, label_attrs, rewrite, walk
from jatsmyst.tree.rewrite import Keep, ReplaceWithChildren

logger = logging.getLogger(__name__)

SEPARATOR_RE = re.compile(r"^\s*([,;]|[,;]?\s*(and))\s*$")
# Hyphen-minus and en dash only; other dashes never form a range
RANGE_RE = re.compile(r"^\s*[–-]\s*$")

MAX_PASSES = 100

# Attributes that belong to the cite, not to the group wrapping it
_CITE_ONLY_ATTRS = ("enumerator", "error", "identifier", "label", "partial", "prefix", "suffix")

Rule = Callable[[GenericNode], bool]


def _parents(tree: GenericNode) -> Iterator[GenericNode]:
    for node, _ in walk(tree):
        if node.get("children"):
            yield node


def _is(node: GenericNode | None, node_type: str) -> bool:
    return node is not None and node.get("type") == node_type


def remove_cite_children(tree: GenericNode) -> bool:
    """Drop children of ``cite`` nodes; the renderer recomputes them."""
    changed = False
    for node, _ in walk(tree):
        if node.get("type") == "cite" and "children" in node:
            del node["children"]
            changed = True
    return changed


def wrap_standalone_cites(tree: GenericNode) -> bool:
    """Put every ``cite`` that is not inside a ``citeGroup`` into one."""
    changed = False
    for parent in _parents(tree):
        if parent.get("type") == "citeGroup":
            continue
        children = parent["children"]
        for index, child in enumerate(children):
            if child.get("type") != "cite":
                continue
            group = {k: v for k, v in child.items() if k not in _CITE_ONLY_ATTRS}
            group["type"] = "citeGroup"
            group["children"] = [copy_node(child)]
            children[index] = group
            changed = True
    return changed


def flatten_nested_cite_groups(tree: GenericNode) -> bool:
    changed = False
    for parent in _parents(tree):
        if parent.get("type") != "citeGroup":
            continue
        if not any(child.get("type") == "citeGroup" for child in parent["children"]):
            continue
        flat: list[GenericNode] = []
        for child in parent["children"]:
            if child.get("type") == "citeGroup":
                flat.extend(children_of(child))
            else:
                flat.append(child)
        parent["children"] = flat
        changed = True
    return changed


def _merge_into(first: GenericNode, second: GenericNode) -> None:
    first["children"] = [*children_of(first), *children_of(second)]


def combine_adjacent_cite_groups(tree: GenericNode) -> bool:
    """Merge directly adjacent groups, keeping the first group's kind."""
    changed = False
    for parent in _parents(tree):
        merged: list[GenericNode] = []
        for child in parent["children"]:
            if merged and _is(child, "citeGroup") and _is(merged[-1], "citeGroup"):
                _merge_into(merged[-1], child)
                changed = True
                continue
            merged.append(child)
        parent["children"] = merged
    return changed


def _scan_triples(
    tree: GenericNode,
    merge: Callable[[GenericNode, GenericNode, GenericNode], bool],
) -> bool:
    """Apply *merge* to every ``citeGroup, text, citeGroup`` run.

    When *merge* returns ``True`` the text and second group are dropped
    and the scan continues from the (now larger) first group.
    """
    changed = False
    for parent in _parents(tree):
        children = parent["children"]
        index = 0
        while index + 2 < len(children):
            first, between, second = children[index:index + 3]
            if (
                _is(first, "citeGroup")
                and _is(between, "text")
                and _is(second, "citeGroup")
                and merge(first, between, second)
            ):
                del children[index + 1:index + 3]
                changed = True
                continue
            index += 1
    return changed


def remove_cite_separators(tree: GenericNode) -> bool:
    """Merge groups separated only by ``,``, ``;`` or ``and``."""

    def merge(first: GenericNode, between: GenericNode, second: GenericNode) -> bool:
        if not SEPARATOR_RE.match(between.get("value") or ""):
            return False
        _merge_into(first, second)
        return True

    return _scan_triples(tree, merge)


def expand_hyphenated_cites(tree: GenericNode, label_order: Sequence[str]) -> bool:
    """Expand ``{a} - {d}`` into ``{a, b, c, d}`` using *label_order*.

    Both endpoints must be single cites found in *label_order* with the
    first strictly before the second; anything else is left alone.
    """
    positions = {label: index for index, label in reversed(list(enumerate(label_order)))}

    def merge(first: GenericNode, between: GenericNode, second: GenericNode) -> bool:
        if len(children_of(first)) != 1 or len(children_of(second)) != 1:
            return False
        if not RANGE_RE.match(between.get("value") or ""):
            return False
        first_cite = children_of(first)[0]
        last_cite = children_of(second)[0]
        start = positions.get(first_cite.get("label"))
        end = positions.get(last_cite.get("label"))
        if start is None or end is None or end <= start:
            return False
        cites = []
        for label in label_order[start:end + 1]:
            cite: GenericNode = {"type": "cite", "label": label, **label_attrs(label)}
            if first_cite.get("kind"):
                cite["kind"] = first_cite["kind"]
            cites.append(cite)
        first["children"] = cites
        return True

    return _scan_triples(tree, merge)


def remove_cite_parentheses(tree: GenericNode) -> bool:
    """Turn ``(`` group ``)`` into a parenthetical group without the brackets."""
    changed = False
    closers = {"(": ")", "[": "]"}
    for parent in _parents(tree):
        children = parent["children"]
        index = 0
        while index + 2 < len(children):
            before, group, after = children[index:index + 3]
            before_value = before.get("value") or ""
            if not (
                _is(before, "text")
                and before_value[-1:] in closers
                and _is(group, "citeGroup")
                and _is(after, "text")
                and (after.get("value") or "")[:1] == closers[before_value[-1]]
            ):
                index += 1
                continue
            before["value"] = before_value[:-1]
            after["value"] = after["value"][1:]
            group["kind"] = "parenthetical"
            for cite in children_of(group):
                if cite.get("type") == "cite":
                    cite["kind"] = "parenthetical"
            changed = True
            doomed = [n for n in (before, after) if not n["value"]]
            children[:] = [c for c in children if not any(c is d for d in doomed)]
            index += 1
    return changed


def remove_cite_superscript(tree: GenericNode) -> bool:
    """Lift a group out of a ``superscript`` that holds nothing else."""

    def visit(node: GenericNode):
        children = children_of(node)
        if (
            node.get("type") == "superscript"
            and len(children) == 1
            and _is(children[0], "citeGroup")
        ):
            return ReplaceWithChildren(children)
        return Keep(node)

    return rewrite(tree, visit)


def ensure_space_before_cite(tree: GenericNode) -> bool:
    changed = False
    for parent in _parents(tree):
        children = parent["children"]
        for before, after in zip(children, children[1:]):
            if not (_is(before, "text") and _is(after, "citeGroup")):
                continue
            value = before.get("value") or ""
            if re.search(r"\s$", value) or value[-1:] in ("[", "("):
                continue
            before["value"] = f"{value} "
            changed = True
    return changed


def inline_citations_transform(tree: GenericNode, label_order: Sequence[str]) -> int:
    """Run the grouping rules to a fixed point; return the number of passes."""
    rules: list[Rule] = [
        remove_cite_children,
        wrap_standalone_cites,
        flatten_nested_cite_groups,
        combine_adjacent_cite_groups,
        remove_cite_separators,
        lambda t: expand_hyphenated_cites(t, label_order),
        remove_cite_parentheses,
        remove_cite_superscript,
        ensure_space_before_cite,
    ]
    for passes in range(1, MAX_PASSES + 1):
        changed = False
        for rule in rules:
            if rule(tree):
                changed = True
        if not changed:
            return passes
    logger.warning("Citation grouping did not settle after %d passes", MAX_PASSES)
    return MAX_PASSES

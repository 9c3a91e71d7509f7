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

"""Generic node model shared by the XML reader and the MyST emitter.

A node is a plain ``dict`` with a ``type`` key, arbitrary attributes and
an optional ordered ``children`` list.  Leaf nodes carry a scalar
``value`` (text, comments) or ``cdata`` instead of children.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Iterator
from typing import Any

GenericNode = dict[str, Any]

_WS_RE = re.compile(r"[\t\n\r ]+")


def u(node_type: str, attrs: dict[str, Any] | None = None, children: list | None = None,
      value: str | None = None) -> GenericNode:
    """Build a node: ``u("text", value="x")`` or ``u("block", {...}, [...])``."""
    node: GenericNode = {"type": node_type}
    if attrs:
        node.update(attrs)
    if children is not None:
        node["children"] = children
    if value is not None:
        node["value"] = value
    return node


def children_of(node: GenericNode | None) -> list[GenericNode]:
    """Return the children list of *node*, or an empty list."""
    if not node:
        return []
    return node.get("children") or []


def to_text(content: GenericNode | Iterable[GenericNode] | None) -> str:
    """Concatenate the ``value`` of every descendant, in document order."""
    if content is None:
        return ""
    if isinstance(content, dict):
        if content.get("type") == "comment":
            return ""
        if "value" in content and isinstance(content["value"], str):
            return content["value"]
        return "".join(to_text(child) for child in children_of(content))
    return "".join(to_text(node) for node in content)


def copy_node(node: Any) -> Any:
    """Deep copy a node (or list of nodes)."""
    return copy.deepcopy(node)


def walk(node: GenericNode, parent: GenericNode | None = None
         ) -> Iterator[tuple[GenericNode, GenericNode | None]]:
    """Yield ``(node, parent)`` pairs depth-first, pre-order."""
    yield node, parent
    for child in list(children_of(node)):
        yield from walk(child, node)


def _matches(node: GenericNode, types: str | tuple[str, ...] | None,
             attrs: dict[str, Any] | None) -> bool:
    if types is not None:
        wanted = (types,) if isinstance(types, str) else types
        if node.get("type") not in wanted:
            return False
    if attrs:
        for key, expected in attrs.items():
            if node.get(key) != expected:
                return False
    return True


def select_all(
    node: GenericNode | None,
    types: str | tuple[str, ...] | None = None,
    attrs: dict[str, Any] | None = None,
    *,
    include_self: bool = True,
) -> list[GenericNode]:
    """Return every node matching *types* and *attrs*, in document order."""
    if not node:
        return []
    found: list[GenericNode] = []
    for candidate, _ in walk(node):
        if candidate is node and not include_self:
            continue
        if _matches(candidate, types, attrs):
            found.append(candidate)
    return found


def select(
    node: GenericNode | None,
    types: str | tuple[str, ...] | None = None,
    attrs: dict[str, Any] | None = None,
    *,
    include_self: bool = True,
) -> GenericNode | None:
    """Return the first node matching *types* and *attrs*, or ``None``."""
    if not node:
        return None
    for candidate, _ in walk(node):
        if candidate is node and not include_self:
            continue
        if _matches(candidate, types, attrs):
            return candidate
    return None


def normalize_label(value: str | None) -> tuple[str, str] | None:
    """Return ``(label, identifier)`` for a cross-reference target.

    The label keeps the original casing with whitespace collapsed; the
    identifier is the lower-cased label.
    """
    if not value:
        return None
    label = _WS_RE.sub(" ", value).strip()
    if not label:
        return None
    return label, label.lower()


def label_attrs(value: str | None) -> dict[str, str]:
    """``normalize_label`` as a ``{"label", "identifier"}`` attribute dict."""
    normalized = normalize_label(value)
    if normalized is None:
        return {}
    label, identifier = normalized
    return {"label": label, "identifier": identifier}

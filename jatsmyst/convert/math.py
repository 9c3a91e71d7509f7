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


"""LaTeX extraction for ``inline-formula`` / ``disp-formula``."""

from __future__ import annotations

import logging
from collections.abc import Callable

from jatsmyst.tree import GenericNode, children_of, copy_node, select, to_text, walk
from jatsmyst.tree.xml import to_xml

logger = logging.getLogger(__name__)

MATHML_PREFIX = "mml:"


def _strip_mathml_prefix(node: GenericNode) -> GenericNode:
    for child, _ in walk(node):
        node_type = child.get("type", "")
        if node_type.startswith(MATHML_PREFIX):
            child["type"] = node_type[len(MATHML_PREFIX):]
    return node


def mathml_from_node(node: GenericNode) -> str | None:
    """Serialise the first MathML ``math`` element under *node*, prefix-free."""
    math = select(node, ("mml:math", "math"))
    if math is None:
        return None
    return to_xml(_strip_mathml_prefix(copy_node(math)))


def tex_math_from_node(
    node: GenericNode,
    mathml_to_latex: Callable[[str], str] | None = None,
) -> str | None:
    """Return LaTeX for a formula element.

    ``tex-math`` content wins; otherwise the MathML subtree is passed to
    *mathml_to_latex*.  Returns ``None`` when neither yields anything.
    """
    tex = select(node, "tex-math")
    if tex is not None:
        first = children_of(tex)[0] if children_of(tex) else {}
        value = first.get("cdata") or to_text(tex)
        if value and value.strip():
            return value.strip()
    if mathml_to_latex is None:
        return None
    mathml = mathml_from_node(node)
    if mathml is None:
        return None
    latex = mathml_to_latex(mathml)
    return latex or None

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


"""Stack-based emitter turning normalised JATS nodes into a MyST tree.

Every element kind the emitter understands is a :class:`JatsTag` member
and maps to exactly one handler in :data:`HANDLERS`.  Anything else
takes the "other" branch: the type is recorded as unhandled, a warning
is logged, and emission continues with the next sibling.

Usage::

    emitter = JatsEmitter(log=ConversionLog())
    emitter.render_children(tree)
    myst = emitter.finish()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from jatsmyst.convert.math import tex_math_from_node
from jatsmyst.convert.models import ConversionLog, ConvertOptions
from jatsmyst.tree import GenericNode, children_of, label_attrs, select, to_text

logger = logging.getLogger(__name__)


class JatsTag(StrEnum):
    """Element kinds with an emitter handler.

    Includes the intermediate kinds produced by normalisation passes
    (``heading``, ``block``, ``thematicBreak``, ``admonitionTitle``).
    """

    BODY = "body"
    TEXT = "text"
    P = "p"
    HEADING = "heading"
    BLOCK = "block"
    DISP_QUOTE = "disp-quote"
    LIST = "list"
    LIST_ITEM = "list-item"
    THEMATIC_BREAK = "thematicBreak"
    INLINE_FORMULA = "inline-formula"
    DISP_FORMULA = "disp-formula"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    MONOSPACE = "monospace"
    SUB = "sub"
    SUP = "sup"
    STRIKE = "strike"
    SC = "sc"
    EXT_LINK = "ext-link"
    URI = "uri"
    BOXED_TEXT = "boxed-text"
    ADMONITION_TITLE = "admonitionTitle"
    FIG_GROUP = "fig-group"
    GRAPHIC = "graphic"
    FIG = "fig"
    TABLE_WRAP = "table-wrap"
    TABLE = "table"
    THEAD = "thead"
    TBODY = "tbody"
    TFOOT = "tfoot"
    TR = "tr"
    TH = "th"
    TD = "td"
    TABLE_WRAP_FOOT = "table-wrap-foot"
    HR = "hr"
    BREAK = "break"
    NAMED_CONTENT = "named-content"
    FN_GROUP = "fn-group"
    FN = "fn"
    XREF = "xref"
    SUPPLEMENTARY_MATERIAL = "supplementary-material"
    MEDIA = "media"
    CAPTION = "caption"
    LABEL = "label"
    COMMENT = "comment"
    OBJECT_ID = "object-id"

    @classmethod
    def lookup(cls, node_type: str | None) -> JatsTag | None:
        """Return the member for *node_type*, or ``None`` for unknown input."""
        if node_type is None:
            return None
        try:
            return cls(node_type)
        except ValueError:
            return None


# xref ref-type -> crossReference kind
REFERENCE_KINDS: dict[str, str] = {
    "sec": "heading",
    "fig": "figure",
    "disp-formula": "equation",
    "table": "table",
}
CITATION_REF_TYPES = ("bibr", "ref")
FOOTNOTE_REF_TYPES = ("fn", "table-fn")


@dataclass
class EmitterData:
    is_in_container: bool = False


class JatsEmitter:
    """Incremental tree builder driven by the handler table.

    The stack starts with a single ``root``; :meth:`finish` force-closes
    anything left open and returns it.
    """

    def __init__(
        self,
        options: ConvertOptions | None = None,
        log: ConversionLog | None = None,
        handlers: dict[JatsTag, Handler] | None = None,
    ) -> None:
        self.options = options or ConvertOptions()
        self.log = log if log is not None else ConversionLog()
        self.handlers = handlers if handlers is not None else HANDLERS
        self.data = EmitterData()
        self.stack: list[GenericNode] = [{"type": "root", "children": []}]

    # --- stack ---

    def top(self) -> GenericNode:
        return self.stack[-1]

    def open_node(self, name: str, attrs: dict[str, Any] | None = None,
                  is_leaf: bool = False) -> None:
        node: GenericNode = {"type": name}
        if attrs:
            node.update({k: v for k, v in attrs.items() if v is not None})
        if not is_leaf:
            node["children"] = []
        self.stack.append(node)

    def close_node(self) -> GenericNode | None:
        if len(self.stack) <= 1:
            return None
        node = self.stack.pop()
        top = self.top()
        if "children" in top:
            top["children"].append(node)
        return node

    def add_leaf(self, name: str, attrs: dict[str, Any] | None = None) -> None:
        self.open_node(name, attrs, is_leaf=True)
        self.close_node()

    def text(self, value: str | None) -> None:
        """Append text to the current node, merging with a trailing text child."""
        top = self.top()
        if not value or "children" not in top:
            return
        children = top["children"]
        if children and children[-1].get("type") == "text":
            children[-1]["value"] += value
            return
        children.append({"type": "text", "value": value})

    # --- rendering ---

    def render_children(self, node: GenericNode, skip: set[int] | None = None) -> None:
        """Dispatch every child of *node*; children whose id() is in *skip* are left out."""
        for child in children_of(node):
            if skip and id(child) in skip:
                continue
            node_type = child.get("type")
            tag = JatsTag.lookup(node_type)
            handler = self.handlers.get(tag) if tag is not None else None
            if handler is None:
                self.log.add_unhandled(str(node_type))
                self.log.warn(
                    f'Unhandled JATS conversion for node of "{node_type}"',
                    source="emitter", node_type=str(node_type),
                )
                continue
            handler(child, self, node)

    def render_inline(self, node: GenericNode, name: str,
                      attrs: dict[str, Any] | None = None) -> None:
        self.open_node(name, attrs)
        if "children" in node:
            self.render_children(node)
        elif node.get("value"):
            self.text(node["value"])
        self.close_node()

    def finish(self) -> GenericNode:
        while len(self.stack) > 1:
            self.close_node()
        return self.stack[0]


Handler = Callable[[GenericNode, JatsEmitter, GenericNode], None]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _render_children(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.render_children(node)


def _ignore(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    pass


def _inline(name: str) -> Handler:
    def handler(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
        state.render_inline(node, name)

    return handler


def _link(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.render_inline(node, "link", {"url": node.get("xlink:href")})


def _text(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.text(node.get("value"))


def _heading(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    attrs: dict[str, Any] = {"enumerated": True, "depth": node.get("depth")}
    if node.get("id"):
        attrs.update({"label": node["id"], "identifier": node["id"]})
    state.render_inline(node, "heading", attrs)


def _block(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    part = node.get("part") or node.get("sec-type")
    state.render_inline(node, "block", {"data": {"part": part}} if part else None)


def _disp_quote(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.render_inline(node, "blockquote", {"kind": node.get("content-type")})


def _list(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.render_inline(node, "list", {"ordered": node.get("list-type") == "ordered"})


def _thematic_break(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.add_leaf("thematicBreak")


def _hr(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    if state.data.is_in_container:
        return
    state.add_leaf("thematicBreak")


def _break(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.add_leaf("break")


def _formula(math_type: str) -> Handler:
    def handler(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
        try:
            tex = tex_math_from_node(node, state.options.mathml_to_latex)
        except Exception as exc:
            state.log.warn(
                f"MathML conversion failed: {exc}", source="math", node_type=node["type"],
            )
            tex = None
        if tex:
            state.add_leaf(math_type, {"value": tex, "label": node.get("id"),
                                       "identifier": node.get("id")})
        else:
            state.render_children(node)

    return handler


def _boxed_text(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.render_inline(node, "admonition", {"kind": "info"})


def _fig_group(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.open_node("tabSet")
    for child in children_of(node):
        title = to_text(select(child, "label"))
        state.open_node("tabItem", {"title": title, "sync": title})
        state.render_children({"type": "fig-group", "children": [child]})
        state.close_node()
    state.close_node()


def _graphic(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.add_leaf("image", {"url": node.get("xlink:href")})


def _fig(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    caption = select(node, "caption", include_self=False)
    graphic = select(node, "graphic", include_self=False)
    title = select(node, "title", include_self=False)
    state.open_node("container", {**label_attrs(node.get("id")), "kind": "figure"})
    was_in_container = state.data.is_in_container
    state.data.is_in_container = True
    url = graphic.get("xlink:href") if graphic else None
    if url:
        state.add_leaf("image", {"url": url})
    state.open_node("caption")
    if title is not None:
        state.open_node("strong")
        state.render_children(title)
        state.close_node()
    if caption is not None:
        state.render_children(caption)
    state.close_node()
    state.close_node()
    state.data.is_in_container = was_in_container


def _table_wrap(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    caption = select(node, "caption", include_self=False)
    label = select(node, "label", include_self=False)
    title = select(node, "title", include_self=False)
    state.open_node("container", {**label_attrs(node.get("id")), "kind": "table"})
    was_in_container = state.data.is_in_container
    state.data.is_in_container = True
    used: set[int] = set()
    state.open_node("caption")
    if title is not None:
        state.open_node("strong")
        state.render_children(title)
        state.close_node()
        used.add(id(title))
    if caption is not None or label is not None:
        state.render_children(caption if caption is not None else label, skip=used)
        used.update(id(n) for n in (caption, label) if n is not None)
    state.close_node()
    state.render_children(node, skip=used)
    state.close_node()
    state.data.is_in_container = was_in_container


def _table(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.open_node("table")
    state.render_children(node)
    state.close_node()


def _table_row(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.open_node("tableRow")
    state.render_children(node)
    state.close_node()


def _table_cell(header: bool) -> Handler:
    def handler(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
        state.open_node("tableCell", {
            "header": True if header else None,
            "align": node.get("align"),
            "colspan": node.get("colspan"),
            "rowspan": node.get("rowspan"),
        })
        state.render_children(node)
        state.close_node()

    return handler


def _table_wrap_foot(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.open_node("legend")
    state.render_children(node)
    state.close_node()


def _fn(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    state.open_node("footnoteDefinition", label_attrs(node.get("id")))
    state.render_children(node)
    state.close_node()


def _xref(node: GenericNode, state: JatsEmitter, parent: GenericNode) -> None:
    ref_type = node.get("ref-type")
    attrs = label_attrs(node.get("rid"))
    if ref_type in CITATION_REF_TYPES:
        state.render_inline(node, "cite", {**attrs, "kind": "narrative"})
    elif ref_type in REFERENCE_KINDS:
        state.render_inline(node, "crossReference", {**attrs, "kind": REFERENCE_KINDS[ref_type]})
    elif ref_type in FOOTNOTE_REF_TYPES:
        state.render_inline(node, "footnoteReference", attrs)
    else:
        state.render_inline(node, "crossReference", {"identifier": node.get("rid")})
        state.log.warn(f"Unknown ref-type of {ref_type}", source="xref", node_type="xref")


HANDLERS: dict[JatsTag, Handler] = {
    JatsTag.BODY: _render_children,
    JatsTag.TEXT: _text,
    JatsTag.P: _inline("paragraph"),
    JatsTag.HEADING: _heading,
    JatsTag.BLOCK: _block,
    JatsTag.DISP_QUOTE: _disp_quote,
    JatsTag.LIST: _list,
    JatsTag.LIST_ITEM: _inline("listItem"),
    JatsTag.THEMATIC_BREAK: _thematic_break,
    JatsTag.INLINE_FORMULA: _formula("inlineMath"),
    JatsTag.DISP_FORMULA: _formula("math"),
    JatsTag.BOLD: _inline("strong"),
    JatsTag.ITALIC: _inline("emphasis"),
    JatsTag.UNDERLINE: _inline("underline"),
    JatsTag.MONOSPACE: _inline("inlineCode"),
    JatsTag.SUB: _inline("subscript"),
    JatsTag.SUP: _inline("superscript"),
    JatsTag.STRIKE: _inline("delete"),
    JatsTag.SC: _inline("smallcaps"),
    JatsTag.EXT_LINK: _link,
    JatsTag.URI: _link,
    JatsTag.BOXED_TEXT: _boxed_text,
    JatsTag.ADMONITION_TITLE: _inline("admonitionTitle"),
    JatsTag.FIG_GROUP: _fig_group,
    JatsTag.GRAPHIC: _graphic,
    JatsTag.FIG: _fig,
    JatsTag.TABLE_WRAP: _table_wrap,
    JatsTag.TABLE: _table,
    JatsTag.THEAD: _render_children,
    JatsTag.TBODY: _render_children,
    JatsTag.TFOOT: _render_children,
    JatsTag.TR: _table_row,
    JatsTag.TH: _table_cell(header=True),
    JatsTag.TD: _table_cell(header=False),
    JatsTag.TABLE_WRAP_FOOT: _table_wrap_foot,
    JatsTag.HR: _hr,
    JatsTag.BREAK: _break,
    JatsTag.NAMED_CONTENT: _render_children,
    JatsTag.FN_GROUP: _render_children,
    JatsTag.FN: _fn,
    JatsTag.XREF: _xref,
    JatsTag.SUPPLEMENTARY_MATERIAL: _render_children,
    JatsTag.MEDIA: _link,
    JatsTag.CAPTION: _render_children,
    JatsTag.LABEL: _ignore,
    JatsTag.COMMENT: _ignore,
    JatsTag.OBJECT_ID: _ignore,
}

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

"""Bridge between XML text and the generic node tree.

Element names and attribute names keep their conventional namespace
prefixes (``xlink:href``, ``mml:math``) so that downstream code can match
on the strings found in JATS documents.  A JATS ``type`` attribute is
stored as ``_type`` because ``type`` holds the element name.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from html.entities import name2codepoint

from jatsmyst.tree.nodes import GenericNode, children_of

# Fallback prefixes for namespaces the document does not declare by prefix
KNOWN_NAMESPACES: dict[str, str] = {
    "http://www.w3.org/1999/xlink": "xlink",
    "http://www.w3.org/1998/Math/MathML": "mml",
    "http://www.w3.org/XML/1998/namespace": "xml",
    "http://www.w3.org/2001/XMLSchema-instance": "xsi",
    "http://www.niso.org/schemas/ali/1.0/": "ali",
    "http://schema.highwire.org/Journal": "hwp",
}

_TRAILING_INDENT_RE = re.compile(r"\n(\s+)$")
_DOCTYPE_RE = re.compile(rb"<!DOCTYPE", re.IGNORECASE)
_XML_DECL_RE = re.compile(rb"\A\s*<\?xml[^>]*\?>")
_ROOT_NAME_RE = re.compile(rb"<([A-Za-z_][\w.:-]*)")


class _TreeBuilder(ET.TreeBuilder):
    """Tree builder that also records the ``uri -> prefix`` declarations."""

    def __init__(self) -> None:
        super().__init__(insert_comments=True)
        self.prefixes = dict(KNOWN_NAMESPACES)

    def start_ns(self, prefix: str, uri: str) -> None:
        # Default namespaces (e.g. <math xmlns="...">) are written bare
        self.prefixes[uri] = prefix or ""


def _qualified(name: str, prefixes: dict[str, str]) -> str:
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri, "")
    return f"{prefix}:{local}" if prefix else local


def _text_node(text: str | None) -> GenericNode | None:
    if not text:
        return None
    if not text.strip() and "\n" in text:
        # Indentation between elements
        return None
    return {"type": "text", "value": _TRAILING_INDENT_RE.sub("", text)}


def _convert(element: ET.Element, prefixes: dict[str, str]) -> GenericNode:
    if element.tag is ET.Comment:
        return {"type": "comment", "value": element.text or ""}
    name = _qualified(element.tag, prefixes)
    node: GenericNode = {"type": name}
    for key, value in element.attrib.items():
        attr = _qualified(key, prefixes)
        node["_type" if attr == "type" else attr] = value
    if name == "code":
        node["value"] = "".join(element.itertext())
        return node
    children: list[GenericNode] = []
    leading = _text_node(element.text)
    if leading:
        children.append(leading)
    for child in element:
        if not isinstance(child.tag, str) and child.tag is not ET.Comment:
            continue
        children.append(_convert(child, prefixes))
        tail = _text_node(child.tail)
        if tail:
            children.append(tail)
    node["children"] = children
    return node


def _with_doctype(raw: bytes) -> bytes:
    """Give a DOCTYPE-less document an external subset.

    Expat only resolves entities from ``parser.entity`` when the document
    declares an external DTD; otherwise a named entity is a fatal error.
    """
    if _DOCTYPE_RE.search(raw):
        return raw
    root = _ROOT_NAME_RE.search(raw)
    if root is None:
        return raw
    doctype = b"<!DOCTYPE " + root.group(1) + b' SYSTEM "jats-entities.dtd">'
    decl = _XML_DECL_RE.match(raw)
    at = decl.end() if decl else 0
    return raw[:at] + doctype + raw[at:]


def parse_xml(data: str | bytes) -> GenericNode:
    """Parse XML text into a generic node tree rooted at the document element.

    Raises ``xml.etree.ElementTree.ParseError`` on malformed input.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    builder = _TreeBuilder()
    parser = ET.XMLParser(target=builder)
    # Named HTML entities used by some publishers without a loadable DTD
    parser.entity.update({name: chr(code) for name, code in name2codepoint.items()})
    parser.feed(_with_doctype(raw))
    root = parser.close()
    return _convert(root, builder.prefixes)


def _to_element(node: GenericNode) -> ET.Element:
    attrs = {
        ("type" if key == "_type" else key): str(value)
        for key, value in node.items()
        if key not in ("type", "children", "value") and value is not None
    }
    element = ET.Element(node["type"], attrs)
    if node["type"] == "code":
        element.text = node.get("value", "")
        return element
    last: ET.Element | None = None
    for child in children_of(node):
        child_type = child.get("type")
        if child_type in ("text", "cdata"):
            text = child.get("value") if child_type == "text" else child.get("cdata")
            if last is None:
                element.text = (element.text or "") + (text or "")
            else:
                last.tail = (last.tail or "") + (text or "")
            continue
        if child_type == "comment":
            last = ET.Comment(child.get("value", ""))
        else:
            last = _to_element(child)
        element.append(last)
    return element


def to_xml(node: GenericNode) -> str:
    """Serialise a generic node (and its subtree) back to an XML string."""
    return ET.tostring(_to_element(node), encoding="unicode")

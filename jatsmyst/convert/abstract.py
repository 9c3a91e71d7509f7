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


"""Abstract clean-up and description extraction."""

from __future__ import annotations

import re

from jatsmyst.convert.sections import section_transform
from jatsmyst.tree import GenericNode, children_of, lift_type, to_text, u

_SENTENCE_RE = re.compile(r"^(.*?\s[a-z]+\.)\s+([A-Z][A-Za-z]*,?\s.*)$")
_WHITESPACE_RE = re.compile(r"\s+")


def abstract_transform(abstract: GenericNode) -> None:
    """Flatten abstract sections into bold-titled paragraphs.

    A leading "Abstract" title is removed; any other leading title is
    merged into the following paragraph (or becomes one).
    """
    children = children_of(abstract)
    if len(children) == 1 and children[0].get("type") == "sec":
        abstract_transform(children[0])
        return
    section_transform(abstract, "strong")
    lift_type(abstract, "block")
    children = children_of(abstract)
    title = children[0] if children else None
    if title is None or title.get("type") != "title":
        return
    following = children[1] if len(children) > 1 else None
    if to_text(title).upper().strip() == "ABSTRACT":
        abstract["children"] = children[1:]
    elif following is not None and following.get("type") == "p":
        following["children"] = [
            *children_of(title),
            u("text", value=" "),
            *children_of(following),
        ]
        abstract["children"] = children[1:]
    else:
        title["type"] = "p"


def description_from_abstract(abstract: str) -> str:
    """Return the first two sentences of *abstract*.

    A sentence ends at "<lower-case word>. <Capitalised word>", so "Mr. Smith"
    does not split, but neither does a sentence ending in a number or an
    upper-case word.  Shorter abstracts are returned whole.
    """
    flat = _WHITESPACE_RE.sub(" ", abstract)
    first = _SENTENCE_RE.match(flat)
    if not first:
        return flat
    second = _SENTENCE_RE.match(first.group(2))
    if not second:
        return flat
    return f"{first.group(1)} {second.group(1)}"

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


"""Abbreviation extraction into document frontmatter.

An "Abbreviations" section (or an unreferenced footnote starting with
"Abbreviations:") holding ``ABBR, expansion; ABBR: expansion.`` pairs is
moved into :attr:`Frontmatter.abbreviations`.  Parsing is all-or-nothing:
one malformed entry leaves the section in place as prose.
"""

from __future__ import annotations

import logging
import re

from jatsmyst.jats.models import Frontmatter
from jatsmyst.tree import GenericNode, children_of, remove_nodes, select_all, to_text

logger = logging.getLogger(__name__)

FOOTNOTE_PREFIX = "abbreviations: "

_TRAILING_PERIOD_RE = re.compile(r"\.\Z")
_ENTRY_SPLIT_RE = re.compile(r";\s*")
_PAIR_SPLIT_RE = re.compile(r"[,:]\s*")
_WHITESPACE_RE = re.compile(r"\s")
_PAREN_ABBR_RE = re.compile(r"^\(([^\s]+)\).?")
_LETTER_RE = re.compile(r"^[a-zA-Z]$")


def parse_abbreviations(text: str) -> dict[str, str] | None:
    """Parse ``"A, alpha; B: beta."`` into a mapping, or ``None`` if any entry is invalid."""
    entries: dict[str, str] = {}
    for entry in _ENTRY_SPLIT_RE.split(_TRAILING_PERIOD_RE.sub("", text)):
        parts = _PAIR_SPLIT_RE.split(entry)
        if len(parts) != 2:
            return None
        abbr, expansion = parts
        if _WHITESPACE_RE.search(abbr):
            return None
        entries[abbr] = expansion
    return entries


def abbreviation_section_transform(tree: GenericNode, frontmatter: Frontmatter) -> int:
    """Move fully parseable "Abbreviations" blocks into *frontmatter*.

    Returns the number of blocks removed.
    """
    doomed: list[GenericNode] = []
    for block in select_all(tree, "block"):
        children = children_of(block)
        if len(children) != 2:
            continue
        heading, paragraph = children
        if heading.get("type") != "heading" or paragraph.get("type") != "paragraph":
            continue
        if to_text(heading).lower() != "abbreviations":
            continue
        entries = parse_abbreviations(to_text(paragraph))
        if entries is None:
            logger.debug("Leaving unparseable abbreviations section in place")
            continue
        frontmatter.merge_abbreviations(entries)
        doomed.append(block)
    remove_nodes(tree, doomed)
    return len(doomed)


def abbreviation_footnote_transform(tree: GenericNode, frontmatter: Frontmatter) -> int:
    """Move unreferenced "Abbreviations: ..." footnotes into *frontmatter*."""
    referenced = {ref.get("identifier") for ref in select_all(tree, "footnoteReference")}
    doomed: list[GenericNode] = []
    for fn_def in select_all(tree, "footnoteDefinition"):
        if fn_def.get("identifier") and fn_def["identifier"] in referenced:
            continue
        children = children_of(fn_def)
        if len(children) != 1 or children[0].get("type") != "paragraph":
            continue
        text = to_text(children[0])
        if not text.lower().startswith(FOOTNOTE_PREFIX):
            continue
        entries = parse_abbreviations(text[len(FOOTNOTE_PREFIX):])
        if entries is None:
            continue
        frontmatter.merge_abbreviations(entries)
        doomed.append(fn_def)
    remove_nodes(tree, doomed)
    return len(doomed)


# ---------------------------------------------------------------------------
# Heuristic detection in running text
# ---------------------------------------------------------------------------


def _maybe_stop_word(word: str) -> bool:
    return len(word) < 5


def _explore(letter: str, possibilities: list[tuple[str | None, list[str]]]
             ) -> list[tuple[str | None, list[str]]]:
    # prev: rest of the word being consumed; following: words not yet started
    explored: list[tuple[str | None, list[str]]] = []
    for prev, following in possibilities:
        if prev and letter in prev:
            explored.append((prev[prev.index(letter) + 1:], following))
        for index, word in enumerate(following):
            if word.startswith(letter):
                explored.append((word[1:], following[index + 1:]))
            if not prev or not _maybe_stop_word(word):
                break
    return explored


def abbreviations_from_text(text: str) -> dict[str, str]:
    """Find ``expansion words (ABBR)`` pairs in running text.

    The letters of ABBR must be found, in order, in the preceding words;
    short words (fewer than five letters) may be skipped.
    """
    found: dict[str, str] = {}
    words = text.split(" ")
    for index, word in enumerate(words):
        match = _PAREN_ABBR_RE.match(word)
        if not match:
            continue
        abbr = match.group(1)
        candidates: list[str] = []
        position = index - 1
        while (
            position >= 0
            and words[position]
            and len([w for w in candidates if len(w) > 4]) < len(abbr)
        ):
            candidates.insert(0, words[position])
            position -= 1
        letters = [letter.lower() for letter in abbr if _LETTER_RE.match(letter)]
        for start in range(len(candidates)):
            possibilities: list[tuple[str | None, list[str]]] = [
                (None, [w.lower() for w in candidates[start:]])
            ]
            for letter in letters:
                possibilities = _explore(letter, possibilities)
            if any(not following for _, following in possibilities):
                found[abbr] = " ".join(candidates[start:])
                break
    return found


def abbreviations_from_tree(tree: GenericNode, frontmatter: Frontmatter) -> int:
    """Merge abbreviations detected in every paragraph into *frontmatter*."""
    found: dict[str, str] = {}
    for paragraph in select_all(tree, "paragraph"):
        found.update(abbreviations_from_text(to_text(paragraph)))
    frontmatter.merge_abbreviations(found)
    return len(found)

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


"""Synthesized bibliography entries for references without a DOI.

Fields are collected from the citation's child elements in document
order and rendered through the ``bibtex_entry.bib.j2`` template.
Unrecognised child elements are recorded in the conversion log rather
than raising.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from jatsmyst.convert.models import ConversionLog
from jatsmyst.templates import TemplateEngine
from jatsmyst.tree import GenericNode, children_of, select, select_all, to_text

logger = logging.getLogger(__name__)

ENTRY_TEMPLATE = "bibtex_entry.bib.j2"

# JATS publication-type -> bibtex entry type
BIBTEX_TYPE: dict[str, str] = {
    "journal": "article",
    "book": "book",
    "report": "techreport",
    "confproc": "inproceedings",
    "other": "misc",
    "web": "misc",
    "webpage": "misc",
    "miscellaneous": "misc",
    "undeclared": "misc",
    "preprint": "article",
    "eprint": "article",
    "software": "misc",
    "data": "misc",
    "patent": "misc",
    "thesis": "phdthesis",
}

# Punctuation and connective words between citation elements
_FILLER_RE = re.compile(r"^([\s.;,:\-–()&]|p|ed|eds|in|and|st|nd|rd|th)*$", re.IGNORECASE)
_MAYBE_FPAGE_RE = re.compile(r", [0-9]+\.")

# Child element -> bibtex field, for fields copied verbatim
SIMPLE_FIELDS: dict[str, str] = {
    "article-title": "title",
    "part-title": "title",
    "chapter-title": "title",
    "data-title": "title",
    "year": "year",
    "issue": "number",
    "volume": "volume",
    "conf-name": "booktitle",
    "institution": "institution",
    "edition": "edition",
    "publisher-name": "publisher",
    "publisher-loc": "address",
    "conf-loc": "address",
}


def _person_name(node: GenericNode) -> str:
    if node.get("type") == "etal":
        return "others"
    if node.get("type") == "collab":
        return f"{{{to_text(node)}}}"
    surname = select(node, "surname")
    given = select(node, "given-names")
    if surname is None or given is None:
        return to_text(node)
    return f"{to_text(surname)}, {to_text(given)}"


class BibtexBuilder:
    """Build bibtex entry strings from JATS citation elements.

    Args:
        engine: Template engine used to render entries; defaults to the
            package templates.
    """

    def __init__(self, engine: TemplateEngine | None = None) -> None:
        self.engine = engine if engine is not None else TemplateEngine()

    @classmethod
    def with_template_dir(cls, template_dir: Path | None) -> BibtexBuilder:
        return cls(TemplateEngine(user_dir=template_dir))

    def entry_type(self, cite: GenericNode) -> str:
        if select(cite, ("part-title", "chapter-title")):
            return "inbook"
        return BIBTEX_TYPE.get(cite.get("publication-type", ""), "misc")

    def fields(
        self, key: str, cite: GenericNode, entry_type: str,
    ) -> tuple[list[tuple[str, str]], list[str]]:
        """Return ``(fields, skipped)`` for *cite*.

        *skipped* holds ``"<key>:<type> -> <text>"`` descriptions of
        child elements that have no bibtex counterpart.
        """
        fields: list[tuple[str, str]] = []
        authors: list[str] = []
        editors: list[str] = []
        fpage: str | None = None
        lpage: str | None = None
        maybe_fpage: str | None = None
        patent_title = ""
        skipped: list[str] = []
        is_patent = cite.get("publication-type") == "patent"

        for child in children_of(cite):
            child_type = child.get("type")
            text = to_text(child)
            if child_type in ("label", "pub-id", "comment"):
                continue
            if child_type == "text" and _FILLER_RE.match(text):
                continue
            if child_type in SIMPLE_FIELDS:
                fields.append((SIMPLE_FIELDS[child_type], text))
            elif child_type == "source":
                name = {"book": "title", "inbook": "booktitle"}.get(entry_type, "journal")
                fields.append((name, text))
            elif child_type == "patent":
                patent_title = f"{patent_title}{text}"
            elif child_type == "uri":
                fields.append(("howpublished", f"\\url{{{child.get('xlink:href', text)}}}"))
            elif child_type == "date-in-citation":
                if child.get("content-type") == "access-date":
                    fields.append(("note", f"Accessed: {text}"))
                else:
                    fields.append(("note", text))
            elif child_type == "fpage":
                fpage = text
            elif child_type == "lpage":
                lpage = text
            elif child_type == "person-group":
                names = [
                    _person_name(n)
                    for n in select_all(child, ("name", "string-name", "collab", "etal"))
                ]
                if child.get("person-group-type") == "editor":
                    editors.extend(names)
                else:
                    authors.extend(names)
            elif child_type in ("name", "string-name", "collab", "etal"):
                authors.append(_person_name(child))
            elif child_type == "text":
                if _MAYBE_FPAGE_RE.search(text):
                    maybe_fpage = text[2:-1]
                elif is_patent and "patent" in text.lower():
                    patent_title = f"{text}{patent_title}"
            else:
                skipped.append(f"{key}:{child_type} -> {text}")

        if patent_title and not any(name == "title" for name, _ in fields):
            fields.append(("title", patent_title))
        if maybe_fpage and not fpage:
            fpage = maybe_fpage
        if fpage:
            fields.append(("pages", f"{fpage}--{lpage}" if lpage else fpage))
        if authors:
            fields.append(("author", " and ".join(authors)))
        if editors:
            fields.append(("editor", " and ".join(editors)))
        return fields, skipped

    def entry(self, key: str, cite: GenericNode, log: ConversionLog | None = None) -> str:
        """Render the bibtex entry for *cite* under *key*.

        An entry with no recognised fields counts as unprocessed.
        """
        entry_type = self.entry_type(cite)
        fields, skipped = self.fields(key, cite, entry_type)
        if log is not None:
            if fields:
                log.references.bibtex += 1
                log.lost_items.extend(skipped)
            else:
                log.references.unprocessed += 1
                logger.debug("No bibliographic fields recognised for %s", key)
        return self.engine.render(ENTRY_TEMPLATE, entry_type=entry_type, key=key, fields=fields)


def write_bibliography(entries: list[str], output_dir: Path) -> Path | None:
    """Write ``main.bib`` unless it already exists.

    Returns the written path, or ``None`` if nothing was written.
    """
    path = Path(output_dir) / "main.bib"
    if not entries or path.exists():
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n\n".join(entries), encoding="utf-8")
    logger.info("Wrote %d bibliography entries to %s", len(entries), path)
    return path

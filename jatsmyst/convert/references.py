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


"""Back-matter reference resolution.

Every ``ref`` in the reference list is classified into DOI citations,
synthesized bibliography keys or footnotes.  The resulting lookup maps
each addressable id (ref ids and citation/note ids) to an ordered list
of :class:`ProcessedReference` and is later used to rewrite in-text
``cite`` nodes.

Classification priority for a citation element:

1. an ``ext-link`` or ``[pub-id-type=doi]`` element
2. a DOI-shaped string in any text node
3. a PubMed ID present in the injected PMID -> DOI cache
4. a synthesized bibtex entry keyed by the citation (or ref) id
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from jatsmyst.convert.bibtex import BibtexBuilder
from jatsmyst.convert.models import ConversionLog, ProcessedReference, RefLookup
from jatsmyst.errors import ReferenceResolutionError
from jatsmyst.jats.article import normalize_doi
from jatsmyst.pubmed.pmid import normalize_pmid
from jatsmyst.tree import (
    GenericNode,
    children_of,
    copy_node,
    label_attrs,
    normalize_label,
    rewrite,
    select,
    select_all,
    to_text,
    u,
    walk,
)
from jatsmyst.tree.rewrite import Keep, ReplaceWithChildren

logger = logging.getLogger(__name__)

DOI_URL = "https://doi.org/"
CITATION_TYPES = ("element-citation", "mixed-citation")

_DOI_TEXT_RE = re.compile(r"10.[0-9]+/\S+")
_SUB_KEY_RE = re.compile(r"^[a-z]$")


@dataclass
class ReferenceRegistry:
    """Output of :func:`process_references`."""

    lookup: RefLookup = field(default_factory=dict)
    footnotes: list[GenericNode] = field(default_factory=list)
    bibtex_entries: list[str] = field(default_factory=list)

    def labels_in_order(self, references: list[GenericNode]) -> list[str]:
        """Citation labels in bibliography declaration order.

        A ref without any cite resolution contributes its own id, which is
        what an unresolved in-text citation keeps as its label.
        """
        labels: list[str] = []
        for ref in references:
            ref_id = ref.get("id")
            cites = [r.cite for r in self.lookup.get(ref_id, []) if r.cite]
            for cite in cites or ([ref_id] if ref_id else []):
                normalized = normalize_label(cite)
                label = normalized[0] if normalized else cite
                if label not in labels:
                    labels.append(label)
        return labels


# ---------------------------------------------------------------------------
# Per-citation classification
# ---------------------------------------------------------------------------


def _doi_element(cite: GenericNode) -> GenericNode | None:
    for node, _ in walk(cite):
        if node is cite:
            continue
        if node.get("type") == "ext-link" or node.get("pub-id-type") == "doi":
            return node
    return None


def _pmid_element(cite: GenericNode) -> GenericNode | None:
    return select(cite, attrs={"pub-id-type": "pmid"}, include_self=False)


def process_ref_cite(
    cite: GenericNode,
    fallback_key: str,
    pmid_cache: dict[str, str | None],
    log: ConversionLog,
    bibtex: BibtexBuilder,
) -> tuple[str | None, ProcessedReference, str | None]:
    """Classify one citation element.

    Returns ``(citation id, resolution, bibtex entry or None)``.
    """
    cite_id = cite.get("id")
    key = cite_id or fallback_key
    doi_element = _doi_element(cite)
    if doi_element is not None:
        log.references.dois += 1
        return cite_id, ProcessedReference(cite=f"{DOI_URL}{to_text(doi_element)}"), None
    for text_node in select_all(cite, "text"):
        match = _DOI_TEXT_RE.search(to_text(text_node))
        if match:
            log.references.dois += 1
            return cite_id, ProcessedReference(cite=f"{DOI_URL}{match.group(0)}"), None
    pmid_element = _pmid_element(cite)
    if pmid_element is not None:
        doi = pmid_cache.get(normalize_pmid(to_text(pmid_element)))
        if doi:
            log.references.dois += 1
            return cite_id, ProcessedReference(cite=f"{DOI_URL}{doi}"), None
    entry = bibtex.entry(key, cite, log)
    return cite_id, ProcessedReference(cite=key), entry


def process_ref(
    ref: GenericNode,
    pmid_cache: dict[str, str | None],
    footnote_start: int,
    log: ConversionLog,
    bibtex: BibtexBuilder,
) -> ReferenceRegistry:
    """Process a single ``ref``, which may bundle several citations and notes.

    Raises :class:`ReferenceResolutionError` if *ref* is not a ``ref`` or
    has no id.
    """
    if ref.get("type") != "ref":
        raise ReferenceResolutionError(f"Unexpected type for reference: {ref.get('type')}")
    ref_id = ref.get("id")
    if not ref_id:
        raise ReferenceResolutionError('Encountered "ref" without id')
    registry = ReferenceRegistry(lookup={ref_id: []})
    for child in children_of(ref):
        child_type = child.get("type")
        if child_type in CITATION_TYPES:
            if not to_text(child):
                continue
            cite_id, resolution, entry = process_ref_cite(child, ref_id, pmid_cache, log, bibtex)
            registry.lookup[ref_id].append(resolution)
            if cite_id:
                registry.lookup[cite_id] = [resolution]
            if entry:
                registry.bibtex_entries.append(entry)
        elif child_type == "note":
            fn_id = str(footnote_start + len(registry.footnotes))
            footnote = copy_node(child)
            footnote["type"] = "fn"
            footnote["id"] = fn_id
            resolution = ProcessedReference(footnote=fn_id)
            registry.lookup[ref_id].append(resolution)
            if child.get("id"):
                registry.lookup[child["id"]] = [resolution]
            registry.footnotes.append(footnote)
        elif child_type not in ("label", "text", "comment"):
            log.add_lost_ref(child_type)
    return registry


def _inherit_sub_keys(lookup: RefLookup) -> None:
    keys = list(lookup)
    for key in keys:
        if lookup[key]:
            continue
        for sub_key in keys:
            if sub_key.startswith(key) and _SUB_KEY_RE.match(sub_key[len(key):]):
                lookup[key].extend(lookup[sub_key])


def process_references(
    references: list[GenericNode],
    log: ConversionLog,
    *,
    pmid_cache: dict[str, str | None] | None = None,
    bibtex: BibtexBuilder | None = None,
    body: GenericNode | None = None,
) -> ReferenceRegistry:
    """Build the reference lookup for a document.

    If *body* is given and notes were found, an ``fn-group`` holding the
    synthesized footnotes is appended to it.
    """
    pmid_cache = pmid_cache or {}
    bibtex = bibtex or BibtexBuilder()
    registry = ReferenceRegistry()
    for ref in references:
        processed = process_ref(ref, pmid_cache, len(registry.footnotes) + 1, log, bibtex)
        registry.lookup.update(processed.lookup)
        registry.footnotes.extend(processed.footnotes)
        registry.bibtex_entries.extend(processed.bibtex_entries)
    _inherit_sub_keys(registry.lookup)

    log.references.total = len(references)
    log.references.footnotes = len(registry.footnotes)
    logger.info(
        "Processed %d references: %d DOIs, %d bibtex, %d footnotes, %d unprocessed",
        log.references.total, log.references.dois, log.references.bibtex,
        log.references.footnotes, log.references.unprocessed,
    )
    if registry.footnotes and body is not None:
        body.setdefault("children", []).append(u("fn-group", children=registry.footnotes))
    return registry


# ---------------------------------------------------------------------------
# In-text citation resolution
# ---------------------------------------------------------------------------


def _resolutions_for(cite: GenericNode, lookup: RefLookup) -> list[ProcessedReference]:
    for key in (cite.get("label"), cite.get("identifier")):
        if key and key in lookup:
            return lookup[key]
    label = cite.get("label") or ""
    parts = label.split()
    if len(parts) > 1 and all(part in lookup for part in parts):
        return [resolution for part in parts for resolution in lookup[part]]
    return []


def resolve_citations(tree: GenericNode, lookup: RefLookup) -> int:
    """Replace resolvable ``cite`` nodes with footnote references and a cite group.

    Cites whose id is unknown are left untouched.  Returns the number of
    cites replaced.
    """
    replacements: dict[int, list[GenericNode]] = {}
    for cite in select_all(tree, "cite"):
        resolutions = _resolutions_for(cite, lookup)
        if not resolutions:
            continue
        children = [
            u("footnoteReference", label_attrs(r.footnote)) for r in resolutions if r.footnote
        ]
        cites = [
            u("cite", {"kind": "parenthetical", **label_attrs(r.cite)})
            for r in resolutions
            if r.cite
        ]
        if cites:
            children.append(u("citeGroup", {"kind": "parenthetical"}, cites))
        replacements[id(cite)] = children
    if replacements:
        rewrite(
            tree,
            lambda n: (
                ReplaceWithChildren(replacements[id(n)]) if id(n) in replacements else Keep(n)
            ),
        )
    return len(replacements)


# ---------------------------------------------------------------------------
# Reference summaries
# ---------------------------------------------------------------------------


def _reference_doi(ref: GenericNode) -> str | None:
    for node, _ in walk(ref):
        if node.get("type") == "ext-link" or node.get("pub-id-type") == "doi":
            doi = normalize_doi(to_text(node))
            if doi:
                return doi
    return None


def _text_of(ref: GenericNode, node_type: str) -> str:
    return to_text(select(ref, node_type))


def reference_data(references: list[GenericNode]) -> dict[str, dict[str, str | None]]:
    """HTML summaries and DOIs keyed by ref id, in declaration order."""
    data: dict[str, dict[str, str | None]] = {}
    for ref in references:
        names = ", ".join(
            f"{to_text(select(n, 'surname'))}, {to_text(select(n, 'given-names'))}"
            for n in select_all(ref, ("name", "string-name"))
        )
        doi = _reference_doi(ref)
        doi_link = f' <a href={DOI_URL}{doi}>{doi}</a>' if doi else ""
        html = (
            f"{names}. ({_text_of(ref, 'year')}). {_text_of(ref, 'article-title')}. "
            f"<i>{_text_of(ref, 'source')}</i>, <i>{_text_of(ref, 'volume')}</i>, "
            f"{_text_of(ref, 'fpage')}-{_text_of(ref, 'lpage')}.{doi_link}"
        )
        data[ref.get("id", "")] = {"html": html, "doi": doi}
    return data


def reference_order(body: GenericNode | None) -> list[str]:
    """Ref ids in order of first citation in *body*."""
    order: list[str] = []
    for xref in select_all(body, "xref", {"ref-type": "bibr"}):
        rid = xref.get("rid")
        if rid and rid not in order:
            order.append(rid)
    return order

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

"""End-to-end JATS -> MyST conversion.

:func:`convert_jats` is pure apart from the optional ``main.bib`` side
effect; :func:`convert_file` adds the PMID cache and JSON outputs next to
the source file.

Usage::

    from jatsmyst.convert import ConvertOptions, convert_jats

    result = convert_jats(xml_text, ConvertOptions(output_dir=None))
    result.tree          # MyST root
    result.log.to_dict() # counts and diagnostics
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from jatsmyst.convert.abbreviations import (
    abbreviation_footnote_transform,
    abbreviation_section_transform,
)
from jatsmyst.convert.abstract import abstract_transform, description_from_abstract
from jatsmyst.convert.bibtex import BibtexBuilder, write_bibliography
from jatsmyst.convert.citations import inline_citations_transform
from jatsmyst.convert.emitter import JatsEmitter
from jatsmyst.convert.models import ConversionLog, ConversionResult, ConvertOptions
from jatsmyst.convert.references import (
    process_references,
    reference_data,
    reference_order,
    resolve_citations,
)
from jatsmyst.convert.relocation import (
    back_to_body_transform,
    float_to_end_transform,
    table_footnotes_to_legend,
)
from jatsmyst.convert.sections import data_availability_transform, section_transform
from jatsmyst.convert.typography import (
    admonition_transform,
    citation_to_mixed_citation,
    fig_caption_title_transform,
    typography_transform,
)
from jatsmyst.jats.article import Jats, graphic_to_biorxiv_url
from jatsmyst.pubmed.pmid import PMIDResolver, build_pmid_lookup
from jatsmyst.tree import (
    GenericNode,
    children_of,
    copy_node,
    select,
    select_all,
    to_text,
    u,
)

logger = logging.getLogger(__name__)

FrontmatterMode = Literal["none", "page", "project"]


# ---------------------------------------------------------------------------
# Article identifiers and element counts
# ---------------------------------------------------------------------------


def _license_text(license_node: GenericNode | None) -> str | None:
    if license_node is None:
        return None
    if license_node.get("xlink:href"):
        return license_node["xlink:href"]
    license_ref = select(license_node, "ali:license_ref")
    if license_ref is not None:
        return to_text(license_ref).strip() or None
    links = select_all(license_node, "ext-link")
    if len(links) == 1 and links[0].get("xlink:href"):
        return links[0]["xlink:href"]
    return to_text(license_node).strip() or None


def article_identifiers(jats: Jats) -> dict[str, str | None]:
    """Publisher, journal, ids, year and licence of the article."""
    year = select(jats.publication_date, "year") if jats.publication_date else None
    identifiers = {
        "publisher": to_text(select(jats.front, "publisher-name")).strip() or None,
        "journal": jats.journal_title,
        "pmid": jats.pmid,
        "pmc": jats.pmc,
        "doi": jats.doi,
        "year": to_text(year).strip() or None,
        "license": _license_text(jats.license),
    }
    logger.info(
        "Converting %s (doi=%s, pmc=%s)",
        jats.source or "JATS article", identifiers["doi"], identifiers["pmc"],
    )
    return identifiers


def _count(jats: Jats, myst: GenericNode, jats_type: str, myst_type: str,
           attrs: dict[str, Any] | None = None) -> dict[str, int]:
    return {
        "body": len(select_all(jats.body, jats_type)),
        "back": len(select_all(jats.back, jats_type)),
        "myst": len(select_all(myst, myst_type, attrs)),
    }


def element_counts(jats: Jats, myst: GenericNode) -> dict[str, Any]:
    """Compare element counts in the source article against the MyST tree."""
    return {
        "figures": _count(jats, myst, "fig", "container", {"kind": "figure"}),
        "tables": _count(jats, myst, "table-wrap", "container", {"kind": "table"}),
        "math": {
            "inline": _count(jats, myst, "inline-formula", "inlineMath"),
            "equations": _count(jats, myst, "disp-formula", "math"),
        },
        "footnotes": _count(jats, myst, "fn", "footnoteDefinition"),
    }


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _normalize(tree: GenericNode) -> None:
    data_availability_transform(tree)
    section_transform(tree)
    typography_transform(tree)
    admonition_transform(tree)
    fig_caption_title_transform(tree)


def _assemble(jats: Jats, body: GenericNode, options: ConvertOptions) -> GenericNode:
    children: list[GenericNode] = []
    abstract = jats.abstract
    if abstract is not None:
        abstract_transform(abstract)
        children.append(
            u("block", {"part": options.abstract_part}, copy_node(children_of(abstract)))
        )
    children.extend(copy_node(children_of(body)))
    for group in select_all(jats.tree, "floats-group"):
        children.extend(copy_node(children_of(group)))
    return u("root", children=children)


def _abstract_description(myst: GenericNode, part: str) -> str | None:
    for block in select_all(myst, "block"):
        if (block.get("data") or {}).get("part") == part:
            return description_from_abstract(to_text(block)) or None
    return None


def convert_jats(data: str | bytes | Jats, options: ConvertOptions | None = None
                 ) -> ConversionResult:
    """Convert one JATS article into a MyST tree, frontmatter and bibliography.

    Args:
        data: Raw XML or an already-parsed :class:`Jats`.
        options: Conversion options; defaults apply when omitted.

    Returns:
        A :class:`ConversionResult`.  Non-fatal problems are reported in
        ``result.log.diagnostics`` rather than raised.

    Raises:
        JatsParseError: *data* is not a single JATS article.
    """
    options = options or ConvertOptions()
    jats = data if isinstance(data, Jats) else Jats(data)
    log = ConversionLog()
    log.identifiers = article_identifiers(jats)
    frontmatter = jats.frontmatter

    body = jats.body
    if body is None:
        body = u("body", children=[])
        jats.tree.setdefault("children", []).append(body)

    citation_to_mixed_citation(jats.tree)
    registry = process_references(
        jats.references,
        log,
        pmid_cache=options.pmid_cache,
        bibtex=BibtexBuilder.with_template_dir(options.template_dir),
        body=body,
    )
    if registry.bibtex_entries and options.write_bibtex and options.output_dir:
        write_bibliography(registry.bibtex_entries, options.output_dir)

    back_to_body_transform(body, jats.back)
    float_to_end_transform(body)
    tree = _assemble(jats, body, options)
    _normalize(tree)
    graphic_to_biorxiv_url(jats.tree, tree)

    emitter = JatsEmitter(options, log)
    emitter.render_children(tree)
    myst = emitter.finish()

    references = {
        "order": reference_order(body),
        "data": reference_data(jats.references),
    }
    resolve_citations(myst, registry.lookup)
    inline_citations_transform(myst, registry.labels_in_order(jats.references))
    table_footnotes_to_legend(myst)
    abbreviation_section_transform(myst, frontmatter)
    abbreviation_footnote_transform(myst, frontmatter)
    frontmatter.description = _abstract_description(myst, options.abstract_part)
    log.elements = element_counts(jats, myst)

    return ConversionResult(
        tree=myst,
        frontmatter=frontmatter,
        references=references,
        bibtex_entries=registry.bibtex_entries,
        log=log,
        jats=jats,
        ref_lookup=registry.lookup,
    )


# ---------------------------------------------------------------------------
# File conversion
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %s", path)


def _merge_project_frontmatter(directory: Path, frontmatter: dict[str, Any]) -> Path:
    path = directory / "myst.json"
    previous: dict[str, Any] = {}
    if path.exists():
        previous = json.loads(path.read_text(encoding="utf-8"))
    project = {**(previous.get("project") or {}), **frontmatter}
    _write_json(path, {"version": 1, "project": project, "site": previous.get("site") or {}})
    return path


def convert_file(
    path: str | Path,
    *,
    frontmatter: FrontmatterMode = "none",
    fetch_dois: bool = False,
    resolver: PMIDResolver | None = None,
    options: ConvertOptions | None = None,
) -> ConversionResult:
    """Convert *path* and write ``<name>.myst.json`` and ``<name>.log.json`` beside it.

    With ``fetch_dois`` unseen PubMed ids are resolved through *resolver*
    (a default :class:`PMIDResolver` when omitted) and cached under
    ``_build/cache``.  ``frontmatter="page"`` embeds the frontmatter in the
    page output; ``"project"`` merges it into ``myst.json``.
    """
    if frontmatter not in ("none", "page", "project"):
        raise ValueError(f"Unknown frontmatter mode: {frontmatter!r}")
    path = Path(path)
    directory = path.parent
    jats = Jats(path.read_bytes(), source=str(path))

    if fetch_dois and resolver is None:
        resolver = PMIDResolver()
    pmid_cache = build_pmid_lookup(
        jats.references, directory, resolver if fetch_dois else None
    )
    options = options or ConvertOptions(output_dir=directory)
    options.pmid_cache = {**pmid_cache, **options.pmid_cache}

    result = convert_jats(jats, options)
    stem = path.stem
    _write_json(directory / f"{stem}.log.json", result.log.to_dict())

    page: dict[str, Any] = {"mdast": result.tree}
    if frontmatter == "page":
        page["frontmatter"] = result.frontmatter.to_dict()
    elif frontmatter == "project":
        _merge_project_frontmatter(directory, result.frontmatter.to_dict())
    _write_json(directory / f"{stem}.myst.json", page)
    return result

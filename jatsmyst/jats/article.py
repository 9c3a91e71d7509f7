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


"""Accessor over a parsed JATS article.

Usage::

    from jatsmyst.jats import Jats

    jats = Jats(Path("article.xml").read_text())
    jats.body, jats.references, jats.frontmatter.title
"""

from __future__ import annotations

import datetime
import logging
import re
import xml.etree.ElementTree as ET

from jatsmyst.errors import JatsParseError
from jatsmyst.jats.models import Affiliation, Author, Frontmatter
from jatsmyst.tree import (
    GenericNode,
    children_of,
    copy_node,
    remove_nodes,
    select,
    select_all,
    to_text,
)
from jatsmyst.tree.xml import parse_xml

logger = logging.getLogger(__name__)

DOI_RE = re.compile(r"^10\.\d{4,9}/\S+$")
_DOI_PREFIX_RE = re.compile(r"^(?:https?://)?(?:dx\.)?(?:doi\.org/|doi:\s*)", re.IGNORECASE)
_ORCID_PREFIX_RE = re.compile(r"(https?://)?orcid\.org/")

MONTHS = {
    name: number
    for number, names in enumerate(
        [
            ("jan", "january"), ("feb", "february"), ("mar", "march"),
            ("apr", "april"), ("may",), ("jun", "june"), ("jul", "july"),
            ("aug", "august"), ("sep", "sept", "september"), ("oct", "october"),
            ("nov", "november"), ("dec", "december"),
        ],
        start=1,
    )
    for name in names
}


# ---------------------------------------------------------------------------
# Identifier and date helpers
# ---------------------------------------------------------------------------


def normalize_doi(value: str | None) -> str | None:
    """Strip resolver prefixes; return ``None`` unless the result is DOI-shaped."""
    if not value:
        return None
    candidate = _DOI_PREFIX_RE.sub("", value.strip())
    return candidate if DOI_RE.match(candidate) else None


def find_article_id(node: GenericNode | None, pub_id_type: str = "doi") -> str | None:
    """Return the text of the first ``[pub-id-type=<type>]`` element.

    Falls back to any ``article-id`` / ``pub-id`` whose text is a DOI.
    """
    if not node:
        return None
    typed = select(node, attrs={"pub-id-type": pub_id_type})
    if typed and to_text(typed):
        return to_text(typed)
    for candidate in select_all(node, ("article-id", "pub-id")):
        if normalize_doi(to_text(candidate)):
            return to_text(candidate)
    return None


def to_date(node: GenericNode | None) -> datetime.date | None:
    """Convert a JATS ``pub-date`` / ``date`` element into a date."""
    if not node:
        return None
    iso = node.get("iso-8601-date")
    if iso:
        try:
            return datetime.date.fromisoformat(iso[:10])
        except ValueError:
            logger.debug("Ignoring malformed iso-8601-date %r", iso)
    try:
        year = int(to_text(select(node, "year")).strip())
    except ValueError:
        return None
    month_text = to_text(select(node, "month")).strip()
    if month_text.isdigit():
        month = int(month_text)
    else:
        month = MONTHS.get(month_text.lower().rstrip("."), 0)
    if not 1 <= month <= 12:
        return datetime.date(year, 1, 1)
    day_text = to_text(select(node, "day")).strip()
    try:
        return datetime.date(year, month, int(day_text))
    except ValueError:
        return datetime.date(year, month, 1)


def _trimmed(content: GenericNode | list[GenericNode] | None) -> str | None:
    text = to_text(content)
    text = re.sub(r"[\s;,]+$", "", re.sub(r"^[\s;,]+", "", text))
    return text or None


# ---------------------------------------------------------------------------
# Contributors and affiliations
# ---------------------------------------------------------------------------


def process_contributor(contrib: GenericNode) -> Author:
    given = to_text(select(contrib, "given-names"))
    surname = to_text(select(contrib, "surname"))
    name = f"{given} {surname}".strip() or (_trimmed(select(contrib, "collab")) or "")
    author = Author(name=name)
    orcid = select(contrib, attrs={"contrib-id-type": "orcid"})
    if orcid:
        author.orcid = _ORCID_PREFIX_RE.sub("", to_text(orcid))
    author.affiliations = [
        xref["rid"] for xref in select_all(contrib, "xref", {"ref-type": "aff"}) if xref.get("rid")
    ]
    return author


def _by_content_type(nodes: list[GenericNode], content_type: str) -> GenericNode | None:
    return next((n for n in nodes if n.get("content-type") == content_type), None)


def process_affiliation(aff: GenericNode) -> Affiliation:
    """Split an ``aff`` element into institution / department / address parts.

    Works on a copy; the document tree is left untouched.
    """
    aff = copy_node(aff)
    ror = _trimmed(select(aff, "institution-id", {"institution-id-type": "ror"}))
    isni = _trimmed(select(aff, "institution-id", {"institution-id-type": "ISNI"}))
    remove_nodes(aff, select_all(aff, "institution-id"))

    institutions = select_all(aff, "institution")
    named = select_all(aff, "named-content")
    address_nodes = select_all(aff, "addr-line")
    address_lines = [line for line in (_trimmed(n) for n in address_nodes) if line]
    department_node = _by_content_type(institutions, "dept") or _by_content_type(
        named, "organisation-division"
    )
    country_node = select(aff, "country") or _by_content_type(named, "country")
    consumed = [*address_nodes, *named, country_node, department_node]
    remove_nodes(aff, [n for n in consumed if n is not None])

    remaining = [child for child in children_of(aff) if child.get("type") != "label"]
    if all(child.get("type") in ("text", "institution-wrap", "institution") for child in remaining):
        institution = _trimmed(remaining)
    else:
        institution = _trimmed(
            next((i for i in institutions if i.get("content-type") != "dept"), None)
        )

    department = (
        _trimmed(department_node)
        if department_node
        else next((line for line in address_lines if "department" in line.lower()), None)
    )
    street = _by_content_type(named, "street")
    address = (
        _trimmed(street)
        if street
        else next((line for line in address_lines if "department" not in line.lower()), None)
    )
    if address and not institution:
        institution, address = address, None
    if department and not institution:
        institution, department = department, None
    return Affiliation(
        id=aff.get("id", ""),
        institution=institution,
        department=department,
        address=address,
        city=_trimmed(_by_content_type(named, "city")),
        state=_trimmed(_by_content_type(named, "country-part")),
        postal_code=_trimmed(_by_content_type(named, "post-code")),
        country=_trimmed(country_node),
        ror=ror,
        isni=isni,
    )


# ---------------------------------------------------------------------------
# Journal-specific transforms
# ---------------------------------------------------------------------------


def is_biorxiv(tree: GenericNode | None) -> bool:
    journal_id = select(tree, "journal-id", {"journal-id-type": "hwp"})
    return to_text(journal_id) == "biorxiv"


def graphic_to_biorxiv_url(tree: GenericNode | None, body: GenericNode | None = None) -> int:
    """Point hwp-identified figure graphics at the biorxiv image server.

    Article metadata is read from *tree*; figures are rewritten in *body*
    (defaults to *tree*).  Returns the number of graphics rewritten.
    """
    if not is_biorxiv(tree):
        return 0
    accepted = select(tree, "date", {"date-type": "accepted"})
    if not accepted:
        return 0
    year = to_text(select(accepted, "year")).strip()
    month = to_text(select(accepted, "month")).strip().zfill(2)
    day = to_text(select(accepted, "day")).strip().zfill(2)
    doi = to_text(select(tree, "article-id", {"pub-id-type": "doi"}))
    slug = "/".join(doi.split("/")[1:])
    base = f"https://www.biorxiv.org/content/biorxiv/early/{year}/{month}/{day}/{slug}"
    rewritten = 0
    for node in select_all(body if body is not None else tree, ("fig", "table-wrap")):
        fig_id = node.get("hwp:id")
        graphic = select(node, "graphic") if fig_id else None
        if not graphic:
            continue
        url = f"{base}/{fig_id}.large.jpg"
        logger.debug("Replacing %s -> %s", graphic.get("xlink:href"), url)
        graphic["xlink:href"] = url
        rewritten += 1
    return rewritten


# ---------------------------------------------------------------------------
# Accessor
# ---------------------------------------------------------------------------


def _elements(node: GenericNode) -> list[GenericNode]:
    return [c for c in children_of(node) if c.get("type") not in ("text", "comment")]


def _single_article(root: GenericNode) -> GenericNode | None:
    if root.get("type") == "article":
        return root
    if root.get("type") == "pmc-articleset":
        elements = _elements(root)
        if len(elements) == 1 and elements[0].get("type") == "article":
            return elements[0]
    return None


class Jats:
    """Constant-time accessors over a single JATS ``<article>``.

    Raises :class:`JatsParseError` if *data* is not XML or does not hold
    exactly one article.
    """

    def __init__(self, data: str | bytes, source: str | None = None) -> None:
        self.source = source
        try:
            root = parse_xml(data)
        except ET.ParseError as exc:
            raise JatsParseError(
                f"Problem parsing the JATS document, please ensure it is XML: {exc}"
            ) from exc
        article = _single_article(root)
        if article is None:
            raise JatsParseError("JATS must be structured as a single <article>")
        self.tree: GenericNode = article

    # --- structure ---

    @property
    def front(self) -> GenericNode | None:
        return select(self.tree, "front")

    @property
    def article_meta(self) -> GenericNode | None:
        return select(self.front, "article-meta")

    @property
    def body(self) -> GenericNode | None:
        return select(self.tree, "body")

    @property
    def back(self) -> GenericNode | None:
        return select(self.tree, "back")

    @property
    def ref_list(self) -> GenericNode | None:
        return select(self.back, "ref-list")

    @property
    def references(self) -> list[GenericNode]:
        return select_all(self.ref_list, "ref")

    @property
    def abstract(self) -> GenericNode | None:
        return select(self.front, "abstract")

    @property
    def abstracts(self) -> list[GenericNode]:
        return select_all(self.front, "abstract")

    @property
    def permissions(self) -> GenericNode | None:
        return select(self.front, "permissions")

    # --- metadata ---

    @property
    def title_group(self) -> GenericNode | None:
        return select(self.front, "title-group")

    @property
    def title(self) -> str | None:
        return to_text(select(self.title_group, "article-title")) or None

    @property
    def subtitle(self) -> str | None:
        return to_text(select(self.title_group, "subtitle")) or None

    @property
    def short_title(self) -> str | None:
        return to_text(select(self.title_group, "alt-title")) or None

    @property
    def doi(self) -> str | None:
        return normalize_doi(find_article_id(self.front, "doi"))

    @property
    def pmc(self) -> str | None:
        pmc = find_article_id(self.front, "pmc")
        return re.sub(r"^PMC:?", "", pmc) if pmc else None

    @property
    def pmid(self) -> str | None:
        return find_article_id(self.front, "pmid")

    @property
    def publication_dates(self) -> list[GenericNode]:
        return select_all(self.front, "pub-date")

    @property
    def publication_date(self) -> GenericNode | None:
        """The first ``pub-date`` that specifies a day."""
        return next((d for d in self.publication_dates if select(d, "day")), None)

    @property
    def license(self) -> GenericNode | None:
        return select(self.permissions, "license")

    @property
    def keywords(self) -> list[str]:
        group = select(self.front, "kwd-group")
        return [to_text(k) for k in select_all(group, "kwd")]

    @property
    def journal_title(self) -> str | None:
        return to_text(select(self.front, "journal-title")) or None

    @property
    def subject(self) -> str | None:
        categories = select(self.front, "article-categories") or self.front
        return to_text(select(categories, "subject")) or None

    @property
    def authors(self) -> list[GenericNode]:
        contribs: list[GenericNode] = []
        for group in select_all(self.front, "contrib-group"):
            contribs.extend(select_all(group, "contrib", include_self=False))
        return [c for c in contribs if c.get("contrib-type") in (None, "", "author")]

    @property
    def affiliations(self) -> list[GenericNode]:
        return [aff for aff in select_all(self.front, "aff") if aff.get("id")]

    @property
    def frontmatter(self) -> Frontmatter:
        date = to_date(self.publication_date)
        return Frontmatter(
            title=self.title,
            subtitle=self.subtitle,
            short_title=self.short_title,
            doi=self.doi,
            date=date.isoformat() if date else None,
            authors=[process_contributor(c) for c in self.authors],
            affiliations=[process_affiliation(a) for a in self.affiliations],
            keywords=self.keywords,
            venue=self.journal_title,
            subject=self.subject,
        )

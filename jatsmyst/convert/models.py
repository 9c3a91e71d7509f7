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


"""Options, per-conversion accumulator and result types.

A :class:`ConversionLog` is created for every conversion and threaded
through each pass; nothing is stored at module level.

Usage::

    log = ConversionLog()
    log.warn("Unknown ref-type of custom", source="xref", node_type="xref")
    log.to_dict()["diagnostics"]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jatsmyst.jats.models import Frontmatter
from jatsmyst.tree import GenericNode

if TYPE_CHECKING:
    from jatsmyst.jats.article import Jats

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass
class ConvertOptions:
    """Caller-supplied configuration for a single conversion.

    Args:
        pmid_cache: PubMed ID -> DOI lookup (``None`` marks a known miss).
        output_dir: Directory for ``main.bib``; ``None`` disables writing.
        write_bibtex: Write ``main.bib`` when entries were synthesized and
            the file does not exist yet.
        mathml_to_latex: Converter used for formulas without ``tex-math``.
        template_dir: User override directory for the bibliography template.
        abstract_part: ``part`` given to the abstract block.
    """

    pmid_cache: dict[str, str | None] = field(default_factory=dict)
    output_dir: Path | None = None
    write_bibtex: bool = True
    mathml_to_latex: Callable[[str], str] | None = None
    template_dir: Path | None = None
    abstract_part: str = "abstract"

    def to_dict(self) -> dict[str, Any]:
        return {
            "pmid_cache": dict(self.pmid_cache),
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "write_bibtex": self.write_bibtex,
            "template_dir": str(self.template_dir) if self.template_dir else None,
            "abstract_part": self.abstract_part,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConvertOptions:
        output_dir = data.get("output_dir")
        template_dir = data.get("template_dir")
        return cls(
            pmid_cache=dict(data.get("pmid_cache") or {}),
            output_dir=Path(output_dir) if output_dir else None,
            write_bibtex=data.get("write_bibtex", True),
            mathml_to_latex=data.get("mathml_to_latex"),
            template_dir=Path(template_dir) if template_dir else None,
            abstract_part=data.get("abstract_part", "abstract"),
        )


# ---------------------------------------------------------------------------
# Diagnostics accumulator
# ---------------------------------------------------------------------------


@dataclass
class Diagnostic:
    """A warning or error attached to the converted document."""

    level: str  # "warning", "error"
    message: str
    source: str = "jatsmyst"
    node_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"level": self.level, "message": self.message, "source": self.source}
        if self.node_type:
            d["node_type"] = self.node_type
        return d


@dataclass
class ReferenceCounts:
    total: int = 0
    dois: int = 0
    bibtex: int = 0
    footnotes: int = 0
    unprocessed: int = 0


@dataclass
class ConversionLog:
    """Counts and diagnostics collected during one conversion."""

    references: ReferenceCounts = field(default_factory=ReferenceCounts)
    lost_refs: list[str] = field(default_factory=list)
    lost_items: list[str] = field(default_factory=list)
    unhandled: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    identifiers: dict[str, str | None] = field(default_factory=dict)
    elements: dict[str, Any] = field(default_factory=dict)

    def warn(
        self, message: str, *, source: str = "jatsmyst", node_type: str | None = None,
    ) -> None:
        logger.warning("%s: %s", source, message)
        self.diagnostics.append(Diagnostic("warning", message, source, node_type))

    def error(
        self, message: str, *, source: str = "jatsmyst", node_type: str | None = None,
    ) -> None:
        logger.error("%s: %s", source, message)
        self.diagnostics.append(Diagnostic("error", message, source, node_type))

    def add_unhandled(self, node_type: str) -> None:
        if node_type not in self.unhandled:
            self.unhandled.append(node_type)

    def add_lost_ref(self, node_type: str) -> None:
        if node_type not in self.lost_refs:
            self.lost_refs.append(node_type)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == "warning"]

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = dict(self.identifiers)
        d["references"] = {
            "total": self.references.total,
            "dois": self.references.dois,
            "bibtex": self.references.bibtex,
            "footnotes": self.references.footnotes,
            "unprocessed": self.references.unprocessed,
        }
        if self.lost_refs:
            d["lostRefs"] = list(self.lost_refs)
        if self.lost_items:
            d["lostItems"] = list(self.lost_items)
        if self.unhandled:
            d["unhandled"] = list(self.unhandled)
        if self.diagnostics:
            d["diagnostics"] = [diag.to_dict() for diag in self.diagnostics]
        d.update(self.elements)
        return d


# ---------------------------------------------------------------------------
# Reference resolution and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessedReference:
    """One resolution of a back-matter citation: a cite key/URL or a footnote id."""

    cite: str | None = None
    footnote: str | None = None


RefLookup = dict[str, list[ProcessedReference]]


@dataclass
class ConversionResult:
    """Everything produced by :func:`jatsmyst.convert.convert_jats`."""

    tree: GenericNode
    frontmatter: Frontmatter
    references: dict[str, Any]
    bibtex_entries: list[str]
    log: ConversionLog
    jats: Jats
    ref_lookup: RefLookup = field(default_factory=dict)

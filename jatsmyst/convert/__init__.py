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

"""JATS -> MyST conversion: normalisation passes, emitter and pipeline."""

from jatsmyst.convert.abbreviations import (
    abbreviation_footnote_transform,
    abbreviation_section_transform,
    abbreviations_from_text,
    abbreviations_from_tree,
    parse_abbreviations,
)
from jatsmyst.convert.abstract import abstract_transform, description_from_abstract
from jatsmyst.convert.bibtex import BibtexBuilder, write_bibliography
from jatsmyst.convert.citations import inline_citations_transform
from jatsmyst.convert.emitter import HANDLERS, JatsEmitter, JatsTag
from jatsmyst.convert.models import (
    ConversionLog,
    ConversionResult,
    ConvertOptions,
    Diagnostic,
    ProcessedReference,
    ReferenceCounts,
)
from jatsmyst.convert.pipeline import (
    article_identifiers,
    convert_file,
    convert_jats,
    element_counts,
)
from jatsmyst.convert.references import (
    ReferenceRegistry,
    process_ref,
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
from jatsmyst.convert.sections import (
    block_nesting_transform,
    data_availability_transform,
    section_transform,
)
from jatsmyst.convert.typography import (
    admonition_transform,
    citation_to_mixed_citation,
    fig_caption_title_transform,
    typography_transform,
)

__all__ = [
    "BibtexBuilder",
    "ConversionLog",
    "ConversionResult",
    "ConvertOptions",
    "Diagnostic",
    "HANDLERS",
    "JatsEmitter",
    "JatsTag",
    "ProcessedReference",
    "ReferenceCounts",
    "ReferenceRegistry",
    "abbreviation_footnote_transform",
    "abbreviation_section_transform",
    "abbreviations_from_text",
    "abbreviations_from_tree",
    "abstract_transform",
    "admonition_transform",
    "article_identifiers",
    "back_to_body_transform",
    "block_nesting_transform",
    "citation_to_mixed_citation",
    "convert_file",
    "convert_jats",
    "data_availability_transform",
    "description_from_abstract",
    "element_counts",
    "fig_caption_title_transform",
    "float_to_end_transform",
    "inline_citations_transform",
    "parse_abbreviations",
    "process_ref",
    "process_references",
    "reference_data",
    "reference_order",
    "resolve_citations",
    "section_transform",
    "table_footnotes_to_legend",
    "typography_transform",
    "write_bibliography",
]

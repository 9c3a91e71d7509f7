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


"""PubMed ID -> DOI lookups (NCBI ID converter client and JSON disk cache)."""

from jatsmyst.pubmed.pmid import (
    PMIDResolver,
    build_pmid_lookup,
    load_pmid_cache,
    normalize_pmid,
    pmid_cache_file,
    pmids_from_references,
    save_pmid_cache,
)

__all__ = [
    "PMIDResolver",
    "build_pmid_lookup",
    "load_pmid_cache",
    "normalize_pmid",
    "pmid_cache_file",
    "pmids_from_references",
    "save_pmid_cache",
]

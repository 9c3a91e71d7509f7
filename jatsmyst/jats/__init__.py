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


"""JATS article accessor and front-matter extraction."""

from jatsmyst.jats.article import (
    DOI_RE,
    Jats,
    find_article_id,
    graphic_to_biorxiv_url,
    is_biorxiv,
    normalize_doi,
    process_affiliation,
    process_contributor,
    to_date,
)
from jatsmyst.jats.models import Affiliation, Author, Frontmatter

__all__ = [
    "Affiliation",
    "Author",
    "DOI_RE",
    "Frontmatter",
    "Jats",
    "find_article_id",
    "graphic_to_biorxiv_url",
    "is_biorxiv",
    "normalize_doi",
    "process_affiliation",
    "process_contributor",
    "to_date",
]

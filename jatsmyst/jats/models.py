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


"""Article-level metadata extracted from the JATS front matter."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "", [], {})}


@dataclass
class Author:
    """A contributor of type ``author`` (or untyped)."""

    name: str
    orcid: str | None = None
    affiliations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(asdict(self))


@dataclass
class Affiliation:
    """An ``aff`` element with an id."""

    id: str
    institution: str | None = None
    department: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    ror: str | None = None
    isni: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(asdict(self))


@dataclass
class Frontmatter:
    """Document metadata that accompanies the converted tree."""

    title: str | None = None
    subtitle: str | None = None
    short_title: str | None = None
    doi: str | None = None
    date: str | None = None  # YYYY-MM-DD
    authors: list[Author] = field(default_factory=list)
    affiliations: list[Affiliation] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    venue: str | None = None
    subject: str | None = None
    abbreviations: dict[str, str] = field(default_factory=dict)
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "title": self.title,
            "subtitle": self.subtitle,
            "short_title": self.short_title,
            "doi": self.doi,
            "date": self.date,
            "authors": [a.to_dict() for a in self.authors],
            "affiliations": [a.to_dict() for a in self.affiliations],
            "keywords": list(self.keywords),
            "venue": {"title": self.venue} if self.venue else None,
            "subject": self.subject,
            "abbreviations": dict(self.abbreviations),
            "description": self.description,
        }
        return _drop_empty(d)

    def merge_abbreviations(self, extracted: dict[str, str]) -> None:
        """Add *extracted* entries; existing entries win on collision."""
        for abbr, title in extracted.items():
            self.abbreviations.setdefault(abbr, title)

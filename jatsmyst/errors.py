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

"""Exception types raised by jatsmyst.

Only structurally impossible input raises; everything else is reported
through :class:`jatsmyst.convert.models.ConversionLog` diagnostics.
"""

from __future__ import annotations


class JatsMystError(Exception):
    """Base class for all jatsmyst errors."""


class JatsParseError(JatsMystError):
    """Input is not XML, or is not shaped like a single JATS article."""


class ReferenceResolutionError(JatsMystError):
    """A back-matter reference cannot be addressed (e.g. ``ref`` without id)."""


class ValidationError(JatsMystError):
    """Invalid DTD validation options or missing local DTD files."""


class PMIDLookupError(JatsMystError):
    """A PubMed ID conversion response could not be used."""

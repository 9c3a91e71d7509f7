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

"""jatsmyst: convert JATS XML articles into MyST document trees.

Usage::

    from jatsmyst import convert_jats

    result = convert_jats(open("article.xml", "rb").read())
    result.tree, result.frontmatter.to_dict(), result.log.to_dict()
"""

from jatsmyst.convert import ConversionResult, ConvertOptions, convert_file, convert_jats
from jatsmyst.errors import (
    JatsMystError,
    JatsParseError,
    PMIDLookupError,
    ReferenceResolutionError,
    ValidationError,
)
from jatsmyst.jats import Frontmatter, Jats

__version__ = "0.1.0"

__all__ = [
    "ConversionResult",
    "ConvertOptions",
    "Frontmatter",
    "Jats",
    "JatsMystError",
    "JatsParseError",
    "PMIDLookupError",
    "ReferenceResolutionError",
    "ValidationError",
    "convert_file",
    "convert_jats",
]

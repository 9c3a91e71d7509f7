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

"""DTD validation of JATS articles and MECA bundles (lxml)."""

from jatsmyst.validate.dtd import (
    JATS_LIBRARIES,
    JATS_VERSIONS,
    MATHML_VERSIONS,
    DtdValidationResult,
    JatsDtdOptions,
    default_dtd_directory,
    infer_dtd_options,
    validate_against_dtd,
    validate_jats_against_dtd,
)
from jatsmyst.validate.meca import (
    KNOWN_ITEM_TYPES,
    MANIFEST,
    ItemType,
    ManifestItem,
    MecaValidationResult,
    read_manifest,
    validate_meca,
)

__all__ = [
    "DtdValidationResult",
    "ItemType",
    "JATS_LIBRARIES",
    "JATS_VERSIONS",
    "JatsDtdOptions",
    "KNOWN_ITEM_TYPES",
    "MANIFEST",
    "MATHML_VERSIONS",
    "ManifestItem",
    "MecaValidationResult",
    "default_dtd_directory",
    "infer_dtd_options",
    "read_manifest",
    "validate_against_dtd",
    "validate_jats_against_dtd",
    "validate_meca",
]

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

"""MECA bundle validation.

A MECA bundle is a zip archive holding a ``manifest.xml`` that lists
every item of a manuscript transfer.  Checks performed, in order:

- the file exists and is a zip archive
- ``manifest.xml`` is present (and valid against a manifest DTD, if given)
- every manifest item is in the archive (extra archive entries only warn)
- items carry a media type and a known item type (warnings)
- every ``article-metadata`` item validates against its JATS DTD
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from lxml import etree

from jatsmyst.errors import ValidationError
from jatsmyst.validate.dtd import (
    JatsDtdOptions,
    validate_against_dtd,
    validate_jats_against_dtd,
)

logger = logging.getLogger(__name__)

MANIFEST = "manifest.xml"
XLINK_HREF = "{http://www.w3.org/1999/xlink}href"


class ItemType(StrEnum):
    ARTICLE_METADATA = "article-metadata"
    ARTICLE_SUPPORTING_FILE = "article-supporting-file"
    MANUSCRIPT = "manuscript"
    MANUSCRIPT_SUPPORTING_FILE = "manuscript-supporting-file"
    ARTICLE_SOURCE = "article-source"
    ARTICLE_SOURCE_ENVIRONMENT = "article-source-environment"
    ARTICLE_SOURCE_DIRECTORY = "article-source-directory"
    TRANSFER_METADATA = "transfer-metadata"


KNOWN_ITEM_TYPES = frozenset(t.value for t in ItemType)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


@dataclass
class ManifestItem:
    href: str
    item_type: str | None = None
    media_type: str | None = None
    id: str | None = None
    version: str | None = None
    title: str | None = None
    description: str | None = None
    file_order: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


def _local(element: etree._Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def _children(element: etree._Element, name: str) -> list[etree._Element]:
    return [child for child in element.iter() if child is not element and _local(child) == name]


def _child_text(element: etree._Element, name: str) -> str | None:
    found = _children(element, name)
    if not found or found[0].text is None:
        return None
    return found[0].text.strip() or None


def read_manifest(data: bytes) -> list[ManifestItem]:
    """Parse ``manifest.xml`` into items; items without an ``instance`` are skipped.

    Raises :class:`lxml.etree.XMLSyntaxError` if *data* is not XML.
    """
    parser = etree.XMLParser(load_dtd=False, no_network=True, resolve_entities=False)
    root = etree.fromstring(data, parser)
    items: list[ManifestItem] = []
    for item in _children(root, "item"):
        instances = _children(item, "instance")
        if not instances:
            logger.warning("Manifest item without an instance: %s", item.get("id"))
            continue
        if len(instances) > 1:
            logger.warning("Manifest item has multiple instances, only the first is used")
        instance = instances[0]
        href = instance.get(XLINK_HREF) or instance.get("href")
        if not href:
            continue
        metadata = {
            (m.get("metadata-name") or m.get("name") or ""): (m.text or "").strip()
            for m in _children(item, "metadata")
        }
        items.append(ManifestItem(
            href=href,
            item_type=item.get("item-type"),
            media_type=instance.get("media-type"),
            id=item.get("id"),
            version=item.get("item-version") or item.get("version"),
            title=_child_text(item, "item-title"),
            description=_child_text(item, "item-description"),
            file_order=_child_text(item, "file-order"),
            metadata=metadata,
        ))
    return items


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class MecaValidationResult:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    items: list[ManifestItem] = field(default_factory=list)

    def error(self, message: str) -> MecaValidationResult:
        logger.error(message)
        self.errors.append(message)
        self.valid = False
        return self

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _archive_names(archive: zipfile.ZipFile) -> set[str]:
    """Every file name plus every implied parent folder in *archive*."""
    names: set[str] = set()
    for name in archive.namelist():
        parts = name.rstrip("/").split("/")
        for i in range(1, len(parts) + 1):
            names.add("/".join(parts[:i]))
    return names


def validate_meca(
    path: str | Path,
    options: JatsDtdOptions | None = None,
    manifest_dtd: str | Path | None = None,
) -> MecaValidationResult:
    """Validate the MECA bundle at *path*.

    Args:
        path: The ``.meca`` / ``-meca.zip`` file.
        options: DTD options for the JATS items; inferred per item when omitted.
        manifest_dtd: Local manifest DTD; the manifest is only checked
            structurally when omitted.

    Returns:
        A :class:`MecaValidationResult`; ``valid`` is ``False`` if any
        error was recorded.
    """
    result = MecaValidationResult()
    path = Path(path)
    if not path.exists():
        return result.error(f"Input file does not exist: {path}")
    if not (path.name.endswith(".meca") or path.name.endswith("-meca.zip")):
        result.warn("Some providers may require a file ending with '.meca' or '-meca.zip'")
    if not zipfile.is_zipfile(path):
        return result.error(f"Input file is not a zip archive: {path}")
    logger.debug("%s is a zip archive", path)

    with zipfile.ZipFile(path) as archive:
        if MANIFEST not in archive.namelist():
            return result.error(
                f"Input zip archive does not include required manifest file '{MANIFEST}'"
            )
        manifest_data = archive.read(MANIFEST)
        if manifest_dtd is not None:
            try:
                manifest_valid = validate_against_dtd(manifest_data, Path(manifest_dtd)).valid
            except ValidationError as exc:
                return result.error(str(exc))
            if not manifest_valid:
                return result.error(f"{MANIFEST} DTD validation failed")
            logger.debug("%s passes DTD validation", MANIFEST)
        try:
            result.items = read_manifest(manifest_data)
        except etree.XMLSyntaxError as exc:
            return result.error(f"{MANIFEST} is not valid XML: {exc}")

        hrefs = [item.href for item in result.items]
        present = _archive_names(archive)
        missing = [href for href in hrefs if href.rstrip("/") not in present]
        extras = [
            info.filename
            for info in archive.infolist()
            if info.filename != MANIFEST and not info.is_dir() and info.filename not in hrefs
        ]
        if extras:
            result.warn(
                "MECA bundle includes items missing from manifest:\n- " + "\n- ".join(extras)
            )
        if missing:
            return result.error(
                "manifest items missing from MECA bundle:\n- " + "\n- ".join(missing)
            )
        logger.debug("manifest matches MECA bundle contents")

        for item in result.items:
            if not item.media_type:
                result.warn(f"manifest item missing media-type: {item.href}")
            if not item.item_type:
                result.warn(f"manifest item missing item-type: {item.href}")
            elif item.item_type not in KNOWN_ITEM_TYPES:
                result.warn(f'manifest item has unknown item-type "{item.item_type}": {item.href}')

        invalid = []
        for item in result.items:
            if item.item_type != ItemType.ARTICLE_METADATA:
                continue
            try:
                checked = validate_jats_against_dtd(archive.read(item.href), options)
            except ValidationError as exc:
                return result.error(f"{item.href}: {exc}")
            if not checked.valid:
                invalid.append(item.href)
    if invalid:
        return result.error("JATS DTD validation failed:\n- " + "\n- ".join(invalid))
    logger.info("MECA validation passed: %s", path)
    return result

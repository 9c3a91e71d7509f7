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

"""JATS validation against the NIH DTD distribution.

The DTDs are not downloaded here: :attr:`JatsDtdOptions.directory` must
already hold the extracted NIH archive (``<directory>/<dtd_folder>/...``),
e.g. fetched from :attr:`JatsDtdOptions.ftp_url`.  The default directory
follows the XDG cache convention:

* macOS: ``~/Library/Caches/jatsmyst/dtd``
* Linux: ``~/.cache/jatsmyst/dtd``
* Windows: ``%LOCALAPPDATA%/jatsmyst/dtd``
"""

from __future__ import annotations

import logging
import platform
import re
from dataclasses import dataclass, field
from pathlib import Path

from lxml import etree

from jatsmyst.errors import ValidationError

logger = logging.getLogger(__name__)

JATS_VERSIONS = ("1.1", "1.1d1", "1.1d2", "1.1d3", "1.2", "1.2d1", "1.2d2", "1.3", "1.3d1", "1.3d2")
DEFAULT_JATS_VERSION = "1.3"

MATHML_VERSIONS = ("2", "3")
DEFAULT_MATHML_VERSION = "3"

JATS_LIBRARIES = ("authoring", "publishing", "archiving")
DEFAULT_JATS_LIBRARY = "archiving"

NIH_FTP_URL = "https://ftp.ncbi.nih.gov/pub/jats"

_DOCTYPE_RE = re.compile(r"<!DOCTYPE [\s\S]+?\">")
_ARTICLE_RE = re.compile(r"<article [\s\S]+?>")


def default_dtd_directory() -> Path:
    """Return a platform-appropriate directory for extracted DTDs."""
    system = platform.system()
    if system == "Darwin":
        base = Path.home() / "Library" / "Caches"
    elif system == "Windows":
        local = Path.home() / "AppData" / "Local"
        base = local if local.exists() else Path.home() / ".cache"
    else:
        base = Path.home() / ".cache"
    return base / "jatsmyst" / "dtd"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass
class JatsDtdOptions:
    """JATS version, MathML version, tag library and table model to validate against.

    Raises :class:`ValidationError` for values outside the NIH distribution.
    """

    jats: str = DEFAULT_JATS_VERSION
    mathml: str = DEFAULT_MATHML_VERSION
    library: str = DEFAULT_JATS_LIBRARY
    oasis: bool = False
    directory: Path = field(default_factory=default_dtd_directory)

    def __post_init__(self) -> None:
        if self.jats not in JATS_VERSIONS:
            raise ValidationError(
                f'Invalid JATS version "{self.jats}" - must be one of [{", ".join(JATS_VERSIONS)}]'
            )
        self.mathml = str(self.mathml)
        if self.mathml not in MATHML_VERSIONS:
            raise ValidationError(
                f'Invalid MathML version "{self.mathml}" - '
                f'must be one of [{", ".join(MATHML_VERSIONS)}]'
            )
        library = self.library.lower() if isinstance(self.library, str) else ""
        if library not in JATS_LIBRARIES:
            raise ValidationError(
                f'Invalid JATS library "{self.library}" - '
                f'must be one of [{", ".join(JATS_LIBRARIES)}]'
            )
        self.library = library
        if self.library == "authoring" and self.oasis:
            raise ValidationError("JATS article authoring library cannot use OASIS table model")
        self.directory = Path(self.directory)

    @property
    def dtd_folder(self) -> str:
        """Folder name of the extracted archive, e.g. ``JATS-Archiving-1-3-MathML3-DTD``."""
        version = self.jats.replace(".", "-", 1)
        oasis = "-OASIS" if self.oasis else ""
        return f"JATS-{self.library.capitalize()}-{version}{oasis}-MathML{self.mathml}-DTD"

    @property
    def zip_file(self) -> str:
        return f"{self.dtd_folder}.zip"

    @property
    def dtd_file(self) -> str:
        """Top-level DTD file name inside :attr:`dtd_folder`."""
        version = self.jats.replace(".", "-", 1) if self.jats.startswith("1.3") else "1"
        if self.library == "archiving":
            article = "archive-oasis-article" if self.oasis else "archivearticle"
        elif self.library == "publishing":
            article = "journalpublishing-oasis-article" if self.oasis else "journalpublishing"
        else:
            article = "articleauthoring"
        mathml = "-mathml3" if self.mathml == "3" else ""
        return f"JATS-{article}{version}{mathml}.dtd"

    @property
    def local_dtd_file(self) -> Path:
        return self.directory / self.dtd_folder / self.dtd_file

    @property
    def local_zip_file(self) -> Path:
        return self.directory / self.zip_file

    @property
    def ftp_url(self) -> str:
        library = "articleauthoring" if self.library == "authoring" else self.library
        return f"{NIH_FTP_URL}/{library}/{self.jats}/{self.zip_file}"

    def to_dict(self) -> dict:
        return {
            "jats": self.jats,
            "mathml": self.mathml,
            "library": self.library,
            "oasis": self.oasis,
            "directory": str(self.directory),
        }


# ---------------------------------------------------------------------------
# Inference from document content
# ---------------------------------------------------------------------------


def _dtd_file_lookup() -> dict[str, dict]:
    lookup: dict[str, dict] = {}
    for jats in JATS_VERSIONS:
        if jats != "1.2" and not jats.startswith("1.3"):
            continue
        for mathml in MATHML_VERSIONS:
            for library in JATS_LIBRARIES:
                for oasis in (False,) if library == "authoring" else (True, False):
                    opts = JatsDtdOptions(jats, mathml, library, oasis, Path("."))
                    lookup[opts.dtd_file] = {
                        "jats": jats, "mathml": mathml, "library": library, "oasis": oasis,
                    }
    return lookup


def infer_dtd_options(xml_text: str) -> dict:
    """Infer options from the DOCTYPE system id and the ``dtd-version`` attribute.

    Returns a partial mapping of :class:`JatsDtdOptions` fields; keys that
    cannot be inferred are absent.
    """
    inferred: dict = {}
    doctype = _DOCTYPE_RE.search(xml_text)
    if doctype:
        for dtd_file, opts in _dtd_file_lookup().items():
            if dtd_file in doctype.group(0):
                inferred = dict(opts)
    article = _ARTICLE_RE.search(xml_text)
    if article:
        for jats in JATS_VERSIONS:
            if f'dtd-version="{jats}"' in article.group(0):
                inferred["jats"] = jats
    return inferred


def _warn_on_mismatch(options: JatsDtdOptions, inferred: dict) -> None:
    for key, label in (("jats", "JATS version"), ("library", "JATS library"),
                       ("mathml", "MathML version")):
        if key in inferred and inferred[key] != getattr(options, key):
            logger.warning(
                "Using %s %s; does not match %s inferred from file",
                label, getattr(options, key), inferred[key],
            )
    if options.oasis and not inferred.get("oasis", False):
        logger.warning("Using OASIS table model; does not match non-OASIS inferred from file")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class DtdValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    dtd: Path | None = None


def _read_source(source: str | bytes | Path) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, Path):
        return source.read_bytes()
    if source.lstrip().startswith("<"):
        return source.encode("utf-8")
    return Path(source).read_bytes()


def validate_against_dtd(data: bytes, dtd_path: Path) -> DtdValidationResult:
    """Validate raw XML against the DTD at *dtd_path*, ignoring any DOCTYPE in *data*."""
    if not dtd_path.exists():
        raise ValidationError(f"DTD file not found: {dtd_path}")
    parser = etree.XMLParser(load_dtd=False, no_network=True, resolve_entities=False)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as exc:
        return DtdValidationResult(False, [f"XML syntax error: {exc}"], dtd_path)
    dtd = etree.DTD(str(dtd_path))
    if dtd.validate(root):
        return DtdValidationResult(True, [], dtd_path)
    errors = [f"{e.line}:{e.column}: {e.message}" for e in dtd.error_log]
    for message in errors:
        logger.error("DTD validation: %s", message)
    return DtdValidationResult(False, errors, dtd_path)


def validate_jats_against_dtd(
    source: str | bytes | Path,
    options: JatsDtdOptions | None = None,
) -> DtdValidationResult:
    """Validate a JATS document (path, XML text or bytes) against its DTD.

    Without *options* the JATS version, library, MathML version and table
    model are inferred from the document, falling back to the defaults.

    Raises:
        ValidationError: The inferred options are invalid or the local DTD
            file does not exist.
    """
    data = _read_source(source)
    inferred = infer_dtd_options(data.decode("utf-8", errors="replace"))
    if options is None:
        options = JatsDtdOptions(**inferred)
    else:
        _warn_on_mismatch(options, inferred)
    if not options.local_dtd_file.exists():
        raise ValidationError(
            f"JATS DTD not found at {options.local_dtd_file}; "
            f"download and extract {options.ftp_url} into {options.directory}"
        )
    logger.info("Validating against: %s", options.dtd_folder)
    result = validate_against_dtd(data, options.local_dtd_file)
    if result.valid:
        logger.info("JATS validation passed")
    return result

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


"""Tests for JATS DTD and MECA bundle validation."""

import logging
import zipfile

import pytest

from jatsmyst.errors import ValidationError
from jatsmyst.validate import (
    JatsDtdOptions,
    infer_dtd_options,
    read_manifest,
    validate_against_dtd,
    validate_jats_against_dtd,
    validate_meca,
)

ARTICLE_DTD = """\
<!ELEMENT article (title)>
<!ATTLIST article dtd-version CDATA #IMPLIED>
<!ELEMENT title (#PCDATA)>
"""

VALID_ARTICLE = (
    '<?xml version="1.0"?>\n'
    '<!DOCTYPE article PUBLIC "-//NLM//DTD JATS (Z39.96) Journal Archiving and Interchange '
    'DTD with MathML3 v1.3 20210610//EN" "JATS-archivearticle1-3-mathml3.dtd">\n'
    '<article dtd-version="1.3"><title>Lipids</title></article>'
)
INVALID_ARTICLE = '<article dtd-version="1.3"><body/></article>'

MANIFEST = """\
<manifest xmlns="https://manuscriptexchange.org/schema/manifest"
          xmlns:xlink="http://www.w3.org/1999/xlink">
  <item item-type="article-metadata" id="a1">
    <item-title>Article</item-title>
    <instance media-type="application/xml" xlink:href="content/article.xml"/>
  </item>
  <item item-type="manuscript" id="m1">
    <instance media-type="application/pdf" xlink:href="content/article.pdf"/>
  </item>
</manifest>
"""


@pytest.fixture
def options(tmp_path):
    opts = JatsDtdOptions(directory=tmp_path / "dtd")
    opts.local_dtd_file.parent.mkdir(parents=True)
    opts.local_dtd_file.write_text(ARTICLE_DTD)
    return opts


def make_meca(path, manifest=MANIFEST, files=None):
    if files is None:
        files = {"content/article.xml": VALID_ARTICLE, "content/article.pdf": b"%PDF-1.4"}
    with zipfile.ZipFile(path, "w") as archive:
        if manifest is not None:
            archive.writestr("manifest.xml", manifest)
        for name, data in files.items():
            archive.writestr(name, data)
    return path


class TestJatsDtdOptions:
    def test_defaults(self, tmp_path):
        opts = JatsDtdOptions(directory=tmp_path)
        assert opts.dtd_folder == "JATS-Archiving-1-3-MathML3-DTD"
        assert opts.dtd_file == "JATS-archivearticle1-3-mathml3.dtd"
        assert opts.local_dtd_file == (
            tmp_path / "JATS-Archiving-1-3-MathML3-DTD" / "JATS-archivearticle1-3-mathml3.dtd"
        )
        assert opts.local_zip_file == tmp_path / "JATS-Archiving-1-3-MathML3-DTD.zip"
        assert opts.ftp_url == (
            "https://ftp.ncbi.nih.gov/pub/jats/archiving/1.3/JATS-Archiving-1-3-MathML3-DTD.zip"
        )

    def test_publishing_oasis(self, tmp_path):
        opts = JatsDtdOptions("1.2", 2, "Publishing", True, tmp_path)
        assert opts.library == "publishing"
        assert opts.mathml == "2"
        assert opts.dtd_folder == "JATS-Publishing-1-2-OASIS-MathML2-DTD"
        assert opts.dtd_file == "JATS-journalpublishing-oasis-article1.dtd"

    def test_authoring_draft(self, tmp_path):
        opts = JatsDtdOptions(jats="1.3d1", library="authoring", directory=tmp_path)
        assert opts.dtd_folder == "JATS-Authoring-1-3d1-MathML3-DTD"
        assert opts.dtd_file == "JATS-articleauthoring1-3d1-mathml3.dtd"
        assert "/articleauthoring/1.3d1/" in opts.ftp_url

    @pytest.mark.parametrize("kwargs, message", [
        ({"jats": "2.0"}, 'Invalid JATS version "2.0"'),
        ({"mathml": "4"}, 'Invalid MathML version "4"'),
        ({"library": "draft"}, 'Invalid JATS library "draft"'),
        ({"library": "authoring", "oasis": True}, "cannot use OASIS table model"),
    ])
    def test_invalid(self, tmp_path, kwargs, message):
        with pytest.raises(ValidationError, match=message):
            JatsDtdOptions(directory=tmp_path, **kwargs)

    def test_to_dict(self, tmp_path):
        assert JatsDtdOptions(directory=tmp_path).to_dict() == {
            "jats": "1.3",
            "mathml": "3",
            "library": "archiving",
            "oasis": False,
            "directory": str(tmp_path),
        }


class TestInference:
    def test_from_doctype(self):
        assert infer_dtd_options(VALID_ARTICLE) == {
            "jats": "1.3", "mathml": "3", "library": "archiving", "oasis": False,
        }

    def test_from_dtd_version_only(self):
        assert infer_dtd_options('<article dtd-version="1.2d1" article-type="x">') == {
            "jats": "1.2d1",
        }

    def test_nothing_to_infer(self):
        assert infer_dtd_options("<article/>") == {}


class TestDtdValidation:
    def test_valid(self, tmp_path):
        dtd = tmp_path / "a.dtd"
        dtd.write_text(ARTICLE_DTD)
        result = validate_against_dtd(VALID_ARTICLE.encode(), dtd)
        assert result.valid
        assert result.errors == []

    def test_invalid(self, tmp_path):
        dtd = tmp_path / "a.dtd"
        dtd.write_text(ARTICLE_DTD)
        result = validate_against_dtd(INVALID_ARTICLE.encode(), dtd)
        assert not result.valid
        assert result.errors

    def test_not_xml(self, tmp_path):
        dtd = tmp_path / "a.dtd"
        dtd.write_text(ARTICLE_DTD)
        result = validate_against_dtd(b"<article>", dtd)
        assert not result.valid
        assert result.errors[0].startswith("XML syntax error")

    def test_missing_dtd(self, tmp_path):
        with pytest.raises(ValidationError):
            validate_against_dtd(b"<article/>", tmp_path / "missing.dtd")

    def test_jats_from_text_and_path(self, tmp_path, options):
        assert validate_jats_against_dtd(VALID_ARTICLE, options).valid
        path = tmp_path / "article.xml"
        path.write_text(INVALID_ARTICLE)
        assert not validate_jats_against_dtd(path, options).valid
        assert not validate_jats_against_dtd(str(path), options).valid

    def test_jats_missing_local_dtd(self, tmp_path):
        opts = JatsDtdOptions(directory=tmp_path)
        with pytest.raises(ValidationError, match="download and extract"):
            validate_jats_against_dtd(VALID_ARTICLE, opts)

    def test_mismatch_warns(self, tmp_path, caplog):
        opts = JatsDtdOptions(jats="1.2", directory=tmp_path)
        opts.local_dtd_file.parent.mkdir(parents=True)
        opts.local_dtd_file.write_text(ARTICLE_DTD)
        with caplog.at_level(logging.WARNING, logger="jatsmyst.validate.dtd"):
            assert validate_jats_against_dtd(VALID_ARTICLE, opts).valid
        assert "does not match 1.3 inferred from file" in caplog.text


class TestManifest:
    def test_read_manifest(self):
        items = read_manifest(MANIFEST.encode())
        assert [i.href for i in items] == ["content/article.xml", "content/article.pdf"]
        assert items[0].item_type == "article-metadata"
        assert items[0].media_type == "application/xml"
        assert items[0].title == "Article"
        assert items[1].id == "m1"

    def test_item_without_instance_skipped(self):
        items = read_manifest(b"<manifest><item item-type='manuscript'/></manifest>")
        assert items == []


class TestMecaValidation:
    def test_valid_bundle(self, tmp_path, options):
        result = validate_meca(make_meca(tmp_path / "bundle.meca"), options)
        assert result.valid
        assert result.errors == []
        assert result.warnings == []
        assert len(result.items) == 2

    def test_missing_file(self, tmp_path):
        result = validate_meca(tmp_path / "nope.meca")
        assert not result.valid
        assert "does not exist" in result.errors[0]

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / "bundle.meca"
        path.write_text("plain text")
        result = validate_meca(path)
        assert not result.valid
        assert "not a zip archive" in result.errors[0]

    def test_suffix_warning(self, tmp_path, options):
        result = validate_meca(make_meca(tmp_path / "bundle.zip"), options)
        assert result.valid
        assert "'.meca' or '-meca.zip'" in result.warnings[0]

    def test_meca_zip_suffix_accepted(self, tmp_path, options):
        result = validate_meca(make_meca(tmp_path / "bundle-meca.zip"), options)
        assert result.warnings == []

    def test_missing_manifest(self, tmp_path):
        result = validate_meca(make_meca(tmp_path / "bundle.meca", manifest=None))
        assert not result.valid
        assert "manifest.xml" in result.errors[0]

    def test_manifest_item_missing_from_bundle(self, tmp_path, options):
        path = make_meca(tmp_path / "bundle.meca", files={"content/article.xml": VALID_ARTICLE})
        result = validate_meca(path, options)
        assert not result.valid
        assert "content/article.pdf" in result.errors[0]

    def test_extra_entries_only_warn(self, tmp_path, options):
        files = {
            "content/article.xml": VALID_ARTICLE,
            "content/article.pdf": b"%PDF-1.4",
            "content/notes.txt": "extra",
        }
        result = validate_meca(make_meca(tmp_path / "bundle.meca", files=files), options)
        assert result.valid
        assert "content/notes.txt" in result.warnings[0]

    def test_item_type_warnings(self, tmp_path, options):
        manifest = (
            '<manifest xmlns:xlink="http://www.w3.org/1999/xlink">'
            '<item item-type="poster"><instance xlink:href="a.pdf"/></item>'
            '<item><instance media-type="text/plain" xlink:href="b.txt"/></item>'
            "</manifest>"
        )
        path = make_meca(tmp_path / "bundle.meca", manifest, {"a.pdf": b"x", "b.txt": "y"})
        result = validate_meca(path, options)
        assert result.valid
        assert result.warnings == [
            "manifest item missing media-type: a.pdf",
            'manifest item has unknown item-type "poster": a.pdf',
            "manifest item missing item-type: b.txt",
        ]

    def test_invalid_jats_item(self, tmp_path, options):
        files = {"content/article.xml": INVALID_ARTICLE, "content/article.pdf": b"%PDF-1.4"}
        result = validate_meca(make_meca(tmp_path / "bundle.meca", files=files), options)
        assert not result.valid
        assert result.errors == ["JATS DTD validation failed:\n- content/article.xml"]

    def test_manifest_dtd(self, tmp_path, options):
        dtd = tmp_path / "manifest.dtd"
        dtd.write_text("<!ELEMENT manifest EMPTY>")
        result = validate_meca(make_meca(tmp_path / "bundle.meca"), options, manifest_dtd=dtd)
        assert not result.valid
        assert result.errors == ["manifest.xml DTD validation failed"]

    def test_missing_jats_dtd_is_recorded(self, tmp_path):
        opts = JatsDtdOptions(directory=tmp_path / "empty")
        result = validate_meca(make_meca(tmp_path / "bundle.meca"), opts)
        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("content/article.xml: JATS DTD not found at ")
        assert "download and extract" in result.errors[0]

    def test_missing_manifest_dtd_is_recorded(self, tmp_path, options):
        missing = tmp_path / "nowhere" / "manifest.dtd"
        result = validate_meca(make_meca(tmp_path / "bundle.meca"), options, manifest_dtd=missing)
        assert not result.valid
        assert result.errors == [f"DTD file not found: {missing}"]

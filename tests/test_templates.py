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


"""Tests for jatsmyst.templates."""

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from jatsmyst.templates import DEFAULT_TEMPLATE_DIR, TemplateEngine
from jatsmyst.templates.engine import bibtex_value


def test_render_from_default_dir(tmp_path):
    default_dir = tmp_path / "defaults"
    default_dir.mkdir()
    (default_dir / "entry.j2").write_text("@{{ entry_type }}")

    engine = TemplateEngine(default_dir=default_dir)
    assert engine.render("entry.j2", entry_type="misc") == "@misc"


def test_user_dir_overrides_default(tmp_path):
    default_dir = tmp_path / "defaults"
    default_dir.mkdir()
    (default_dir / "entry.j2").write_text("default: {{ key }}")

    user_dir = tmp_path / "user"
    user_dir.mkdir()
    (user_dir / "entry.j2").write_text("custom: {{ key }}")

    engine = TemplateEngine(user_dir=user_dir, default_dir=default_dir)
    assert engine.render("entry.j2", key="B1") == "custom: B1"


def test_fallback_to_default(tmp_path):
    user_dir = tmp_path / "user"
    user_dir.mkdir()

    engine = TemplateEngine(user_dir=user_dir)
    assert engine.has_template("bibtex_entry.bib.j2")


def test_missing_template_raises(tmp_path):
    engine = TemplateEngine(default_dir=tmp_path)
    with pytest.raises(TemplateNotFound):
        engine.render("nonexistent.j2")


def test_has_template(tmp_path):
    (tmp_path / "exists.j2").write_text("yes")

    engine = TemplateEngine(default_dir=tmp_path)
    assert engine.has_template("exists.j2")
    assert not engine.has_template("nope.j2")


def test_no_html_escaping(tmp_path):
    (tmp_path / "t.j2").write_text("{{ value }}")
    engine = TemplateEngine(default_dir=tmp_path)
    assert engine.render("t.j2", value="Smith & Jones <eds>") == "Smith & Jones <eds>"


def test_shipped_bibtex_template():
    engine = TemplateEngine(default_dir=DEFAULT_TEMPLATE_DIR)
    text = engine.render(
        "bibtex_entry.bib.j2",
        entry_type="article",
        key="B1",
        fields=[("title", "First"), ("year", "2001")],
    )
    assert text == "@article{B1,\n  title = {First},\n  year = {2001}\n}"


def test_shipped_bibtex_template_without_fields():
    engine = TemplateEngine()
    text = engine.render("bibtex_entry.bib.j2", entry_type="misc", key="k", fields=[])
    assert text == "@misc{k\n}"


def test_bibtex_value_collapses_whitespace():
    assert bibtex_value("  Fatty acid\n   synthase\tin liver ") == "Fatty acid synthase in liver"
    assert bibtex_value(2001) == "2001"


def test_shipped_bibtex_template_flattens_wrapped_values():
    engine = TemplateEngine()
    text = engine.render(
        "bibtex_entry.bib.j2",
        entry_type="article",
        key="B1",
        fields=[("title", "Lipid\n  metabolism")],
    )
    assert text == "@article{B1,\n  title = {Lipid metabolism}\n}"


def test_undefined_variable_raises(tmp_path):
    (tmp_path / "t.j2").write_text("{{ entry_typo }}")
    engine = TemplateEngine(default_dir=tmp_path)
    with pytest.raises(UndefinedError):
        engine.render("t.j2", entry_type="article")

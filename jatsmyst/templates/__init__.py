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


"""Jinja2 template engine for bibliography output.

Loads templates from a user-configurable directory with fallback to
package-shipped defaults.

Usage::

    from jatsmyst.templates import TemplateEngine

    engine = TemplateEngine(user_dir=Path("~/.jatsmyst/templates"))
    entry = engine.render("bibtex_entry.bib.j2", entry_type="article", key="ref1", fields=[])
"""

from jatsmyst.templates.engine import DEFAULT_TEMPLATE_DIR, TemplateEngine

__all__ = ["DEFAULT_TEMPLATE_DIR", "TemplateEngine"]

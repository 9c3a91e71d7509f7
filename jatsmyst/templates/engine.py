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


"""Bibliography templates with user overrides.

Templates are looked up along a search path, first match wins::

    <user_dir>/bibtex_entry.bib.j2      # optional, per project
    jatsmyst/templates/defaults/...     # shipped with the package

Undefined variables raise instead of rendering as empty strings, so a
mistyped field in a user template fails on the first entry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateNotFound

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "defaults"

_WHITESPACE_RE = re.compile(r"\s+")


def bibtex_value(value: Any) -> str:
    """Flatten a field value onto one line; citation text often wraps."""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


class _SearchPathLoader(BaseLoader):
    def __init__(self, search_path: list[Path]) -> None:
        self.search_path = search_path

    def get_source(
        self, environment: Environment, template: str,
    ) -> tuple[str, str, Callable[[], bool]]:
        for directory in self.search_path:
            path = directory / template
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
            logger.debug("Using template %s", path)
            return path.read_text(encoding="utf-8"), str(path), lambda: (
                path.is_file() and path.stat().st_mtime == mtime
            )
        raise TemplateNotFound(template)


class TemplateEngine:
    """Render bibliography templates.

    Args:
        user_dir: Override directory, searched first.
        default_dir: Fallback directory; the package defaults unless given.
    """

    def __init__(
        self,
        user_dir: Path | None = None,
        default_dir: Path | None = DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self.user_dir = Path(user_dir).expanduser() if user_dir else None
        self.default_dir = Path(default_dir).expanduser() if default_dir else None
        self.search_path = [d for d in (self.user_dir, self.default_dir) if d is not None]
        self._env = Environment(
            loader=_SearchPathLoader(self.search_path),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
            autoescape=False,
        )
        self._env.filters["bibtex_value"] = bibtex_value

    def render(self, template_name: str, **variables: Any) -> str:
        """Render *template_name*.

        Raises ``jinja2.TemplateNotFound`` when no directory on the search
        path has it, ``jinja2.UndefinedError`` for a missing variable.
        """
        return self._env.get_template(template_name).render(**variables)

    def has_template(self, template_name: str) -> bool:
        try:
            self._env.get_template(template_name)
        except TemplateNotFound:
            return False
        return True

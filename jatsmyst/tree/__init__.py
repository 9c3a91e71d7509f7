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

"""Generic node tree: dict-based nodes, selection, rewriting and XML bridge."""

from jatsmyst.tree.nodes import (
    GenericNode,
    children_of,
    copy_node,
    label_attrs,
    normalize_label,
    select,
    select_all,
    to_text,
    u,
    walk,
)
from jatsmyst.tree.rewrite import (
    REMOVE,
    Keep,
    Remove,
    ReplaceWithChildren,
    lift_nodes,
    lift_type,
    remove_nodes,
    rewrite,
)
from jatsmyst.tree.xml import parse_xml, to_xml

__all__ = [
    "GenericNode",
    "Keep",
    "REMOVE",
    "Remove",
    "ReplaceWithChildren",
    "children_of",
    "copy_node",
    "label_attrs",
    "lift_nodes",
    "lift_type",
    "normalize_label",
    "parse_xml",
    "remove_nodes",
    "rewrite",
    "select",
    "select_all",
    "to_text",
    "to_xml",
    "u",
    "walk",
]

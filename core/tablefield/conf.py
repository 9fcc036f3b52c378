"""
tablefield - Inline editable table fields for Django
Copyright © 2025 Ilona Tag

This file is part of tablefield.

tablefield is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as
published by the Free Software Foundation, either version 3 of
the License, or (at your option) any later version.

tablefield is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with tablefield. If not, see <https://www.gnu.org/licenses/>.
"""

from __future__ import annotations

from django.conf import settings

from tablefield.constants import (
  DEFAULT_PERMISSIONS, DEFAULT_TEMPLATE, DEFAULT_UPDATE_EVENT,
)

"""
Project-wide defaults for table fields.

Read from settings.TABLEFIELD, e.g.:

  TABLEFIELD = {
    "template": "tablefield/table_field.html",
    "permissions": ["edit", "add"],
    "show_add_row": True,
    "relation_auto_setting": True,
    "definitions_path": BASE_DIR / "config" / "tablefield_tables.yaml",
    "update_event": "tablefield:saved",
  }

Per-field constructor arguments always win over these values.
"""

DEFAULTS = {
  "template": DEFAULT_TEMPLATE,
  "permissions": DEFAULT_PERMISSIONS,
  "show_add_row": True,
  "relation_auto_setting": True,
  "definitions_path": None,
  "update_event": DEFAULT_UPDATE_EVENT,
}


def get_config() -> dict:
  """Return the merged TABLEFIELD settings (defaults + project overrides)."""
  cfg = dict(DEFAULTS)
  cfg.update(getattr(settings, "TABLEFIELD", {}) or {})
  return cfg


def get_setting(key: str):
  return get_config().get(key, DEFAULTS.get(key))

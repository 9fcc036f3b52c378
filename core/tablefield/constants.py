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

# Actions a table can allow. "show" is the only action left after a
# read-only or disabled transformation of the whole table.
PERMISSION_EDIT = "edit"
PERMISSION_DELETE = "delete"
PERMISSION_ADD = "add"
PERMISSION_SHOW = "show"

DEFAULT_PERMISSIONS = (PERMISSION_EDIT, PERMISSION_DELETE, PERMISSION_ADD)

# Django model permission prefix per table action
MODEL_PERMISSION_CODENAMES = {
  PERMISSION_EDIT: "change",
  PERMISSION_ADD: "add",
  PERMISSION_DELETE: "delete",
  PERMISSION_SHOW: "view",
}

# Row key of the add row in the posted payload: table[new][field][]
NEW_ROW_KEY = "new"

# Per-row flag posted by the delete checkbox: table[<pk>][DELETE]
DELETION_FIELD_NAME = "DELETE"

# Placeholder in extra data that is replaced by the owning record's pk
RECORD_ID_MARKER = "$recordID"

# Loose emptiness check used to decide whether a posted row carries data
EMPTY_VALUES = (None, "", "0", False, [], (), {})

TRANSFORMATION_READONLY = "readonly"
TRANSFORMATION_DISABLED = "disabled"
TRANSFORMATION_CHOICES = (TRANSFORMATION_READONLY, TRANSFORMATION_DISABLED)

SAVE_STATUS_UPDATED = "updated"
SAVE_STATUS_CREATED = "created"

EMPTY_CHOICE_LABEL = "---------"

DEFAULT_TEMPLATE = "tablefield/table_field.html"
DEFAULT_UPDATE_EVENT = "tablefield:saved"

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

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _

from tablefield.constants import PERMISSION_ADD, PERMISSION_EDIT
from tablefield.payload import regroup_posted, row_has_data
from tablefield.widgets import is_editable

if TYPE_CHECKING:
  from tablefield.fields import TableField

logger = logging.getLogger(__name__)


@dataclass
class CleanedRow:
  row_id: str
  values: dict[str, Any]
  raw: dict[str, Any]
  has_data: bool = True


@dataclass
class CleanedTable:
  """Validated content of a posted table, the cleaned value of a TableField."""
  existing: list[CleanedRow] = field(default_factory=list)
  new: list[CleanedRow] = field(default_factory=list)
  deleted: list[str] = field(default_factory=list)

  def is_empty(self) -> bool:
    return not (self.existing or self.new or self.deleted)


def editable_fields(table: "TableField", record=None, readonly: bool = False) -> dict:
  """Fields of one row that accept posted values."""
  out = {}
  for name, form_field in table.fields_for_row(readonly=readonly).items():
    if "." in name or not is_editable(form_field):
      continue
    rule = table.transformation_conditions.get(name)
    if rule and rule.applies(record):
      continue
    out[name] = form_field
  return out


def clean_row(fields: dict, values: dict) -> tuple[dict, dict, list]:
  """
  Run every cell through its own form field. Returns cleaned values, the
  raw posted values and a list of (field_name, ValidationError).
  """
  cleaned, raw, errors = {}, {}, []
  for name, form_field in fields.items():
    widget = form_field.widget
    if widget.value_omitted_from_data(values, {}, name):
      continue
    raw[name] = widget.value_from_datadict(values, {}, name)
    try:
      cleaned[name] = form_field.clean(raw[name])
    except ValidationError as e:
      errors.append((name, e))
  return cleaned, raw, errors


def _is_missing(value) -> bool:
  if value is None or value is False:
    return True
  if isinstance(value, (list, tuple)):
    return not value
  return str(value).strip() == ""


def _title(table: "TableField", name: str, form_field=None) -> str:
  return str(table.field_list.get(name) or getattr(form_field, "label", None) or name)


def validate_table(table: "TableField", payload: dict) -> CleanedTable:
  """
  Validate a parsed payload against the table configuration.

  Each cell is checked by its own field; required columns are checked in
  a second pass across all rows. All problems are collected and raised as
  one ValidationError, so the enclosing form reports them under the
  table's name.
  """
  regrouped = regroup_posted(payload, record_id=table.owner_pk)
  extra_keys = set(table.extra_data or {})
  records = table.records_by_id()

  result = CleanedTable()
  messages: list[ValidationError] = []
  required_messages: list[str] = []
  table.row_errors = {}

  def _collect(row_key, row_label, fields, row, row_errors):
    for name, err in row_errors:
      for msg in err.messages:
        text = _("%(row)s, %(field)s: %(error)s") % {
          "row": row_label, "field": _title(table, name, fields.get(name)), "error": msg,
        }
        messages.append(ValidationError(text, code="invalid_cell"))
        table.row_errors.setdefault(row_key, []).append(text)

    for name in table.required_fields or ():
      if name not in fields:
        continue
      if _is_missing(row.raw.get(name)):
        required_messages.append(
          _("In %(table)s '%(field)s' is required.") % {
            "table": table.name, "field": _title(table, name, fields.get(name)),
          }
        )
        table.row_errors.setdefault(row_key, []).append(_title(table, name, fields.get(name)))

  can_delete = table.can_delete_rows
  for row_id in regrouped.deleted:
    if can_delete and row_id in records:
      result.deleted.append(row_id)
    else:
      logger.warning("TableField %r: ignoring delete of row %r", table.name, row_id)

  can_edit = table.edit_existing and not table.is_readonly and table.can(PERMISSION_EDIT)
  for row_id, values in regrouped.existing.items():
    record = records.get(row_id)
    if record is None:
      logger.warning("TableField %r: posted row %r is not part of the table", table.name, row_id)
      continue
    if not can_edit:
      continue
    values = {k: v for k, v in values.items() if k not in extra_keys}
    fields = editable_fields(table, record)
    cleaned, raw, row_errors = clean_row(fields, values)
    row = CleanedRow(row_id=row_id, values=cleaned, raw=raw, has_data=row_has_data(raw))
    if not row.has_data:
      continue
    _collect(row_id, str(record), fields, row, row_errors)
    result.existing.append(row)

  can_add = table.can(PERMISSION_ADD)
  for idx, values in enumerate(regrouped.new):
    values = {k: v for k, v in values.items() if k not in extra_keys}
    if not row_has_data(values):
      continue
    if not can_add:
      logger.warning("TableField %r: adding rows is not permitted, new row dropped", table.name)
      continue
    fields = editable_fields(table, None)
    cleaned, raw, row_errors = clean_row(fields, values)
    row = CleanedRow(row_id=f"new{idx}", values=cleaned, raw=raw)
    _collect(row.row_id, _("new row %(index)s") % {"index": idx + 1}, fields, row, row_errors)
    result.new.append(row)

  if required_messages:
    unique = list(dict.fromkeys(required_messages))
    messages.append(ValidationError(" ".join(unique), code="required_cells"))

  if messages:
    raise ValidationError(messages)
  return result

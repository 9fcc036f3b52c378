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

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from tablefield.constants import (
  DELETION_FIELD_NAME, EMPTY_VALUES, NEW_ROW_KEY, RECORD_ID_MARKER,
)

"""
Helpers for the posted table payload.

A table named "products" posts its cells as

  products[12][name]=...        existing record with pk 12
  products[12][DELETE]=on       delete flag of record 12
  products[new][name][]=...     one value per add row

parse_table_payload() turns such keys into the nested mapping
{"12": {"name": ...}, "new": {"name": [...]}} and regroup_posted()
splits that mapping into per-record field maps for saving.
"""


def cell_name(table_name: str, row_id, field_name: str, add_row: bool = False) -> str:
  """Posted name of a single cell."""
  name = f"{table_name}[{row_id}][{field_name}]"
  return f"{name}[]" if add_row else name


def _key_pattern(table_name: str) -> re.Pattern:
  return re.compile(
    r"^" + re.escape(table_name) + r"\[(?P<row>[^\[\]]+)\]\[(?P<field>[^\[\]]+)\](?P<multi>\[\])?$"
  )


def _getlist(data, key) -> list:
  if hasattr(data, "getlist"):
    return data.getlist(key)
  value = data[key]
  return list(value) if isinstance(value, (list, tuple)) else [value]


def parse_table_payload(data: Mapping, table_name: str) -> dict[str, dict[str, Any]]:
  """
  Collect all keys of one table from flat POST data (QueryDict or dict).
  Keys ending in [] keep every value as a list; all others keep the last.
  """
  pattern = _key_pattern(table_name)
  rows: dict[str, dict[str, Any]] = {}
  for key in data.keys():
    m = pattern.match(key)
    if not m:
      continue
    values = _getlist(data, key)
    row = rows.setdefault(m.group("row"), {})
    if m.group("multi"):
      row[m.group("field")] = list(values)
    else:
      row[m.group("field")] = values[-1] if values else ""
  return rows


def invert_new_rows(block: Mapping[str, Any]) -> list[dict[str, Any]]:
  """
  Turn the add-row block {field: [v0, v1, ...]} into one dict per row
  [{field: v0}, {field: v1}, ...]. Shorter columns are padded with "".
  """
  columns = {
    name: (list(values) if isinstance(values, (list, tuple)) else [values])
    for name, values in (block or {}).items()
  }
  count = max((len(v) for v in columns.values()), default=0)
  rows = []
  for idx in range(count):
    rows.append({
      name: (values[idx] if idx < len(values) else "")
      for name, values in columns.items()
    })
  return rows


def is_empty_value(value) -> bool:
  """Loose emptiness: None, "", whitespace, "0", False and empty containers."""
  if isinstance(value, str):
    value = value.strip()
  if isinstance(value, (list, tuple)):
    return all(is_empty_value(v) for v in value)
  try:
    return value in EMPTY_VALUES
  except TypeError:
    return False


def row_has_data(values: Mapping[str, Any], ignore: Iterable[str] = ()) -> bool:
  """True if any cell outside `ignore` carries a non-empty value."""
  skip = set(ignore)
  return any(
    not is_empty_value(v)
    for k, v in values.items()
    if k not in skip
  )


def is_deletion_flagged(values: Mapping[str, Any]) -> bool:
  flag = values.get(DELETION_FIELD_NAME)
  if isinstance(flag, str):
    return flag.strip().lower() in ("1", "on", "true", "yes")
  return bool(flag)


def substitute_record_id(value, record_id):
  if record_id is not None and value == RECORD_ID_MARKER:
    return record_id
  return value


@dataclass
class RegroupedRows:
  """Posted rows split by kind, ready for the save pipeline."""
  existing: dict[str, dict[str, Any]] = field(default_factory=dict)
  new: list[dict[str, Any]] = field(default_factory=list)
  deleted: list[str] = field(default_factory=list)

  def is_empty(self) -> bool:
    return not (self.existing or self.new or self.deleted)


def regroup_posted(payload: Mapping[str, Mapping[str, Any]], record_id=None) -> RegroupedRows:
  """
  Reorganise the parsed payload into per-record field maps.

  Every posted cell is kept (a cleared cell must be written as empty);
  the record id marker is replaced by `record_id`.
  """
  out = RegroupedRows()
  for row_id, values in (payload or {}).items():
    if row_id == NEW_ROW_KEY:
      for row in invert_new_rows(values):
        out.new.append({k: substitute_record_id(v, record_id) for k, v in row.items()})
      continue

    if is_deletion_flagged(values):
      out.deleted.append(row_id)
      continue

    out.existing[row_id] = {
      k: substitute_record_id(v, record_id)
      for k, v in values.items()
      if k != DELETION_FIELD_NAME
    }
  return out

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
from typing import TYPE_CHECKING, Any, Optional

from django.core.exceptions import FieldDoesNotExist
from django.db import models

from tablefield.constants import (
  PERMISSION_ADD, PERMISSION_EDIT,
  SAVE_STATUS_CREATED, SAVE_STATUS_UPDATED,
)
from tablefield.payload import row_has_data, substitute_record_id
from tablefield.validation import CleanedRow, CleanedTable

if TYPE_CHECKING:
  from tablefield.fields import TableField

logger = logging.getLogger(__name__)

"""
Save pipeline of a TableField.

  cleaned rows -> existing branch: look up by id, merge
               -> new branch: instantiate, merge
               -> has-data check -> write

Rows are written one by one without a surrounding transaction, a failing
write leaves the rows before it committed. ORM errors propagate.
"""


@dataclass
class SaveResult:
  saved: dict[Any, str] = field(default_factory=dict)
  created: list = field(default_factory=list)
  deleted: list = field(default_factory=list)
  attached_to: Optional[str] = None

  @property
  def created_ids(self) -> list:
    return [obj.pk for obj in self.created]


def assign_value(obj, name: str, value, deferred: dict, add_only: bool = False) -> None:
  """
  Set one value on a model instance. Foreign keys accept instances or
  primary keys; many-to-many values are deferred until the row is saved
  and either replace the relation or, with add_only, extend it.
  """
  try:
    model_field = obj._meta.get_field(name)
  except FieldDoesNotExist:
    setattr(obj, name, value)
    return

  if model_field.many_to_many:
    if value is None or value == "":
      values = []
    elif isinstance(value, (list, tuple, set, models.QuerySet)):
      values = list(value)
    else:
      values = [value]
    if model_field.auto_created and not model_field.concrete:
      name = model_field.get_accessor_name()
    deferred[name] = (values, add_only)
    return
  if model_field.many_to_one and not isinstance(value, models.Model):
    setattr(obj, model_field.attname, None if value == "" else value)
    return
  setattr(obj, name, value)


def resolved_extra_data(table: "TableField", owner_pk) -> dict:
  return {
    key: substitute_record_id(value, owner_pk)
    for key, value in (table.extra_data or {}).items()
  }


def write_row(table: "TableField", obj, row: CleanedRow, owner_pk=None) -> bool:
  """Merge one row into `obj` and save it. Returns False for rows without data."""
  if not row_has_data(row.raw):
    logger.debug("TableField %r: skipping empty row %r", table.name, row.row_id)
    return False

  deferred: dict[str, Any] = {}
  for key, value in resolved_extra_data(table, owner_pk).items():
    assign_value(obj, key, value, deferred)
  for key, value in row.values.items():
    assign_value(obj, key, value, deferred)

  # new rows join the filtered collection
  if table.filter_field and table.filter_value is not None:
    assign_value(obj, table.filter_field, table.filter_value, deferred, add_only=True)

  obj.save()
  for key, (values, add_only) in deferred.items():
    manager = getattr(obj, key)
    if add_only:
      manager.add(*values)
    else:
      manager.set(values)
  return True


def relation_manager(owner, relation_name: str):
  """
  Manager of a one-to-many or many-to-many relation named `relation_name`
  on `owner`, or None if the owner has no such relation.
  """
  if owner is None or not relation_name:
    return None
  try:
    rel = owner._meta.get_field(relation_name)
  except FieldDoesNotExist:
    return None
  if not (rel.one_to_many or rel.many_to_many):
    return None
  accessor = rel.get_accessor_name() if rel.auto_created and not rel.concrete else rel.name
  return getattr(owner, accessor, None)


def attach_to_owner(table: "TableField", owner, created: list) -> Optional[str]:
  """
  Add newly created records to a relation of the owning record. The
  relation is table.relation_name, falling back to the table's own name.
  """
  relation_name = table.relation_name or table.field_name or table.name
  if not created or owner is None or owner.pk is None:
    return None
  manager = relation_manager(owner, relation_name)
  if manager is None:
    logger.debug(
      "TableField %r: %s has no relation %r, nothing attached",
      table.name, type(owner).__name__, relation_name,
    )
    return None
  manager.add(*created)
  return relation_name


def save_table(table: "TableField", cleaned: CleanedTable, owner=None) -> SaveResult:
  """Persist validated table content. Returns what was written."""
  result = SaveResult()
  if cleaned is None:
    return result
  owner_pk = getattr(owner, "pk", None)
  records = table.records_by_id()

  if cleaned.deleted and table.can_delete_rows:
    for row_id in cleaned.deleted:
      obj = records.get(str(row_id))
      if obj is None:
        continue
      pk = obj.pk
      obj.delete()
      result.deleted.append(pk)

  if table.edit_existing and table.can(PERMISSION_EDIT):
    for row in cleaned.existing:
      obj = records.get(str(row.row_id))
      if obj is None:
        logger.warning("TableField %r: record %r vanished before save", table.name, row.row_id)
        continue
      if write_row(table, obj, row, owner_pk):
        result.saved[obj.pk] = SAVE_STATUS_UPDATED

  if table.can(PERMISSION_ADD):
    for row in cleaned.new:
      obj = table.source_model()
      if write_row(table, obj, row, owner_pk):
        result.saved[obj.pk] = SAVE_STATUS_CREATED
        result.created.append(obj)

  if table.relation_auto_setting:
    result.attached_to = attach_to_owner(table, owner, result.created)

  logger.info(
    "TableField %r: %d updated, %d created, %d deleted",
    table.name,
    sum(1 for s in result.saved.values() if s == SAVE_STATUS_UPDATED),
    len(result.created),
    len(result.deleted),
  )
  return result

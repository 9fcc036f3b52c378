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
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from django import forms
from django.core.exceptions import FieldDoesNotExist
from django.forms.utils import flatatt
from django.utils.html import format_html, format_html_join
from django.utils.safestring import SafeString, mark_safe

from tablefield.constants import DELETION_FIELD_NAME, NEW_ROW_KEY
from tablefield.payload import cell_name
from tablefield.rules import apply_formatter
from tablefield.widgets import ReadonlyWidget, is_editable, transform_field

if TYPE_CHECKING:
  from tablefield.fields import TableField


_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def dom_id(*parts) -> str:
  """Build an HTML id from name parts (brackets and dots are not valid)."""
  return "_".join(_ID_UNSAFE.sub("_", str(p)).strip("_") for p in parts if p not in (None, ""))


def short_field_name(field_name: str) -> str:
  """'supplier.name' -> 'name'"""
  return field_name.rsplit(".", 1)[-1]


def record_value(record, field_name: str):
  """
  Value of one column for a record. Dotted names follow one relation:
  'supplier.name' reads record.supplier.name. Foreign keys yield their pk,
  many-to-many fields the list of related pks.
  """
  if record is None:
    return None

  if "." in field_name:
    relation, _, attr = field_name.partition(".")
    related = getattr(record, relation, None)
    if callable(related) and not hasattr(related, "_meta"):
      related = related()
    return getattr(related, attr, None) if related is not None else None

  try:
    model_field = record._meta.get_field(field_name)
  except (FieldDoesNotExist, AttributeError):
    return getattr(record, field_name, None)

  if model_field.many_to_many:
    if record.pk is None:
      return []
    return [obj.pk for obj in getattr(record, field_name).all()]
  if model_field.is_relation and getattr(model_field, "attname", None):
    return getattr(record, model_field.attname)
  return getattr(record, field_name, None)


def record_display(record, field_name: str):
  """Human readable value, str() of related objects instead of their pk."""
  if record is None or "." in field_name:
    return record_value(record, field_name)
  try:
    model_field = record._meta.get_field(field_name)
  except (FieldDoesNotExist, AttributeError):
    return getattr(record, field_name, None)
  if model_field.is_relation and not model_field.many_to_many:
    related = getattr(record, field_name, None)
    return "" if related is None else str(related)
  if model_field.choices:
    return getattr(record, f"get_{field_name}_display")()
  return getattr(record, field_name, None)


@dataclass
class Heading:
  name: str
  title: str
  css_class: str


@dataclass
class Cell:
  name: str
  html_name: str
  html_id: str
  field: forms.Field
  value: Any
  css_class: str
  html: SafeString = mark_safe("")

  @property
  def editable(self) -> bool:
    return is_editable(self.field)

  def __str__(self):
    return self.html


class TableRow:
  """
  One row of a TableField: a record (None for the add row) together with
  its uniquely named cells.

  Existing rows name their cells table[<pk>][<field>], add rows
  table[new][<field>][] so every add row posts into the same lists.
  `data` holds posted values to show instead of the record's values,
  e.g. when a form is re-rendered after a failed validation.
  """

  def __init__(self, table: "TableField", record=None, data: Optional[dict] = None,
               add_row: bool = False, row_id=None, readonly: bool = False,
               errors: Optional[list] = None):
    self.table = table
    self.record = record
    self.data = data
    self.is_add_row = add_row or record is None
    self.readonly = readonly
    self.errors = list(errors or [])
    if row_id is not None:
      self.row_id = row_id
    elif self.is_add_row:
      self.row_id = NEW_ROW_KEY
    else:
      self.row_id = record.pk
    self.cells = self.create_cells()

  @property
  def key(self) -> str:
    return NEW_ROW_KEY if self.is_add_row else str(self.row_id)

  @property
  def css_class(self) -> str:
    classes = ["tablefield-row"]
    if self.is_add_row:
      classes.append("tablefield-add-row" if self.data is None else "tablefield-new-row")
    if self.errors:
      classes.append("has-errors")
    return " ".join(classes)

  @property
  def deletable(self) -> bool:
    return (
      not self.is_add_row
      and not self.readonly
      and self.table.can_delete_rows
    )

  @property
  def delete_name(self) -> str:
    return cell_name(self.table.name, self.row_id, DELETION_FIELD_NAME)

  def _cell_html_name(self, field_name: str) -> str:
    if self.is_add_row:
      return cell_name(self.table.name, NEW_ROW_KEY, short_field_name(field_name), add_row=True)
    return cell_name(self.table.name, self.row_id, field_name)

  def _cell_value(self, field_name: str):
    if self.record is None and "." in field_name:
      return None
    if self.data is not None:
      key = short_field_name(field_name) if self.is_add_row else field_name
      if key in self.data:
        return self.data[key]
    return record_value(self.record, field_name)

  def create_cells(self) -> list[Cell]:
    fields = self.table.fields_for_row(readonly=self.readonly)
    cells = []
    for i, (field_name, field) in enumerate(fields.items()):
      css_class = f"col{i}"

      # dotted columns only display the related value
      if "." in field_name and is_editable(field):
        field = transform_field(field, "readonly")

      rule = self.table.transformation_conditions.get(field_name)
      if rule and is_editable(field) and rule.applies(self.record):
        field = transform_field(field, rule.transformation)

      value = self._cell_value(field_name)
      cell = Cell(
        name=field_name,
        html_name=self._cell_html_name(field_name),
        html_id=dom_id("id", self.table.name, self.row_id, field_name),
        field=field,
        value=value,
        css_class=css_class,
      )
      cell.html = self.render_cell(cell)
      cells.append(cell)
    return cells

  def render_cell(self, cell: Cell) -> SafeString:
    field = cell.field
    attrs = {"id": cell.html_id, "class": cell.css_class}

    if isinstance(field.widget, ReadonlyWidget):
      if self.is_add_row and self.record is None and self.data is None:
        return format_html('<span class="readonly {}"></span>', cell.css_class)
      display = cell.value if self.record is None else record_display(self.record, cell.name)
      formatter = self.table.field_formatting.get(cell.name)
      if formatter is not None and self.record is not None:
        display = apply_formatter(formatter, record_value(self.record, cell.name), self.record)
      return field.widget.render(cell.html_name, display, attrs=attrs)

    if (
      not self.is_add_row
      and cell.name in self.table.required_fields
      and is_editable(field)
    ):
      attrs["required"] = True
    if field.disabled:
      attrs["disabled"] = True
    return field.widget.render(cell.html_name, field.prepare_value(cell.value), attrs=attrs)

  def extra_data_html(self) -> SafeString:
    """Hidden inputs carrying the table's extra data for this row."""
    extra = self.table.extra_data or {}
    if not extra:
      return mark_safe("")
    return format_html_join(
      "\n",
      '<input type="hidden"{}>',
      (
        (flatatt({
          "name": cell_name(self.table.name, self.key, key, add_row=self.is_add_row),
          "value": "" if value is None else str(value),
        }),)
        for key, value in extra.items()
      ),
    )

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
from typing import Any, Iterable, Mapping, Optional

from crum import get_current_user
from django import forms
from django.core.exceptions import FieldDoesNotExist
from django.db.models import Q
from django.template.loader import render_to_string

from tablefield import conf
from tablefield.constants import (
  MODEL_PERMISSION_CODENAMES, PERMISSION_ADD, PERMISSION_DELETE,
  PERMISSION_EDIT, PERMISSION_SHOW, TRANSFORMATION_DISABLED,
  TRANSFORMATION_READONLY,
)
from tablefield.items import Heading, TableRow, dom_id
from tablefield.payload import regroup_posted, row_has_data
from tablefield.persistence import SaveResult, save_table
from tablefield.registry import build_form_field, type_name
from tablefield.validation import CleanedTable, validate_table
from tablefield.widgets import TableWidget, transform_field

logger = logging.getLogger(__name__)


class TableField(forms.Field):
  """
  Form field rendering a model collection as an editable table.

  Each existing record becomes a row of cells named
  <field>[<pk>][<column>]; an extra add row posts <field>[new][<column>][].
  Cleaning validates every cell and returns a CleanedTable, save_into()
  writes it through the ORM.

    products = TableField(
      Product,
      field_list={"name": "Name", "price": "Price"},
      field_types={"name": "text", "price": FieldType("decimal", decimal_places=2)},
      filter_field="supplier",
      filter_value=supplier.pk,
      required_fields=["name"],
    )

  Args:
    source_model: model class of the rows.
    field_list: ordered column name -> heading. Defaults to the keys of
      field_types with the model's verbose names.
    field_types: ordered column name -> type spec (see registry).
    filter_field / filter_value: "field = value" filter, also set on every
      written record.
    source_filter: Q object or lookup dict, used when no filter_field is set.
    edit_existing: existing rows are editable (else shown read-only).
    source_sort: ordering, a field name or a list of them.
    permissions: subset of ("edit", "delete", "add", "show").
    extra_data: values merged into every written record; "$recordID"
      stands for the owning record's pk.
    required_fields: columns that must not be empty in any row.
    transformation_conditions: column -> TransformationRule.
    field_formatting: column -> formatter(value, record).
    relation_auto_setting: attach created records to the owner relation.
    relation_name: that relation; defaults to the field's own name.
    table_template: template rendering the table.
  """

  widget = TableWidget
  default_error_messages = {
    "invalid": "Enter a valid table.",
  }

  def __init__(self, source_model, field_list: Optional[Mapping[str, str]] = None,
               field_types: Optional[Mapping[str, Any]] = None, *,
               filter_field: Optional[str] = None, filter_value=None,
               source_filter=None, edit_existing: bool = True, source_sort=None,
               permissions: Optional[Iterable[str]] = None,
               show_add_row: Optional[bool] = None,
               extra_data: Optional[Mapping[str, Any]] = None,
               required_fields: Optional[Iterable[str]] = None,
               transformation_conditions: Optional[Mapping] = None,
               field_formatting: Optional[Mapping] = None,
               relation_auto_setting: Optional[bool] = None,
               relation_name: Optional[str] = None,
               readonly: bool = False,
               table_template: Optional[str] = None,
               name: Optional[str] = None,
               **kwargs):
    kwargs.setdefault("required", False)
    super().__init__(**kwargs)
    cfg = conf.get_config()

    self.source_model = source_model
    self.field_types = dict(field_types or {})
    self.field_list = dict(field_list) if field_list is not None else self._default_field_list()
    self.filter_field = filter_field
    self.filter_value = filter_value
    self.source_filter = source_filter
    self.edit_existing = edit_existing
    self.source_sort = source_sort
    self.permissions = tuple(permissions if permissions is not None else cfg["permissions"])
    self.show_add_row = cfg["show_add_row"] if show_add_row is None else show_add_row
    self.extra_data = dict(extra_data or {})
    self.required_fields = list(required_fields or [])
    self.transformation_conditions = dict(transformation_conditions or {})
    self.field_formatting = dict(field_formatting or {})
    self.relation_auto_setting = (
      cfg["relation_auto_setting"] if relation_auto_setting is None else relation_auto_setting
    )
    self.relation_name = relation_name
    self.readonly = readonly
    self.table_template = table_template or cfg["template"]
    self.update_event = cfg["update_event"]

    self.name = name
    self.field_name = name
    self.form = None
    self.row_errors: dict[str, list] = {}
    self.custom_source_items = None
    self._source_cache = None

    self.widget.table_field = self
    self.widget.template_name = self.table_template

  def __deepcopy__(self, memo):
    result = super().__deepcopy__(memo)
    result.widget.table_field = result
    result.row_errors = {}
    result._source_cache = None
    return result

  def _default_field_list(self) -> dict:
    titles = {}
    for name in self.field_types:
      try:
        titles[name] = str(self.source_model._meta.get_field(name).verbose_name).capitalize()
      except FieldDoesNotExist:
        titles[name] = name.replace("_", " ").capitalize()
    return titles

  # -----------------------------------------------------------------
  # Binding
  # -----------------------------------------------------------------
  def bind(self, name: str, form=None) -> "TableField":
    """Attach the field to its name (and form) before rendering or cleaning."""
    self.name = name
    self.field_name = name
    self.form = form
    return self

  @property
  def owner(self):
    return getattr(self.form, "instance", None)

  @property
  def owner_pk(self):
    return getattr(self.owner, "pk", None)

  # -----------------------------------------------------------------
  # Permissions
  # -----------------------------------------------------------------
  def can(self, action: str) -> bool:
    """
    True if the table allows `action` and, when a request user is known,
    the user holds the matching model permission.
    """
    if action not in self.permissions:
      return False
    if action == PERMISSION_SHOW:
      return True
    user = get_current_user()
    if user is None:
      return True
    opts = self.source_model._meta
    codename = MODEL_PERMISSION_CODENAMES[action]
    return user.has_perm(f"{opts.app_label}.{codename}_{opts.model_name}")

  @property
  def is_readonly(self) -> bool:
    return self.readonly or self.disabled or not self.can(PERMISSION_EDIT)

  @property
  def can_delete_rows(self) -> bool:
    """Rows of this table may be deleted (the delete column is shown)."""
    return self.can(PERMISSION_DELETE) and not self.is_readonly and self.edit_existing

  def readonly_copy(self) -> "TableField":
    """Copy of the whole table that only shows its rows."""
    clone = self.__deepcopy__({})
    clone.permissions = (PERMISSION_SHOW,)
    clone.readonly = True
    return clone

  def disabled_copy(self) -> "TableField":
    clone = self.__deepcopy__({})
    clone.permissions = (PERMISSION_SHOW,)
    clone.disabled = True
    return clone

  # -----------------------------------------------------------------
  # Source records
  # -----------------------------------------------------------------
  def get_queryset(self):
    qs = self.source_model._default_manager.all()
    if self.filter_field:
      qs = qs.filter(**{self.filter_field: self.filter_value})
    elif isinstance(self.source_filter, Q):
      qs = qs.filter(self.source_filter)
    elif self.source_filter:
      qs = qs.filter(**dict(self.source_filter))

    if self.source_sort:
      sort = [self.source_sort] if isinstance(self.source_sort, str) else list(self.source_sort)
      qs = qs.order_by(*sort)
    else:
      qs = qs.order_by("pk")
    return qs

  def source_items(self) -> list:
    if self.custom_source_items is not None:
      return list(self.custom_source_items)
    if self._source_cache is None:
      self._source_cache = list(self.get_queryset())
    return self._source_cache

  def records_by_id(self) -> dict:
    """Records shown by the table, custom source items included, keyed by pk string."""
    return {str(r.pk): r for r in self.source_items()}

  def set_custom_source_items(self, items) -> None:
    self.custom_source_items = items

  def clear_cache(self) -> None:
    self._source_cache = None

  # -----------------------------------------------------------------
  # Columns and rows
  # -----------------------------------------------------------------
  def fields_for_row(self, readonly: bool = False) -> dict:
    """
    One fresh form field per column, in column order. Fields are switched
    to readonly when the table (or the viewer's rights) forbids editing.
    """
    if not self.field_types:
      logger.warning("TableField %r: field types were not specified", self.name)
      return {}

    fields = {}
    for name, spec in self.field_types.items():
      form_field = build_form_field(spec, label=self.field_list.get(name, ""))
      if self.disabled:
        form_field = transform_field(form_field, TRANSFORMATION_DISABLED)
      elif readonly:
        form_field = transform_field(form_field, TRANSFORMATION_READONLY)
      fields[name] = form_field
    return fields

  def get_cell_field(self, field_name: str, combined_name: Optional[str] = None, record=None):
    """
    Single cell of a column, rendered for `record` (the add row when None).
    With `combined_name` the cell posts under that name instead of its
    table name. Returns None for unknown columns.
    """
    if field_name not in self.field_types:
      return None
    readonly = record is not None and (self.is_readonly or not self.edit_existing)
    row = TableRow(self, record, add_row=record is None, readonly=readonly)
    cell = next((c for c in row.cells if c.name == field_name), None)
    if cell is not None and combined_name:
      cell.html_name = combined_name
      cell.html = row.render_cell(cell)
    return cell

  def headings(self) -> list[Heading]:
    out = []
    for i, (name, title) in enumerate(self.field_list.items()):
      css_class = f"{type_name(self.field_types.get(name))} col{i}".strip()
      out.append(Heading(name=name, title=title, css_class=css_class))
    return out

  @property
  def item_count(self) -> int:
    return len(self.field_list)

  def rows(self, payload: Optional[dict] = None) -> list[TableRow]:
    """
    Rows to render. With a posted payload (re-rendering after a failed
    validation) existing rows show the posted values and each non-empty
    posted new row is rendered again.
    """
    existing_readonly = self.is_readonly or not self.edit_existing
    posted = regroup_posted(payload, record_id=self.owner_pk) if payload else None

    out = []
    for record in self.source_items():
      key = str(record.pk)
      data = posted.existing.get(key) if posted else None
      out.append(TableRow(
        self, record, data=data, readonly=existing_readonly,
        errors=self.row_errors.get(key),
      ))

    if self.can(PERMISSION_ADD) and not self.readonly and not self.disabled:
      extra_keys = set(self.extra_data)
      for idx, values in enumerate(posted.new if posted else []):
        values = {k: v for k, v in values.items() if k not in extra_keys}
        if not row_has_data(values):
          continue
        row_id = f"new{idx}"
        out.append(TableRow(
          self, None, data=values, add_row=True, row_id=row_id,
          errors=self.row_errors.get(row_id),
        ))
      if self.show_add_row:
        out.append(TableRow(self, None, add_row=True))
    return out

  # -----------------------------------------------------------------
  # Rendering
  # -----------------------------------------------------------------
  def dom_id(self, name: Optional[str] = None, attrs: Optional[dict] = None) -> str:
    if attrs and attrs.get("id"):
      return attrs["id"]
    return dom_id("id", name or self.name)

  def table_context(self, name: str, value=None, attrs: Optional[dict] = None, oob: bool = False) -> dict:
    self.name = name
    payload = value if isinstance(value, dict) and value else None
    can_delete = self.can_delete_rows
    return {
      "table": self,
      "dom_id": self.dom_id(name, attrs),
      "headings": self.headings(),
      "rows": self.rows(payload),
      "item_count": self.item_count,
      "colspan": self.item_count + (1 if can_delete else 0),
      "can_add": self.can(PERMISSION_ADD) and not self.readonly and not self.disabled,
      "can_delete": can_delete,
      "readonly": self.is_readonly,
      "oob": oob,
    }

  def field_holder(self, name: Optional[str] = None, value=None, attrs=None,
                   oob: bool = False, request=None) -> str:
    """Render the table outside of a form, e.g. as an HTMX fragment."""
    context = {"widget": self.table_context(name or self.name, value, attrs, oob=oob)}
    context["widget"]["name"] = name or self.name
    return render_to_string(self.table_template, context, request=request)

  # -----------------------------------------------------------------
  # Cleaning and saving
  # -----------------------------------------------------------------
  def bound_data(self, data, initial):
    return data

  def has_changed(self, initial, data) -> bool:
    return bool(data)

  def clean(self, value) -> CleanedTable:
    if self.disabled or self.readonly:
      return CleanedTable()
    return validate_table(self, value or {})

  def save_into(self, owner, cleaned: Optional[CleanedTable] = None) -> SaveResult:
    """Write the cleaned rows; `owner` is the record the table belongs to."""
    if cleaned is None and self.form is not None:
      cleaned = self.form.cleaned_data.get(self.field_name)
    result = save_table(self, cleaned, owner=owner)
    self.clear_cache()
    self.row_errors = {}
    return result

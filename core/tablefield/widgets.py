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

import copy

from django import forms
from django.forms.utils import flatatt
from django.utils.html import format_html
from django.utils.safestring import SafeString

from tablefield.constants import TRANSFORMATION_DISABLED, TRANSFORMATION_READONLY
from tablefield.payload import parse_table_payload


class ReadonlyWidget(forms.Widget):
  """Renders a cell value as text instead of an input."""

  def __init__(self, attrs=None, choices=()):
    super().__init__(attrs)
    self.choices = list(choices or [])

  def format_value(self, value):
    if value is None:
      return ""
    if isinstance(value, SafeString):
      return value
    for key, label in self.choices:
      if str(key) == str(value) and key not in ("", None):
        return label
    if isinstance(value, bool):
      return "✓" if value else ""
    return str(value)

  def render(self, name, value, attrs=None, renderer=None):
    built = self.build_attrs(self.attrs, attrs)
    # only identity and styling survive, input attributes make no sense on text
    final_attrs = {k: v for k, v in built.items() if k == "id" or k.startswith("data-")}
    css = " ".join(c for c in ("readonly", built.get("class", "")) if c)
    return format_html(
      '<span class="{}"{}>{}</span>',
      css, flatatt(final_attrs), self.format_value(value),
    )

  def value_from_datadict(self, data, files, name):
    return None

  def value_omitted_from_data(self, data, files, name):
    return True


def transform_field(field: forms.Field, transformation: str) -> forms.Field:
  """
  Return a copy of `field` switched to readonly (rendered as text) or
  disabled (input kept, marked disabled). Both ignore posted values.
  """
  field = copy.deepcopy(field)
  field.disabled = True
  if transformation == TRANSFORMATION_READONLY:
    choices = getattr(field, "choices", None) or ()
    if isinstance(field, forms.ModelChoiceField):
      # labels come from the record, no need to evaluate the queryset
      choices = ()
    field.widget = ReadonlyWidget(attrs=dict(field.widget.attrs), choices=choices)
  elif transformation == TRANSFORMATION_DISABLED:
    field.widget.attrs["disabled"] = True
  else:
    raise ValueError(f"Unknown transformation {transformation!r}.")
  return field


def is_editable(field: forms.Field) -> bool:
  return not field.disabled and not isinstance(field.widget, ReadonlyWidget)


class TableWidget(forms.Widget):
  """
  Renders a TableField as an HTML table and reads its nested payload back
  from the flat POST data. The widget is linked to its field, which owns
  the rows and the configuration.
  """

  template_name = "tablefield/table_field.html"
  table_field = None

  class Media:
    css = {"all": ("tablefield/css/table_field.css",)}
    js = ("tablefield/js/table_field.js",)

  def get_context(self, name, value, attrs):
    context = super().get_context(name, value, attrs)
    context["widget"].update(self.table_field.table_context(name, value, context["widget"]["attrs"]))
    return context

  def render(self, name, value, attrs=None, renderer=None):
    self.table_field.name = name
    return super().render(name, value, attrs, renderer)

  def value_from_datadict(self, data, files, name):
    self.table_field.name = name
    return parse_table_payload(data, name)

  def value_omitted_from_data(self, data, files, name):
    prefix = f"{name}["
    return not any(key.startswith(prefix) for key in data.keys())

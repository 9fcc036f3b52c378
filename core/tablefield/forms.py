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

from django import forms

from tablefield.fields import TableField


class TableFieldFormMixin:
  """
  Form mixin wiring TableFields to their form.

  Binds every TableField to its name and form, and saves the validated
  rows after the form's own instance was saved. With a ModelForm the
  instance is the owning record; do not list the table's name in
  Meta.fields.
  """

  def __init__(self, *args, **kwargs):
    super().__init__(*args, **kwargs)
    for name, form_field in self.fields.items():
      if isinstance(form_field, TableField):
        form_field.bind(name, form=self)

  def table_fields(self) -> dict[str, TableField]:
    return {
      name: form_field
      for name, form_field in self.fields.items()
      if isinstance(form_field, TableField)
    }

  def save_table_fields(self, owner=None) -> dict:
    """Save every table field; returns {field name: SaveResult}."""
    owner = owner if owner is not None else getattr(self, "instance", None)
    return {
      name: form_field.save_into(owner, self.cleaned_data.get(name))
      for name, form_field in self.table_fields().items()
    }

  def save(self, commit=True):
    if not isinstance(self, forms.BaseModelForm):
      raise TypeError("save() needs a ModelForm; call save_table_fields() instead.")
    instance = super().save(commit=commit)
    if commit:
      self.table_results = self.save_table_fields(instance)
    else:
      save_m2m = self.save_m2m

      def _save_m2m_and_tables():
        save_m2m()
        self.table_results = self.save_table_fields(instance)

      self.save_m2m = _save_m2m_and_tables
    return instance


class TableFieldModelForm(TableFieldFormMixin, forms.ModelForm):
  pass

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

"""
Tests for the cell field type registry.
"""

import pytest
from django import forms

from tablefield.registry import (
  FieldType,
  UnknownFieldType,
  build_form_field,
  get_available_field_types,
  register_field_type,
  type_name,
  unregister_field_type,
  with_empty_choice,
)


def test_builtin_types_are_registered():
  available = get_available_field_types()
  for name in (
    "text", "textarea", "integer", "decimal", "number", "boolean",
    "date", "email", "choice", "hidden", "model_choice",
  ):
    assert name in available


def test_build_from_type_name_returns_optional_field_with_label():
  field = build_form_field("text", label="Name")
  assert isinstance(field, forms.CharField)
  assert field.label == "Name"
  # required columns are checked across rows, never per cell
  assert field.required is False


def test_build_from_field_type_passes_options():
  field = build_form_field(FieldType("decimal", max_digits=6, decimal_places=3), label="Price")
  assert isinstance(field, forms.DecimalField)
  assert field.decimal_places == 3
  assert field.max_digits == 6


def test_field_instances_are_copied_per_cell():
  spec = forms.IntegerField(min_value=1)
  a = build_form_field(spec, label="Qty")
  b = build_form_field(spec, label="Qty")
  assert a is not spec
  assert a is not b
  assert a.label == "Qty"


def test_type_names_are_case_insensitive():
  assert isinstance(build_form_field("Integer"), forms.IntegerField)


def test_unknown_type_raises_with_available_names():
  with pytest.raises(UnknownFieldType) as exc:
    build_form_field("colour_picker")
  assert isinstance(exc.value, ValueError)
  msg = str(exc.value)
  assert "colour_picker" in msg
  assert "text" in msg


def test_unsupported_spec_raises_type_error():
  with pytest.raises(TypeError):
    build_form_field(42)


def test_choice_type_starts_with_empty_option():
  field = build_form_field(FieldType("choice", choices=[("a", "A"), ("b", "B")]))
  assert field.choices[0][0] == ""
  assert [c[0] for c in field.choices[1:]] == ["a", "b"]


def test_with_empty_choice_does_not_duplicate_empty_option():
  choices = [("", "None"), ("a", "A")]
  assert with_empty_choice(choices) == choices
  assert with_empty_choice([]) == [("", "---------")]


def test_model_choice_accepts_model_label():
  field = build_form_field(FieldType("model_choice", model="catalog.Category"), label="Category")
  assert isinstance(field, forms.ModelChoiceField)
  assert field.queryset.model._meta.label == "catalog.Category"
  assert field.empty_label == "---------"


def test_model_choice_without_model_or_queryset_fails():
  with pytest.raises(ValueError):
    build_form_field("model_choice")


def test_register_custom_type_as_decorator():
  @register_field_type("slug")
  def slug_field(label, **options):
    return forms.SlugField(label=label, required=False, **options)

  try:
    assert "slug" in get_available_field_types()
    assert isinstance(build_form_field("slug"), forms.SlugField)
  finally:
    unregister_field_type("slug")

  assert "slug" not in get_available_field_types()


def test_type_name():
  assert type_name("text") == "text"
  assert type_name(FieldType("decimal", decimal_places=2)) == "decimal"
  assert type_name(forms.CharField()) == ""
  assert type_name(None) == ""


def test_field_type_equality():
  assert FieldType("text", max_length=5) == FieldType("text", max_length=5)
  assert FieldType("text", max_length=5) != FieldType("text", max_length=6)

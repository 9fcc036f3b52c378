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
from typing import Any, Callable, Optional

from django import forms

from tablefield.constants import EMPTY_CHOICE_LABEL

"""
Registry of cell field types.

A table's type map associates each column with a type spec. A spec is
one of:

  - a registered type name, e.g. "text" or "decimal"
  - a FieldType, i.e. a registered name plus factory options
  - a ready django.forms.Field instance (deep-copied for every cell)

Factories take the column title as label plus the options and return a
fresh, unbound django.forms.Field.
"""

FieldFactory = Callable[..., forms.Field]


class UnknownFieldType(ValueError):
  """Raised when a type spec names a type that was never registered."""


class FieldType:
  """A registered type name together with the options for its factory."""

  def __init__(self, name: str, **options: Any) -> None:
    self.name = name
    self.options = options

  def __repr__(self) -> str:
    return f"FieldType({self.name!r}, **{self.options!r})"

  def __eq__(self, other) -> bool:
    return (
      isinstance(other, FieldType)
      and other.name == self.name
      and other.options == self.options
    )


_FIELD_TYPE_REGISTRY: dict[str, FieldFactory] = {}


def register_field_type(name: str, factory: Optional[FieldFactory] = None):
  """
  Register a factory under `name`. Usable directly or as a decorator:

    @register_field_type("slug")
    def slug_field(label, **options):
      return forms.SlugField(label=label, required=False, **options)
  """
  def _register(fn: FieldFactory) -> FieldFactory:
    _FIELD_TYPE_REGISTRY[name.lower()] = fn
    return fn

  if factory is not None:
    return _register(factory)
  return _register


def unregister_field_type(name: str) -> None:
  _FIELD_TYPE_REGISTRY.pop(name.lower(), None)


def get_available_field_types() -> list[str]:
  return sorted(_FIELD_TYPE_REGISTRY)


def get_field_factory(name: str) -> FieldFactory:
  try:
    return _FIELD_TYPE_REGISTRY[(name or "").lower()]
  except KeyError as exc:
    available = ", ".join(get_available_field_types())
    raise UnknownFieldType(
      f"Unknown field type: {name!r}. "
      f"Available field types: {available}."
    ) from exc


def type_name(spec) -> str:
  """Registered name of a type spec; empty for field instances."""
  if isinstance(spec, FieldType):
    return spec.name
  if isinstance(spec, str):
    return spec
  return ""


def build_form_field(spec, label: str = "") -> forms.Field:
  """Instantiate a new form field for one cell from a type spec."""
  if isinstance(spec, forms.Field):
    # never share an instance between cells, names and values differ
    field = copy.deepcopy(spec)
    if label and not field.label:
      field.label = label
    return field

  if isinstance(spec, FieldType):
    return get_field_factory(spec.name)(label, **spec.options)

  if isinstance(spec, str):
    return get_field_factory(spec)(label)

  raise TypeError(
    f"Unsupported field type spec {spec!r}; expected a type name, "
    "FieldType or django.forms.Field instance."
  )


def with_empty_choice(choices) -> list:
  """
  Ensure a choice list starts with an empty option, so that an untouched
  dropdown in the add row posts an empty value.
  """
  out = list(choices or [])
  if out and out[0][0] in ("", None):
    return out
  return [("", EMPTY_CHOICE_LABEL)] + out


# -------------------------------------------------------------------
# Built-in types
# -------------------------------------------------------------------
def _cell_options(options: dict) -> dict:
  # required-ness is checked across rows, not per cell
  options.setdefault("required", False)
  return options


@register_field_type("text")
def text_field(label, **options):
  return forms.CharField(label=label, **_cell_options(options))


@register_field_type("textarea")
def textarea_field(label, rows: int = 2, **options):
  options.setdefault("widget", forms.Textarea(attrs={"rows": rows}))
  return forms.CharField(label=label, **_cell_options(options))


@register_field_type("integer")
def integer_field(label, **options):
  return forms.IntegerField(label=label, **_cell_options(options))


@register_field_type("decimal")
def decimal_field(label, **options):
  return forms.DecimalField(label=label, **_cell_options(options))


@register_field_type("number")
def number_field(label, **options):
  return forms.FloatField(label=label, **_cell_options(options))


@register_field_type("boolean")
def boolean_field(label, **options):
  return forms.BooleanField(label=label, **_cell_options(options))


@register_field_type("date")
def date_field(label, **options):
  options.setdefault("widget", forms.DateInput(attrs={"type": "date"}, format="%Y-%m-%d"))
  return forms.DateField(label=label, **_cell_options(options))


@register_field_type("email")
def email_field(label, **options):
  return forms.EmailField(label=label, **_cell_options(options))


@register_field_type("hidden")
def hidden_field(label, **options):
  options.setdefault("widget", forms.HiddenInput)
  return forms.CharField(label=label, **_cell_options(options))


@register_field_type("choice")
def choice_field(label, choices=(), **options):
  return forms.ChoiceField(
    label=label,
    choices=with_empty_choice(choices),
    **_cell_options(options),
  )


@register_field_type("model_choice")
def model_choice_field(label, queryset=None, model=None, **options):
  if queryset is None:
    if model is None:
      raise ValueError("model_choice needs a 'queryset' or a 'model' option.")
    if isinstance(model, str):
      from django.apps import apps
      model = apps.get_model(model)
    queryset = model._default_manager.all()
  options.setdefault("empty_label", EMPTY_CHOICE_LABEL)
  return forms.ModelChoiceField(queryset=queryset, label=label, **_cell_options(options))

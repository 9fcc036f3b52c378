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

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from django.utils.html import conditional_escape
from django.utils.safestring import SafeString

from tablefield.constants import TRANSFORMATION_CHOICES, TRANSFORMATION_READONLY

"""
Typed per-column rules for table rows.

  - formatters turn a cell value into display text:  (value, record) -> str
  - transformation rules switch a cell to readonly/disabled when their
    predicate holds for the row's record:  (record) -> bool
"""

Formatter = Callable[[Any, Any], str]
Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class TransformationRule:
  predicate: Predicate
  transformation: str = TRANSFORMATION_READONLY

  def __post_init__(self):
    if self.transformation not in TRANSFORMATION_CHOICES:
      raise ValueError(
        f"Unknown transformation {self.transformation!r}. "
        f"Expected one of: {', '.join(TRANSFORMATION_CHOICES)}."
      )

  def applies(self, record) -> bool:
    # the add row has no record to test against
    if record is None:
      return False
    return bool(self.predicate(record))


def apply_formatter(formatter: Formatter, value, record) -> str:
  """
  Run a formatter and return markup-safe output. Plain strings are escaped,
  formatters that build HTML must return a SafeString (format_html, mark_safe).
  """
  out = formatter(value, record)
  if isinstance(out, SafeString):
    return out
  return conditional_escape("" if out is None else str(out))


def format_with(pattern: str) -> Formatter:
  """
  Formatter from a str.format pattern, with `value` and `record` in scope:

    format_with("{value} ({record.sku})")
  """
  def _fmt(value, record):
    return pattern.format(value="" if value is None else value, record=record)
  return _fmt


def currency(symbol: str = "€", places: int = 2) -> Formatter:
  """Formatter rendering numbers with fixed decimals and a currency symbol."""
  def _fmt(value, record):
    if value in (None, ""):
      return ""
    try:
      amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
      return str(value)
    return f"{amount:.{places}f} {symbol}"
  return _fmt


def field_equals(field_name: str, expected) -> Predicate:
  """Predicate comparing one record attribute with a fixed value."""
  def _pred(record):
    return getattr(record, field_name, None) == expected
  return _pred

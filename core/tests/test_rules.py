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
Tests for typed formatters and transformation rules.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils.html import format_html

from tablefield.rules import (
  TransformationRule,
  apply_formatter,
  currency,
  field_equals,
  format_with,
)


def test_rule_rejects_unknown_transformation():
  with pytest.raises(ValueError):
    TransformationRule(lambda r: True, "hidden")


def test_rule_never_applies_to_add_row():
  rule = TransformationRule(lambda r: True)
  assert rule.transformation == "readonly"
  assert rule.applies(None) is False


def test_rule_with_field_equals_predicate():
  rule = TransformationRule(field_equals("status", "discontinued"), "disabled")
  assert rule.applies(SimpleNamespace(status="discontinued")) is True
  assert rule.applies(SimpleNamespace(status="active")) is False


def test_formatter_output_is_escaped():
  out = apply_formatter(lambda v, r: f"<b>{v}</b>", "x", None)
  assert out == "&lt;b&gt;x&lt;/b&gt;"


def test_safe_formatter_output_is_kept():
  out = apply_formatter(lambda v, r: format_html("<b>{}</b>", v), "<x>", None)
  assert out == "<b>&lt;x&gt;</b>"


def test_formatter_returning_none_renders_empty():
  assert apply_formatter(lambda v, r: None, "x", None) == ""


@pytest.mark.parametrize(
  "value,expected",
  [
    (Decimal("1.5"), "1.50 €"),
    ("3", "3.00 €"),
    (None, ""),
    ("", ""),
    ("n/a", "n/a"),
  ],
)
def test_currency(value, expected):
  assert currency("€")(value, None) == expected


def test_currency_places_and_symbol():
  assert currency("USD", places=0)(Decimal("9.6"), None) == "10 USD"


def test_format_with_sees_value_and_record():
  fmt = format_with("{value} ({record.sku})")
  assert fmt("Bolt", SimpleNamespace(sku="B-1")) == "Bolt (B-1)"
  assert fmt(None, SimpleNamespace(sku="B-1")) == " (B-1)"

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

from django import forms

from catalog.models import STATUS_CHOICES, Product, Supplier
from tablefield.definitions import table_field_from_definition
from tablefield.fields import TableField
from tablefield.forms import TableFieldFormMixin, TableFieldModelForm
from tablefield.registry import FieldType
from tablefield.rules import TransformationRule, currency, field_equals


def build_products_table(supplier: Supplier) -> TableField:
  """Inline product table of one supplier."""
  table = TableField(
    Product,
    field_list={
      "name": "Name",
      "sku": "SKU",
      "price": "Price",
      "category": "Category",
      "in_stock": "In stock",
      "status": "Status",
    },
    field_types={
      "name": FieldType("text", max_length=100),
      "sku": FieldType("text", max_length=30),
      "price": FieldType("decimal", max_digits=10, decimal_places=2),
      "category": FieldType("model_choice", model="catalog.Category"),
      "in_stock": "boolean",
      "status": FieldType("choice", choices=STATUS_CHOICES),
    },
    filter_field="supplier" if supplier.pk else None,
    filter_value=supplier.pk,
    source_sort=["name"],
    required_fields=["name"],
    transformation_conditions={
      # prices of discontinued products are frozen
      "price": TransformationRule(field_equals("status", "discontinued"), "readonly"),
    },
    field_formatting={"price": currency("€")},
  )
  if not supplier.pk:
    # a supplier that is not saved yet has no products
    table.set_custom_source_items([])
  return table


class SupplierForm(TableFieldModelForm):
  """Supplier master data with its products edited inline."""

  class Meta:
    model = Supplier
    fields = ["name", "email"]

  def __init__(self, *args, **kwargs):
    super().__init__(*args, **kwargs)
    self.fields["products"] = build_products_table(self.instance).bind("products", form=self)


class SupplierFeaturedForm(TableFieldFormMixin, forms.Form):
  """Featured products of a supplier, laid out in tablefield_tables.yaml."""

  def __init__(self, *args, supplier: Supplier, **kwargs):
    self.supplier = supplier
    super().__init__(*args, **kwargs)
    self.fields["featured_products"] = table_field_from_definition(
      "supplier_featured_products", filter_value=supplier.pk,
    ).bind("featured_products", form=self)

  def save(self):
    return self.save_table_fields(owner=self.supplier)

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
TableFields inside Django forms: binding, cleaning through the form and
saving together with the owning record.
"""

import pytest
from django import forms

from catalog.forms import SupplierForm
from catalog.models import Product, Supplier
from tablefield.fields import TableField
from tablefield.forms import TableFieldFormMixin
from tablefield.validation import CleanedTable


def _supplier_data(**extra):
  data = {"name": "Acme", "email": "orders@acme.test"}
  data.update(extra)
  return data


@pytest.mark.django_db
def test_form_binds_table_field(supplier):
  form = SupplierForm(instance=supplier)
  table = form.fields["products"]

  assert isinstance(table, TableField)
  assert table.form is form
  assert table.owner is supplier
  assert form.table_fields() == {"products": table}


@pytest.mark.django_db
def test_fields_are_not_shared_between_form_instances(supplier):
  class Form(TableFieldFormMixin, forms.Form):
    products = TableField(Product, field_types={"name": "text"})

  a, b = Form(), Form()
  assert a.fields["products"] is not b.fields["products"]
  assert a.fields["products"].widget.table_field is a.fields["products"]
  assert b.fields["products"].form is b


@pytest.mark.django_db
def test_form_save_writes_record_and_rows(supplier, products):
  bolt = products[0]
  form = SupplierForm(_supplier_data(**{
    f"products[{bolt.pk}][name]": "Bolt M8",
    f"products[{bolt.pk}][status]": "active",
    f"products[{bolt.pk}][in_stock]": "on",
    "products[new][name][]": ["Washer", ""],
    "products[new][status][]": ["active", ""],
  }), instance=supplier)

  assert form.is_valid(), form.errors
  assert isinstance(form.cleaned_data["products"], CleanedTable)
  form.save()

  bolt.refresh_from_db()
  assert bolt.name == "Bolt M8"
  assert bolt.in_stock is True
  # cells that were not posted keep their values
  assert bolt.sku == "B-1"
  washer = Product.objects.get(name="Washer")
  assert washer.supplier == supplier
  result = form.table_results["products"]
  assert result.saved == {bolt.pk: "updated", washer.pk: "created"}


@pytest.mark.django_db
def test_new_supplier_gets_its_products_attached(db):
  form = SupplierForm(_supplier_data(**{
    "name": "Initech",
    "products[new][name][]": ["Stapler"],
  }), instance=Supplier())

  assert form.is_valid(), form.errors
  supplier = form.save()

  assert list(supplier.products.values_list("name", flat=True)) == ["Stapler"]
  assert form.table_results["products"].attached_to == "products"


@pytest.mark.django_db
def test_commit_false_saves_rows_with_save_m2m(supplier):
  form = SupplierForm(_supplier_data(**{"products[new][name][]": ["Washer"]}), instance=supplier)
  assert form.is_valid(), form.errors

  instance = form.save(commit=False)
  assert not Product.objects.filter(name="Washer").exists()
  instance.save()
  form.save_m2m()

  assert Product.objects.get(name="Washer").supplier == supplier
  assert "products" in form.table_results


@pytest.mark.django_db
def test_table_errors_surface_on_the_form(supplier, products):
  bolt = products[0]
  form = SupplierForm(_supplier_data(**{
    f"products[{bolt.pk}][name]": "",
    f"products[{bolt.pk}][price]": "cheap",
  }), instance=supplier)

  assert not form.is_valid()
  errors = form.errors["products"]
  assert any(e.startswith("Bolt, Price: ") for e in errors)
  assert "In products 'Name' is required." in errors

  # the re-rendered table keeps the posted values
  html = str(form["products"])
  assert 'value="cheap"' in html
  assert "has-errors" in html


@pytest.mark.django_db
def test_unsaved_supplier_has_empty_table():
  form = SupplierForm(instance=Supplier())
  assert form.fields["products"].source_items() == []
  assert "No items found" not in str(form["products"])


def test_plain_form_needs_explicit_table_save():
  class Form(TableFieldFormMixin, forms.Form):
    products = TableField(Product, field_types={"name": "text"})

  with pytest.raises(TypeError):
    Form().save()

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

from decimal import Decimal

import pytest
from django.contrib.auth.models import Permission

from catalog.models import Category, Product, Supplier
from tablefield.fields import TableField
from tablefield.registry import FieldType


PRODUCT_COLUMNS = {
  "name": "Name",
  "sku": "SKU",
  "price": "Price",
}

PRODUCT_TYPES = {
  "name": FieldType("text", max_length=100),
  "sku": FieldType("text", max_length=30),
  "price": FieldType("decimal", max_digits=10, decimal_places=2),
}


# -------------------------------------------------------------------
# Catalog records
# -------------------------------------------------------------------
@pytest.fixture
def supplier(db):
  return Supplier.objects.create(name="Acme", email="orders@acme.test")


@pytest.fixture
def other_supplier(db):
  return Supplier.objects.create(name="Globex")


@pytest.fixture
def category(db):
  return Category.objects.create(name="Hardware")


@pytest.fixture
def products(supplier, category):
  """Two products of `supplier`, sorted by name: Bolt, Nut."""
  return [
    Product.objects.create(
      supplier=supplier, name="Bolt", sku="B-1", price=Decimal("1.50"), category=category,
    ),
    Product.objects.create(supplier=supplier, name="Nut", sku="N-1", price=Decimal("0.20")),
  ]


# -------------------------------------------------------------------
# Tables
# -------------------------------------------------------------------
@pytest.fixture
def make_table(supplier):
  """
  Factory for a products table of `supplier`, bound to the name
  'products'. Keyword arguments override the defaults.
  """
  def _make(**kwargs):
    options = dict(
      field_list=dict(PRODUCT_COLUMNS),
      field_types=dict(PRODUCT_TYPES),
      filter_field="supplier",
      filter_value=supplier.pk,
      source_sort=["name"],
    )
    options.update(kwargs)
    return TableField(Product, **options).bind("products")
  return _make


# -------------------------------------------------------------------
# Users
# -------------------------------------------------------------------
@pytest.fixture
def make_user(django_user_model):
  """Create a user holding the given catalog.product permissions."""
  def _make(username, *codenames):
    user = django_user_model.objects.create_user(username=username, password="secret")
    perms = Permission.objects.filter(
      content_type__app_label="catalog",
      codename__in=[f"{c}_product" for c in codenames],
    )
    user.user_permissions.add(*perms)
    # reload, has_perm caches permissions on the instance
    return django_user_model.objects.get(pk=user.pk)
  return _make

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

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _user_stamps():
  return [
    ("added_on", models.DateTimeField(auto_now_add=True)),
    ("changed_on", models.DateTimeField(auto_now=True)),
    ("added_by", models.ForeignKey(blank=True, editable=False, null=True,
      on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
    ("changed_by", models.ForeignKey(blank=True, editable=False, null=True,
      on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
  ]


class Migration(migrations.Migration):

  initial = True

  dependencies = [
    migrations.swappable_dependency(settings.AUTH_USER_MODEL),
  ]

  operations = [
    migrations.CreateModel(
      name="Category",
      fields=[
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        *_user_stamps(),
        ("name", models.CharField(help_text="Product category, eg. Hardware, Services, ...",
          max_length=50, unique=True)),
      ],
      options={
        "db_table": "category",
        "ordering": ["name"],
        "verbose_name_plural": "Categories",
      },
    ),
    migrations.CreateModel(
      name="Supplier",
      fields=[
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        *_user_stamps(),
        ("name", models.CharField(help_text="Name of the supplier.", max_length=100, unique=True)),
        ("email", models.EmailField(blank=True, help_text="Order contact of the supplier.", max_length=254)),
      ],
      options={
        "db_table": "supplier",
        "ordering": ["name"],
      },
    ),
    migrations.CreateModel(
      name="Product",
      fields=[
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        *_user_stamps(),
        ("name", models.CharField(help_text="Display name of the product.", max_length=100)),
        ("sku", models.CharField(blank=True, help_text="Stock keeping unit.", max_length=30)),
        ("price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
        ("in_stock", models.BooleanField(default=False)),
        ("status", models.CharField(choices=[("active", "Active"), ("discontinued", "Discontinued")],
          default="active", max_length=20)),
        ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
          related_name="products", to="catalog.category")),
        ("supplier", models.ForeignKey(blank=True, help_text="Supplier delivering this product.", null=True,
          on_delete=django.db.models.deletion.CASCADE, related_name="products", to="catalog.supplier")),
      ],
      options={
        "db_table": "product",
        "ordering": ["name"],
      },
    ),
    migrations.AddField(
      model_name="supplier",
      name="featured_products",
      field=models.ManyToManyField(blank=True, db_table="supplier_featured_product",
        help_text="Products highlighted on the supplier page.",
        related_name="featured_by", to="catalog.product"),
    ),
  ]

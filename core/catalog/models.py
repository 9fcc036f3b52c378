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

from django.conf import settings
from django.db import models
from crum import get_current_user


class UserStamped(models.Model):
  """
  Catalog records remember who added and who last changed them. The user
  is the request user exposed by django-crum. Saves outside a request
  leave the stamps untouched.
  """
  added_on = models.DateTimeField(auto_now_add=True)
  changed_on = models.DateTimeField(auto_now=True)
  added_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, editable=False,
    on_delete=models.SET_NULL, related_name="+")
  changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, editable=False,
    on_delete=models.SET_NULL, related_name="+")

  class Meta:
    abstract = True

  def save(self, *args, **kwargs):
    user = get_current_user()
    if user is not None and user.is_authenticated:
      if self._state.adding and self.added_by_id is None:
        self.added_by = user
      self.changed_by = user
    super().save(*args, **kwargs)

# -------------------------------------------------------------------
# Category
# -------------------------------------------------------------------
class Category(UserStamped):
  name = models.CharField(max_length=50, unique=True,
    help_text="Product category, eg. Hardware, Services, ..."
  )

  class Meta:
    db_table = "category"
    ordering = ["name"]
    verbose_name_plural = "Categories"

  def __str__(self):
    return self.name

# -------------------------------------------------------------------
# Supplier
# -------------------------------------------------------------------
class Supplier(UserStamped):
  name = models.CharField(max_length=100, unique=True,
    help_text="Name of the supplier."
  )
  email = models.EmailField(blank=True,
    help_text="Order contact of the supplier."
  )
  featured_products = models.ManyToManyField("Product", blank=True, related_name="featured_by",
    db_table="supplier_featured_product",
    help_text="Products highlighted on the supplier page."
  )

  class Meta:
    db_table = "supplier"
    ordering = ["name"]

  def __str__(self):
    return self.name

# -------------------------------------------------------------------
# Product
# -------------------------------------------------------------------
STATUS_CHOICES = [
  ("active", "Active"),
  ("discontinued", "Discontinued"),
]

class Product(UserStamped):
  supplier = models.ForeignKey(Supplier, null=True, blank=True, on_delete=models.CASCADE,
    related_name="products",
    help_text="Supplier delivering this product."
  )
  name = models.CharField(max_length=100,
    help_text="Display name of the product."
  )
  sku = models.CharField(max_length=30, blank=True,
    help_text="Stock keeping unit."
  )
  price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
  category = models.ForeignKey(Category, null=True, blank=True, on_delete=models.SET_NULL,
    related_name="products"
  )
  in_stock = models.BooleanField(default=False)
  status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")

  class Meta:
    db_table = "product"
    ordering = ["name"]

  def __str__(self):
    return self.name

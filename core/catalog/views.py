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

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse

from catalog.forms import SupplierFeaturedForm, SupplierForm
from catalog.models import Supplier
from tablefield.responses import is_htmx, table_update_response


@login_required
def supplier_list(request):
  suppliers = Supplier.objects.all()
  return render(request, "catalog/supplier_list.html", {"suppliers": suppliers})


@login_required
def supplier_edit(request, pk: int = None):
  """
  Supplier form with its products table.
  - GET  -> full page
  - POST -> validate & save; HTMX requests get the re-rendered products
            table addressed by its DOM id, others are redirected
  """
  supplier = get_object_or_404(Supplier, pk=pk) if pk else Supplier()
  is_new = supplier.pk is None

  if request.method == "POST":
    form = SupplierForm(request.POST, instance=supplier)
    if form.is_valid():
      supplier = form.save()
      url = reverse("catalog:supplier_edit", kwargs={"pk": supplier.pk})
      if is_htmx(request):
        if is_new:
          # the table of an unsaved supplier has no rows to update, reload the page
          response = HttpResponse(status=204)
          response["HX-Redirect"] = url
          return response
        return table_update_response(request, form, "products", results=form.table_results)
      messages.success(request, f"Supplier '{supplier}' saved.")
      return redirect(url)

    template = "catalog/partials/_supplier_form.html" if is_htmx(request) else "catalog/supplier_form.html"
    return render(request, template, {"form": form, "supplier": supplier}, status=400)

  form = SupplierForm(instance=supplier)
  return render(request, "catalog/supplier_form.html", {"form": form, "supplier": supplier})


@login_required
def supplier_featured(request, pk: int):
  supplier = get_object_or_404(Supplier, pk=pk)
  form = SupplierFeaturedForm(request.POST or None, supplier=supplier)

  if request.method == "POST":
    if form.is_valid():
      results = form.save()
      if is_htmx(request):
        return table_update_response(request, form, "featured_products", results=results)
      messages.success(request, "Featured products saved.")
      return redirect("catalog:supplier_featured", pk=supplier.pk)
    return render(request, "catalog/supplier_featured.html", {"form": form, "supplier": supplier}, status=400)

  return render(request, "catalog/supplier_featured.html", {"form": form, "supplier": supplier})

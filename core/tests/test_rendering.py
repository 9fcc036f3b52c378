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
Rendering of table fields: cell names, add row, readonly cells and
permissions.
"""

import logging
import re
from decimal import Decimal

import pytest
from crum import impersonate

from catalog.models import STATUS_CHOICES, Product
from tablefield.fields import TableField
from tablefield.registry import FieldType
from tablefield.rules import TransformationRule, currency, field_equals


def _input_tag(html, name):
  m = re.search(r'<input[^>]*name="%s"[^>]*>' % re.escape(name), html)
  return m.group(0) if m else None


@pytest.mark.django_db
def test_existing_rows_and_add_row_are_named_per_record(make_table, products):
  bolt, nut = products
  html = make_table().field_holder()

  assert _input_tag(html, f"products[{bolt.pk}][name]") is not None
  assert _input_tag(html, f"products[{nut.pk}][sku]") is not None
  assert 'value="Bolt"' in html
  assert 'value="N-1"' in html
  assert _input_tag(html, "products[new][name][]") is not None
  assert 'id="id_products"' in html


@pytest.mark.django_db
def test_rows_follow_filter_and_sort(make_table, products, other_supplier):
  Product.objects.create(supplier=other_supplier, name="Anchor")
  rows = make_table().rows()

  # two products of the supplier plus the add row
  assert [r.record.name for r in rows if r.record] == ["Bolt", "Nut"]
  assert rows[-1].is_add_row
  assert rows[-1].css_class == "tablefield-row tablefield-add-row"


@pytest.mark.django_db
def test_add_row_can_be_hidden(make_table, products):
  rows = make_table(show_add_row=False).rows()
  assert len(rows) == 2
  assert not any(r.is_add_row for r in rows)


@pytest.mark.django_db
def test_empty_table_renders_placeholder(make_table):
  html = make_table(show_add_row=False).field_holder()
  assert "No items found" in html


@pytest.mark.django_db
def test_cells_get_column_classes_and_headings(make_table, products):
  table = make_table()
  row = table.rows()[0]

  assert [c.css_class for c in row.cells] == ["col0", "col1", "col2"]
  assert [h.css_class for h in table.headings()] == ["text col0", "text col1", "decimal col2"]
  assert [h.title for h in table.headings()] == ["Name", "SKU", "Price"]
  assert table.item_count == 3


@pytest.mark.django_db
def test_choice_column_has_empty_first_option(make_table, products):
  table = make_table(
    field_list={"name": "Name", "status": "Status"},
    field_types={"name": "text", "status": FieldType("choice", choices=STATUS_CHOICES)},
  )
  add_row = table.rows()[-1]
  status_html = str(add_row.cells[1].html)
  first_option = re.search(r"<option[^>]*>[^<]*</option>", status_html).group(0)
  assert 'value=""' in first_option
  assert "---------" in first_option


@pytest.mark.django_db
def test_required_attribute_only_on_existing_rows(make_table, products):
  bolt = products[0]
  html = make_table(required_fields=["name"]).field_holder()

  assert " required" in _input_tag(html, f"products[{bolt.pk}][name]")
  assert " required" not in _input_tag(html, "products[new][name][]")
  assert " required" not in _input_tag(html, f"products[{bolt.pk}][sku]")


@pytest.mark.django_db
def test_transformation_rule_renders_readonly_cell_with_formatter(make_table, supplier):
  frozen = Product.objects.create(
    supplier=supplier, name="Old", price=Decimal("1.5"), status="discontinued",
  )
  current = Product.objects.create(supplier=supplier, name="New", price=Decimal("2"))
  html = make_table(
    transformation_conditions={
      "price": TransformationRule(field_equals("status", "discontinued"), "readonly"),
    },
    field_formatting={"price": currency("€")},
  ).field_holder()

  assert _input_tag(html, f"products[{frozen.pk}][price]") is None
  assert "1.50 €" in html
  assert 'class="readonly col2"' in html
  # the rule does not match, the price stays editable
  assert _input_tag(html, f"products[{current.pk}][price]") is not None


@pytest.mark.django_db
def test_disabled_transformation_keeps_input(make_table, supplier):
  frozen = Product.objects.create(supplier=supplier, name="Old", status="discontinued")
  html = make_table(
    transformation_conditions={
      "sku": TransformationRule(field_equals("status", "discontinued"), "disabled"),
    },
  ).field_holder()

  assert " disabled" in _input_tag(html, f"products[{frozen.pk}][sku]")


@pytest.mark.django_db
def test_dotted_column_is_display_only(make_table, products):
  table = make_table(
    field_list={"name": "Name", "supplier.name": "Supplier"},
    field_types={"name": "text", "supplier.name": "text"},
  )
  rows = table.rows()
  existing, add_row = rows[0], rows[-1]

  assert not existing.cells[1].editable
  assert "Acme" in str(existing.cells[1].html)
  assert str(add_row.cells[1].html) == '<span class="readonly col1"></span>'

  html = table.field_holder()
  # the dotted column must not post into the real "name" column
  assert html.count('name="products[new][name][]"') == 1


@pytest.mark.django_db
def test_extra_data_is_rendered_as_hidden_inputs(make_table, products):
  bolt = products[0]
  html = make_table(extra_data={"origin": "import"}).field_holder()

  assert f'<input type="hidden" name="products[{bolt.pk}][origin]" value="import">' in html
  assert '<input type="hidden" name="products[new][origin][]" value="import">' in html


@pytest.mark.django_db
def test_rerender_shows_posted_values_and_new_rows(make_table, products):
  bolt = products[0]
  table = make_table()
  rows = table.rows(payload={
    str(bolt.pk): {"name": "Bolt M6", "sku": "B-1", "price": "1.50"},
    "new": {"name": ["Washer", ""], "sku": ["W-1", ""], "price": ["", ""]},
  })

  assert rows[0].cells[0].value == "Bolt M6"
  new_rows = [r for r in rows if r.is_add_row]
  assert len(new_rows) == 2
  assert new_rows[0].css_class == "tablefield-row tablefield-new-row"
  assert new_rows[0].cells[0].value == "Washer"
  assert new_rows[0].row_id == "new0"
  assert new_rows[1].css_class == "tablefield-row tablefield-add-row"


@pytest.mark.django_db
def test_readonly_copy_renders_text_only(make_table, products):
  table = make_table()
  html = table.readonly_copy().field_holder()

  assert "<input" not in html
  assert "tablefield-readonly" in html
  assert "Bolt" in html
  assert "Add row" not in html
  # copying leaves the table itself editable
  assert table.permissions == ("edit", "delete", "add")
  assert _input_tag(table.field_holder(), "products[new][name][]") is not None


@pytest.mark.django_db
def test_disabled_copy_keeps_inputs_disabled(make_table, products):
  bolt = products[0]
  html = make_table().disabled_copy().field_holder()
  assert " disabled" in _input_tag(html, f"products[{bolt.pk}][name]")
  assert "products[new]" not in html


@pytest.mark.django_db
def test_viewer_without_change_permission_sees_readonly_rows(make_table, products, make_user):
  viewer = make_user("viewer", "view")
  with impersonate(viewer):
    html = make_table().field_holder()

  assert "<input" not in html
  assert "Bolt" in html
  assert "Delete" not in html


@pytest.mark.django_db
def test_editor_without_delete_permission_gets_no_delete_boxes(make_table, products, make_user):
  bolt = products[0]
  editor = make_user("editor", "view", "change", "add")
  with impersonate(editor):
    html = make_table().field_holder()

  assert _input_tag(html, f"products[{bolt.pk}][name]") is not None
  assert _input_tag(html, f"products[{bolt.pk}][DELETE]") is None
  assert _input_tag(html, "products[new][name][]") is not None


@pytest.mark.django_db
def test_delete_boxes_with_full_permissions(make_table, products):
  bolt = products[0]
  html = make_table().field_holder()
  assert 'type="checkbox"' in _input_tag(html, f"products[{bolt.pk}][DELETE]")


@pytest.mark.django_db
def test_oob_render_marks_swap(make_table, products):
  html = make_table().field_holder(oob=True)
  assert 'hx-swap-oob="outerHTML"' in html


def test_missing_field_types_warn_and_yield_no_fields(caplog):
  table = TableField(Product, field_list={"name": "Name"}, field_types={}).bind("products")
  with caplog.at_level(logging.WARNING, logger="tablefield.fields"):
    assert table.fields_for_row() == {}
  assert "field types were not specified" in caplog.text


def test_default_field_list_uses_verbose_names():
  table = TableField(Product, field_types={"name": "text", "in_stock": "boolean", "extra": "text"})
  assert table.field_list == {"name": "Name", "in_stock": "In stock", "extra": "Extra"}


@pytest.mark.django_db
def test_get_cell_field_renders_under_combined_name(make_table, products):
  bolt = products[0]
  table = make_table()

  combined = table.get_cell_field("price", "combo[price]")
  assert _input_tag(str(combined.html), "combo[price]") is not None
  assert "products[new]" not in str(combined.html)

  assert _input_tag(str(table.get_cell_field("name").html), "products[new][name][]") is not None
  existing = _input_tag(str(table.get_cell_field("name", record=bolt).html), f"products[{bolt.pk}][name]")
  assert 'value="Bolt"' in existing
  assert table.get_cell_field("unknown") is None


@pytest.mark.django_db
def test_delete_column_needs_editable_existing_rows(make_table, products):
  bolt = products[0]
  assert make_table().can_delete_rows
  for table in (make_table(edit_existing=False), make_table(readonly=True)):
    assert not table.can_delete_rows
    assert _input_tag(table.field_holder(), f"products[{bolt.pk}][DELETE]") is None


def test_widget_declares_media(make_table):
  media = str(make_table().widget.media)
  assert "tablefield/js/table_field.js" in media
  assert "tablefield/css/table_field.css" in media

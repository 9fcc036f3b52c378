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

import json

from django.http import HttpResponse

from tablefield.fields import TableField


def is_htmx(request) -> bool:
  """HTMX sets the 'HX-Request' header on asynchronous requests."""
  return request.headers.get("HX-Request", "").lower() == "true"


def update_dom_id_response(dom_id: str, html: str, status: int = 200, trigger=None) -> HttpResponse:
  """
  Response replacing the element `dom_id` on the page. `html` must carry
  that id on its root element; HTMX swaps it out of band.
  """
  response = HttpResponse(html, status=status)
  response["HX-Reswap"] = "none"
  if trigger:
    response["HX-Trigger"] = json.dumps(trigger)
  return response


def table_update_response(request, form, field_name: str, results=None, status: int = 200) -> HttpResponse:
  """
  Re-render a table field after a save and return it as a fragment
  addressed by the table's DOM id.
  """
  bound = form[field_name]
  table: TableField = bound.field
  table.clear_cache()
  attrs = {"id": bound.auto_id} if bound.auto_id else None
  html = table.field_holder(bound.html_name, None, attrs, oob=True, request=request)

  trigger = None
  result = (results or {}).get(field_name)
  if result is not None:
    trigger = {
      table.update_event: {
        "table": bound.html_name,
        "saved": len(result.saved),
        "created": len(result.created),
        "deleted": len(result.deleted),
      }
    }
  return update_dom_id_response(table.dom_id(bound.html_name, attrs), html, status=status, trigger=trigger)

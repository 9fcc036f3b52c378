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

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from django.apps import apps

from tablefield import conf
from tablefield.fields import TableField
from tablefield.registry import FieldType

logger = logging.getLogger(__name__)

"""
Declarative table layouts.

Tables can be described in tablefield_tables.yaml instead of code:

  tables:
    supplier_products:
      model: catalog.Product
      filter_field: supplier
      sort: [name]
      required: [name, sku]
      columns:
        name:  {title: Name, type: text, max_length: 100}
        price: {title: Price, type: decimal, max_digits: 10, decimal_places: 2}
        category: {title: Category, type: model_choice, model: catalog.Category}

Every column key except `title` and `type` is passed to the type's factory.
"""

KNOWN_TABLE_KEYS = {
  "model", "columns", "required", "filter_field", "sort", "permissions",
  "extra_data", "show_add_row", "edit_existing", "relation_name",
  "relation_auto_setting",
}


class TableDefinitionNotFound(KeyError):
  """Raised when a named table is missing from the definitions file."""


@dataclass
class TableDefinition:
  name: str
  model: str
  columns: Dict[str, Dict[str, Any]]
  required: List[str] = field(default_factory=list)
  filter_field: Optional[str] = None
  sort: List[str] = field(default_factory=list)
  permissions: Optional[List[str]] = None
  extra_data: Dict[str, Any] = field(default_factory=dict)
  show_add_row: Optional[bool] = None
  edit_existing: bool = True
  relation_name: Optional[str] = None
  relation_auto_setting: Optional[bool] = None

  def get_model(self):
    return apps.get_model(self.model)

  def field_list(self) -> Dict[str, str]:
    return {
      name: str(col.get("title") or name.replace("_", " ").capitalize())
      for name, col in self.columns.items()
    }

  def field_types(self) -> Dict[str, Any]:
    out = {}
    for name, col in self.columns.items():
      options = {k: v for k, v in col.items() if k not in ("title", "type")}
      type_name = col.get("type")
      if not type_name:
        logger.warning("Table %r: column %r has no type, using 'text'", self.name, name)
        type_name = "text"
      out[name] = FieldType(type_name, **options) if options else type_name
    return out


def find_definitions_path(explicit_path: Optional[str] = None) -> Path:
  """
  Locate tablefield_tables.yaml:

  1. explicit_path argument
  2. TABLEFIELD["definitions_path"] setting
  3. config/tablefield_tables.yaml relative to the project and the CWD

  Raises:
      FileNotFoundError: if no file can be found.
  """
  candidates: list[Path] = []
  if explicit_path:
    candidates.append(Path(explicit_path))

  cfg_path = conf.get_setting("definitions_path")
  if cfg_path:
    candidates.append(Path(cfg_path))

  here = Path(__file__).resolve()
  candidates += [
    here.parents[2] / "config" / "tablefield_tables.yaml",
    Path.cwd() / "config" / "tablefield_tables.yaml",
  ]

  for c in candidates:
    if c.exists():
      return c

  raise FileNotFoundError(
    "tablefield_tables.yaml not found in expected locations. "
    "Provide an explicit path or configure TABLEFIELD['definitions_path']."
  )


def _columns(name: str, raw) -> Dict[str, Dict[str, Any]]:
  columns: Dict[str, Dict[str, Any]] = {}
  for col_name, col in (raw or {}).items():
    if isinstance(col, str):
      # shorthand "name: text"
      col = {"type": col}
    columns[col_name] = dict(col or {})
  if not columns:
    logger.warning("Table %r defines no columns", name)
  return columns


def parse_definition(name: str, data: Dict[str, Any]) -> TableDefinition:
  unknown = set(data) - KNOWN_TABLE_KEYS
  if unknown:
    logger.warning("Table %r: ignoring unknown keys %s", name, ", ".join(sorted(unknown)))

  if not data.get("model"):
    raise ValueError(f"Table {name!r} has no 'model'.")

  sort = data.get("sort") or []
  return TableDefinition(
    name=name,
    model=data["model"],
    columns=_columns(name, data.get("columns")),
    required=list(data.get("required") or []),
    filter_field=data.get("filter_field"),
    sort=[sort] if isinstance(sort, str) else list(sort),
    permissions=data.get("permissions"),
    extra_data=dict(data.get("extra_data") or {}),
    show_add_row=data.get("show_add_row"),
    edit_existing=data.get("edit_existing", True),
    relation_name=data.get("relation_name"),
    relation_auto_setting=data.get("relation_auto_setting"),
  )


def load_table_definitions(path: Optional[str] = None) -> Dict[str, TableDefinition]:
  p = find_definitions_path(path)
  with open(p, "r", encoding="utf-8") as f:
    data = yaml.safe_load(f) or {}
  tables = data.get("tables") or {}
  return {name: parse_definition(name, body or {}) for name, body in tables.items()}


def get_table_definition(name: str, path: Optional[str] = None) -> TableDefinition:
  definitions = load_table_definitions(path)
  if name not in definitions:
    available = ", ".join(sorted(definitions)) if definitions else "(none)"
    raise TableDefinitionNotFound(
      f"Table {name!r} not found in tablefield_tables.yaml. "
      f"Available tables: {available}."
    )
  return definitions[name]


def table_field_from_definition(definition, *, filter_value=None, path: Optional[str] = None,
                                **overrides) -> TableField:
  """Build a TableField from a definition (or its name); kwargs override it."""
  if isinstance(definition, str):
    definition = get_table_definition(definition, path)

  kwargs = dict(
    field_list=definition.field_list(),
    field_types=definition.field_types(),
    filter_field=definition.filter_field,
    filter_value=filter_value,
    edit_existing=definition.edit_existing,
    source_sort=definition.sort or None,
    permissions=definition.permissions,
    show_add_row=definition.show_add_row,
    extra_data=definition.extra_data,
    required_fields=definition.required,
    relation_auto_setting=definition.relation_auto_setting,
    relation_name=definition.relation_name,
  )
  kwargs.update(overrides)
  return TableField(definition.get_model(), **kwargs)

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

import os
import sys
from pathlib import Path

import pytest


def main():
  """Configure Django and run pytest."""
  root = Path(__file__).resolve().parent

  # 'core' holds the Django apps (tablefield, catalog) and the site package
  core = root / "core"
  if str(core) not in sys.path:
    sys.path.insert(0, str(core))

  os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tablefield_site.settings")

  return pytest.main(["core/tests", *sys.argv[1:]])


if __name__ == "__main__":
  raise SystemExit(main())

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
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent


def _env_bool(key: str, default: bool = False) -> bool:
  val = os.getenv(key)
  return default if val is None else val.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("TABLEFIELD_SECRET_KEY", "tablefield-dev-only-secret")
DEBUG = _env_bool("TABLEFIELD_DEBUG", False)
ALLOWED_HOSTS = [h.strip() for h in os.getenv("TABLEFIELD_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

INSTALLED_APPS = [
  "django.contrib.admin",
  "django.contrib.auth",
  "django.contrib.contenttypes",
  "django.contrib.sessions",
  "django.contrib.messages",
  "django.contrib.staticfiles",
  "tablefield",
  "catalog",
]

MIDDLEWARE = [
  "django.middleware.security.SecurityMiddleware",
  "django.contrib.sessions.middleware.SessionMiddleware",
  "django.middleware.common.CommonMiddleware",
  "django.middleware.csrf.CsrfViewMiddleware",
  "django.contrib.auth.middleware.AuthenticationMiddleware",
  "django.contrib.messages.middleware.MessageMiddleware",
  # exposes request.user to model saves and table permission checks
  "crum.CurrentRequestUserMiddleware",
]

ROOT_URLCONF = "tablefield_site.urls"

TEMPLATES = [
  {
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {
      "context_processors": [
        "django.template.context_processors.request",
        "django.contrib.auth.context_processors.auth",
        "django.contrib.messages.context_processors.messages",
      ],
    },
  },
]

DATABASES = {
  "default": {
    "ENGINE": "django.db.backends.sqlite3",
    "NAME": os.getenv("TABLEFIELD_DB_PATH", str(PROJECT_ROOT / "tablefield.sqlite3")),
  }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
LOGIN_URL = "/admin/login/"

TABLEFIELD = {
  "permissions": ["edit", "delete", "add"],
  "show_add_row": True,
  "relation_auto_setting": True,
  "definitions_path": os.getenv(
    "TABLEFIELD_DEFINITIONS_PATH",
    str(PROJECT_ROOT / "config" / "tablefield_tables.yaml"),
  ),
}

LOGGING = {
  "version": 1,
  "disable_existing_loggers": False,
  "handlers": {
    "console": {"class": "logging.StreamHandler"},
  },
  "loggers": {
    "tablefield": {
      "handlers": ["console"],
      "level": "DEBUG" if DEBUG else "INFO",
    },
  },
}

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-secret-key-change-in-production")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "proposal_export",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "proposal_studio.urls"
WSGI_APPLICATION = "proposal_studio.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

USE_TZ = True
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "UTC")
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

PROPOSAL_EXPORT = {
    "PAGE_SIZE": os.environ.get("PROPOSAL_EXPORT_PAGE_SIZE", "A4"),
    "MARGIN_MM": float(os.environ.get("PROPOSAL_EXPORT_MARGIN_MM", "20")),
    "FOOTER_LABEL": os.environ.get("PROPOSAL_EXPORT_FOOTER_LABEL", "Generated with Proposal Studio"),
    "DEFAULT_PRIMARY_COLOR": "#4F46E5",
    "PDF_COMPRESSION": _env_bool("PROPOSAL_EXPORT_PDF_COMPRESSION", True),
    "PDF_BACKEND": os.environ.get("PROPOSAL_EXPORT_PDF_BACKEND", "canvas"),
    "DOCX_BACKEND": os.environ.get("PROPOSAL_EXPORT_DOCX_BACKEND", "structured"),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "[%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "proposal_export": {
            "handlers": ["console"],
            "level": os.environ.get("PROPOSAL_EXPORT_LOG_LEVEL", "INFO"),
        },
    },
}

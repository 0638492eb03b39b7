# backend/boxoffice/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/boxoffice.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///boxoffice.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Locale used when a title has no translation for the buyer's language
    DEFAULT_LOCALE = os.environ.get("BOXOFFICE_DEFAULT_LOCALE", "en")

    # Shown instead of the code of a dynamic (system-applied) discount
    DYNAMIC_DISCOUNT_LABEL = os.environ.get("BOXOFFICE_DYNAMIC_DISCOUNT_LABEL", "Discount applied")

    LOG_LEVEL = os.environ.get("BOXOFFICE_LOG_LEVEL", "INFO")

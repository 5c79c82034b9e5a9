# backend/stockbook/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite file holding the key-value snapshot table
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///stockbook.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" persists collections in storage_entries; "memory" keeps them in-process
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")

    # Description/insight generation (Gemini REST API)
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    DESCRIPTION_MODEL = os.environ.get("DESCRIPTION_MODEL", "gemini-3-flash-preview")
    DESCRIPTION_API_BASE = os.environ.get(
        "DESCRIPTION_API_BASE",
        "https://generativelanguage.googleapis.com/v1beta",
    )
    DESCRIPTION_TIMEOUT_SECONDS = float(os.environ.get("DESCRIPTION_TIMEOUT_SECONDS", "15"))

    # Products with stock strictly below this count as low stock
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    # bcrypt work factor for new password hashes
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

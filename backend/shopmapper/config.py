# backend/shopmapper/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Signs the session token; the default is only fit for local development
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopmapper.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopmapper.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "session" belongs to the signed territory session cookie
    SESSION_COOKIE_NAME = "flask-session"

    SHOP_SESSION_COOKIE = "session"
    SESSION_DURATION_HOURS = int(os.environ.get("SESSION_DURATION_HOURS", "24"))
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE")

    # Re-check the session territory (and a rep's lorry binding) on every decode
    REVALIDATE_TERRITORY = _env_bool("REVALIDATE_TERRITORY")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Shop photo uploads (Cloudinary upload API)
    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET")
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "shop-mapper")
    UPLOAD_TIMEOUT_SECONDS = float(os.environ.get("UPLOAD_TIMEOUT_SECONDS", "30"))

    # Request body cap; larger shop photo submissions are answered with 413
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_UPLOAD_MB", "10")) * 1024 * 1024

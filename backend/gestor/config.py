# backend/gestor/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/gestor.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///gestor.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Prefix of every persisted collection key ("gp_db_products", ...)
    STORE_NAMESPACE = os.environ.get("STORE_NAMESPACE", "gp_db")

    # "reject" refuses sales/exits below zero, "allow" keeps back-order behaviour
    NEGATIVE_STOCK_POLICY = os.environ.get("NEGATIVE_STOCK_POLICY", "reject")

    # Changing either value invalidates every stored credential digest.
    CREDENTIAL_SALT = os.environ.get("CREDENTIAL_SALT", "gestor-credential-salt-v1")
    CREDENTIAL_KDF_ROUNDS = int(os.environ.get("CREDENTIAL_KDF_ROUNDS", "50"))

    WRITE_LOCK_TIMEOUT_SECONDS = float(os.environ.get("WRITE_LOCK_TIMEOUT_SECONDS", "10"))
    WRITE_RETRY_ATTEMPTS = int(os.environ.get("WRITE_RETRY_ATTEMPTS", "3"))

    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "12"))

    # Optional JSON file replacing the built-in role table
    ROLE_PERMISSIONS_FILE = os.environ.get("ROLE_PERMISSIONS_FILE")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Front-end dev servers allowed to call the API from the browser
    CORS_ALLOWED_ORIGINS = tuple(
        o.strip() for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ).split(",") if o.strip()
    )

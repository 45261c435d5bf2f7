# backend/invoicing/config.py
from __future__ import annotations
import os


class Config:
    # SQLite DB stored in backend/instance/invoicing.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///invoicing.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Retries for lock timeouts / deadlocks while recording payments
    PAYMENT_LOCK_RETRY_ATTEMPTS = int(os.environ.get("PAYMENT_LOCK_RETRY_ATTEMPTS", "3"))
    PAYMENT_LOCK_RETRY_BACKOFF = float(os.environ.get("PAYMENT_LOCK_RETRY_BACKOFF", "0.1"))


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    PAYMENT_LOCK_RETRY_BACKOFF = 0.0

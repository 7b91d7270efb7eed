"""Test environment: in-memory SQLite and non-production settings, set before idhub is imported."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret-for-the-idhub-test-suite"
os.environ.setdefault("LOG_LEVEL", "WARNING")

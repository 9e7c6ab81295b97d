"""Pytest configuration and shared fixtures."""

import os


# Settings are read at import time; give the test process a signing secret and
# keep the default database path out of the working tree.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SQLITE_DB_PATH", ":memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

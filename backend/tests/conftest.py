"""
Test configuration.

Points the application at an in-memory SQLite database before any
foodscan module reads settings, so importing foodscan.main never needs
a running PostgreSQL server.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

"""Shared pytest setup.

Settings are read at import time, so the environment is prepared before any
app module is imported. An in-memory SQLite database is the default target.
"""

import os

from dotenv import load_dotenv

load_dotenv()

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("SQL_ECHO", "false")
os.environ.setdefault("AUTO_INIT_DB", "false")

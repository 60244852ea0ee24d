"""
Shared test configuration.

DATABASE_URL is pointed at a throwaway SQLite file before any test
imports api.database, which creates its engine at import time.
"""

import os
import sys
import tempfile

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

_DB_DIR = tempfile.mkdtemp(prefix="factory-twin-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

# shared setup for the test modules; import it before anything from src/
import os
import sys
import tempfile
import unittest

# keep password hashing cheap while testing
os.environ.setdefault("BIZMGR_HASH_ITERATIONS", "1000")

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Each test gets a fresh SQLite file with the tables created."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self._orig_db_path = db_database.DB_PATH
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    async def asyncSetUp(self):
        async with db_database.connect() as conn:
            cur = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table';"
            )
            await cur.fetchall()
            await cur.close()

    def tearDown(self):
        db_database.DB_PATH = self._orig_db_path
        db_database._initialized = False
        self.temp_dir.cleanup()

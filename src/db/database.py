# connection handling for the store; only db.crud talks to it
import asyncio
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row
from typing import List

import aiosqlite

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = config.DB_PATH
SCHEMA_SCRIPT = os.path.join(os.path.dirname(__file__), "tables.sql")
REQUIRED_TABLES = (
    "users",
    "customers",
    "suppliers",
    "products",
    "orders",
    "order_items",
    "invoices",
    "payments",
)
# seconds a writer waits for another connection's transaction
BUSY_TIMEOUT = 10.0

_initialized = False
_init_lock = asyncio.Lock()


async def _missing_tables(conn: aiosqlite.Connection) -> List[str]:
    cur = await conn.execute(
        f"""
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name IN ({", ".join("?" * len(REQUIRED_TABLES))});
        """,
        REQUIRED_TABLES,
    )
    present = {row[0] for row in await cur.fetchall()}
    await cur.close()
    return [name for name in REQUIRED_TABLES if name not in present]


async def _ensure_schema(conn: aiosqlite.Connection) -> None:
    missing = await _missing_tables(conn)
    if not missing:
        return
    _logger.info(f"Creating tables {', '.join(missing)} in {DB_PATH}...")
    with open(SCHEMA_SCRIPT, "r", encoding="utf-8") as f:
        # every statement is CREATE ... IF NOT EXISTS
        await conn.executescript(f.read())
    await conn.commit()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection with FK enabled.

    The schema is created on first use of a new database file.
    """
    global _initialized
    directory = os.path.dirname(DB_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = await aiosqlite.connect(DB_PATH, timeout=BUSY_TIMEOUT)
    conn.row_factory = Row
    try:
        await conn.execute("PRAGMA foreign_keys = ON;")
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    await _ensure_schema(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()


@asynccontextmanager
async def transaction() -> aiosqlite.Connection:
    """Connection whose statements are committed together or not at all.

    BEGIN IMMEDIATE takes the write lock up front, so a version check and
    the update that follows it cannot interleave with another writer.
    """
    async with connect() as conn:
        await conn.execute("BEGIN IMMEDIATE;")
        try:
            yield conn
        except BaseException:
            await conn.rollback()
            raise
        else:
            await conn.commit()

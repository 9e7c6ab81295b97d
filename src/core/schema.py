"""Document store schema (code-first approach).

Each collection is a table of JSON documents keyed by an integer id. The only
indexed lookups are the equality reads the stores perform.
"""

import logging

import aiosqlite

from src.core.config import constants


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    constants.ACCOUNTS_COLLECTION,
    constants.TASKS_COLLECTION,
]

# Equality lookups that get an expression index: (collection, field)
INDEXED_FIELDS = [
    (constants.ACCOUNTS_COLLECTION, "email"),
    (constants.TASKS_COLLECTION, "owner_id"),
]


def _table_ddl(collection: str) -> str:
    return f"CREATE TABLE IF NOT EXISTS {collection} (id INTEGER PRIMARY KEY AUTOINCREMENT, data TEXT NOT NULL)"


def _index_ddl(collection: str, field: str) -> str:
    return (
        f"CREATE INDEX IF NOT EXISTS idx_{collection}_{field} "
        f"ON {collection} (json_extract(data, '$.{field}'))"
    )


async def init_schema(conn: aiosqlite.Connection) -> None:
    """Create collection tables and lookup indexes (idempotent)."""
    for collection in COLLECTIONS:
        await conn.execute(_table_ddl(collection))
    for collection, field in INDEXED_FIELDS:
        await conn.execute(_index_ddl(collection, field))
    await conn.commit()
    logger.info("Document store schema ready", extra={"collections": COLLECTIONS})

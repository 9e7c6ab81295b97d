"""SQLite-backed document store with a deliberately narrow query surface.

The store supports id-keyed CRUD and a single equality lookup on one field.
Anything richer (multi-field filters, sorting, search, pagination) happens in
the service layer, so nothing here may grow a more capable query.
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from src.core.schema import init_schema


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when the storage backend fails."""


class RecordNotFoundError(DatabaseError):
    """Raised when an id-keyed write targets a record that no longer exists."""


class DocumentStore(Protocol):
    """Primitives the stores layer relies on."""

    async def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def get_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None: ...

    async def update_by_id(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def delete_by_id(self, collection: str, record_id: str) -> bool: ...

    async def find_by_equals(self, collection: str, field: str, value: str) -> list[dict[str, Any]]: ...


_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not _IDENTIFIER.match(collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _validate_field_name(field: str) -> None:
    if not _IDENTIFIER.match(field):
        msg = f"Invalid field name: {field}"
        raise ValueError(msg)


def _parse_record_id(record_id: str) -> int | None:
    """Return the integer row id, or None when the id cannot exist in this store."""
    if not isinstance(record_id, str) or not record_id.isdigit():
        return None
    return int(record_id)


def _to_record(row_id: int, raw: str) -> dict[str, Any]:
    return {**json.loads(raw), "id": str(row_id)}


def get_db_path(db_path: str) -> Path:
    """Get the resolved SQLite database file path."""
    return Path(db_path).resolve()


class SQLiteDocumentStore:
    """Document store over aiosqlite, one JSON document per row.

    Constructed once at startup and passed to request handlers; callers must
    ``await connect()`` before use and ``await close()`` on shutdown.
    """

    def __init__(self, db_path: str) -> None:
        self._path = db_path if db_path == ":memory:" else str(get_db_path(db_path))
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the connection and make sure the schema exists."""
        async with self._lock:
            if self._conn is not None:
                return
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = await aiosqlite.connect(self._path)
                await conn.execute("PRAGMA journal_mode = WAL")
                await init_schema(conn)
            except aiosqlite.Error as e:
                logger.error("sqlite_connect_failed", extra={"db_path": self._path, "error": str(e)})
                msg = f"Failed to open document store at {self._path}: {e}"
                raise DatabaseError(msg) from e
            self._conn = conn
            logger.info("Opened SQLite document store", extra={"db_path": self._path})

    async def close(self) -> None:
        """Close the connection if open."""
        async with self._lock:
            if self._conn is None:
                return
            try:
                await self._conn.close()
                logger.info("Closed SQLite document store", extra={"db_path": self._path})
            except aiosqlite.Error as e:
                logger.warning("Error closing SQLite connection", extra={"error": str(e)})
            finally:
                self._conn = None

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise DatabaseError("Document store is not connected. Call connect() first.")
        return self._conn

    async def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document and return it with its assigned id."""
        _validate_collection_name(collection)
        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"INSERT INTO {collection} (data) VALUES (?)",  # noqa: S608 - collection is validated
                (json.dumps(data),),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to create record in {collection}: {e}"
            raise DatabaseError(msg) from e

        record_id = cursor.lastrowid
        logger.info("Created record", extra={"collection": collection, "record_id": record_id})
        return {**data, "id": str(record_id)}

    async def get_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """Fetch a single document by id, or None when absent."""
        _validate_collection_name(collection)
        row_id = _parse_record_id(record_id)
        if row_id is None:
            return None

        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"SELECT id, data FROM {collection} WHERE id = ?",  # noqa: S608 - collection is validated
                (row_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
            msg = f"Failed to get record from {collection}: {e}"
            raise DatabaseError(msg) from e

        if row is None:
            return None
        return _to_record(row[0], row[1])

    async def update_by_id(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Merge ``data`` into an existing document and return the result.

        Raises:
            RecordNotFoundError: If the document does not exist (or vanished).
        """
        current = await self.get_by_id(collection, record_id)
        if current is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        merged = {key: value for key, value in current.items() if key != "id"}
        merged.update(data)

        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"UPDATE {collection} SET data = ? WHERE id = ?",  # noqa: S608 - collection is validated
                (json.dumps(merged), int(record_id)),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error(
                "update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to update record in {collection}: {e}"
            raise DatabaseError(msg) from e

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return {**merged, "id": record_id}

    async def delete_by_id(self, collection: str, record_id: str) -> bool:
        """Delete a document by id.

        Raises:
            RecordNotFoundError: If the document does not exist.
        """
        _validate_collection_name(collection)
        row_id = _parse_record_id(record_id)
        if row_id is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        conn = self._connection()
        try:
            cursor = await conn.execute(
                f"DELETE FROM {collection} WHERE id = ?",  # noqa: S608 - collection is validated
                (row_id,),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error(
                "delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)}
            )
            msg = f"Failed to delete record from {collection}: {e}"
            raise DatabaseError(msg) from e

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
        return True

    async def find_by_equals(self, collection: str, field: str, value: str) -> list[dict[str, Any]]:
        """Return every document whose ``field`` equals ``value``, in insertion order."""
        _validate_collection_name(collection)
        _validate_field_name(field)

        conn = self._connection()
        try:
            cursor = await conn.execute(
                # collection and field are validated identifiers
                f"SELECT id, data FROM {collection} WHERE json_extract(data, '$.{field}') = ? ORDER BY id",  # noqa: S608
                (value,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("find_records_failed", extra={"collection": collection, "field": field, "error": str(e)})
            msg = f"Failed to list records from {collection}: {e}"
            raise DatabaseError(msg) from e

        records = [_to_record(row_id, raw) for row_id, raw in rows]
        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records

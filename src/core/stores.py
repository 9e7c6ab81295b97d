"""Identity and task stores over the narrow document store.

These classes add typed records and timestamps. They own no business rules:
ownership checks and every query richer than ``owner_id = ?`` belong to the
service layer.
"""

from datetime import UTC, datetime
from typing import Any

from src.core.config import constants
from src.core.db_client import DocumentStore
from src.domain.account import Account
from src.domain.task import Task


def utc_now_iso() -> str:
    """Current UTC time in the store's ISO-8601 ``Z`` format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityStore:
    """Persists account records."""

    collection = constants.ACCOUNTS_COLLECTION

    def __init__(self, db: DocumentStore) -> None:
        self._db = db

    async def create(self, data: dict[str, Any]) -> Account:
        now = utc_now_iso()
        document = {
            "bio": "",
            "avatar": "",
            "password_hash": None,
            **data,
            "email": normalize_email(data["email"]),
            "created_at": now,
            "updated_at": now,
        }
        record = await self._db.create(self.collection, document)
        return Account.model_validate(record)

    async def get_by_id(self, account_id: str) -> Account | None:
        record = await self._db.get_by_id(self.collection, account_id)
        return Account.model_validate(record) if record else None

    async def find_by_email(self, email: str) -> Account | None:
        records = await self._db.find_by_equals(self.collection, "email", normalize_email(email))
        return Account.model_validate(records[0]) if records else None

    async def update_by_id(self, account_id: str, data: dict[str, Any]) -> Account:
        """Apply a partial update; raises RecordNotFoundError if the account is gone."""
        record = await self._db.update_by_id(self.collection, account_id, {**data, "updated_at": utc_now_iso()})
        return Account.model_validate(record)


class TaskStore:
    """Persists task records. ``find_by_owner`` is the only filtered read."""

    collection = constants.TASKS_COLLECTION

    def __init__(self, db: DocumentStore) -> None:
        self._db = db

    async def create(self, owner_id: str, data: dict[str, Any]) -> Task:
        now = utc_now_iso()
        document = {**data, "owner_id": owner_id, "created_at": now, "updated_at": now}
        record = await self._db.create(self.collection, document)
        return Task.model_validate(record)

    async def get_by_id(self, task_id: str) -> Task | None:
        record = await self._db.get_by_id(self.collection, task_id)
        return Task.model_validate(record) if record else None

    async def update_by_id(self, task_id: str, data: dict[str, Any]) -> Task:
        """Apply a partial update; raises RecordNotFoundError if the task is gone."""
        fields = {key: value for key, value in data.items() if key not in ("id", "owner_id", "created_at")}
        record = await self._db.update_by_id(self.collection, task_id, {**fields, "updated_at": utc_now_iso()})
        return Task.model_validate(record)

    async def delete_by_id(self, task_id: str) -> bool:
        """Delete a task; raises RecordNotFoundError if it is already gone."""
        return await self._db.delete_by_id(self.collection, task_id)

    async def find_by_owner(self, owner_id: str) -> list[Task]:
        records = await self._db.find_by_equals(self.collection, "owner_id", owner_id)
        return [Task.model_validate(record) for record in records]

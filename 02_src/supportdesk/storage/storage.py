"""SQLite key-value storage implementation."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..logging_config import get_logger
from ..models import Conversation, LoanApplication, Principal, TraceEvent
from .codec import (
    conversation_from_dict,
    conversation_to_dict,
    loan_application_from_dict,
    loan_application_to_dict,
    principal_from_dict,
    principal_to_dict,
)

logger = get_logger(__name__)


class StorageKeys:
    """Keys of the JSON documents in kv_store."""

    CONVERSATIONS = "krux_conversations"
    USERS = "krux_users"
    LOAN_APPLICATIONS = "krux_loan_applications"
    AUTH_USER = "krux_auth_user"


class IStorage(Protocol):
    """Persistent key-value storage for support desk state (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Generic documents
    async def set_json(self, key: str, value: Any) -> bool:
        """Store a JSON document. Return False if the write failed."""
        ...

    async def get_json(self, key: str) -> Any | None:
        """Load a JSON document, None if missing or unreadable."""
        ...

    async def remove(self, key: str) -> None:
        """Remove a document."""
        ...

    # Conversations
    async def save_conversations(self, conversations: list[Conversation]) -> bool:
        """Save the full conversation list."""
        ...

    async def load_conversations(self) -> list[Conversation]:
        """Load the full conversation list."""
        ...

    # Signed-in principal
    async def save_auth_user(self, principal: Principal) -> bool:
        """Save the signed-in principal snapshot."""
        ...

    async def get_auth_user(self) -> Principal | None:
        """Get the signed-in principal snapshot."""
        ...

    async def clear_auth_user(self) -> None:
        """Forget the signed-in principal."""
        ...

    # Loan applications
    async def save_loan_applications(self, applications: list[LoanApplication]) -> bool:
        """Save loan applications."""
        ...

    async def load_loan_applications(self) -> list[LoanApplication]:
        """Load loan applications."""
        ...

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite key-value storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    # Generic documents
    async def set_json(self, key: str, value: Any) -> bool:
        """Store a JSON document. Failures are logged, not raised."""
        conn = self._require_conn()

        try:
            payload = json.dumps(value, ensure_ascii=False)
            await conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, payload),
            )
            await conn.commit()
        except (TypeError, ValueError, aiosqlite.Error) as e:
            logger.error("Error saving %s to storage: %s", key, e, exc_info=True)
            return False

        return True

    async def get_json(self, key: str) -> Any | None:
        """Load a JSON document. Failures are logged and yield None."""
        conn = self._require_conn()

        try:
            cursor = await conn.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("Error reading %s from storage: %s", key, e, exc_info=True)
            return None

        if not row:
            return None

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.error("Corrupt JSON under %s: %s", key, e)
            return None

    async def remove(self, key: str) -> None:
        """Remove a document."""
        conn = self._require_conn()

        try:
            await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("Error removing %s from storage: %s", key, e, exc_info=True)

    # Conversations
    async def save_conversations(self, conversations: list[Conversation]) -> bool:
        """Save the full conversation list."""
        return await self.set_json(
            StorageKeys.CONVERSATIONS,
            [conversation_to_dict(c) for c in conversations],
        )

    async def load_conversations(self) -> list[Conversation]:
        """Load the full conversation list (empty if none saved)."""
        data = await self.get_json(StorageKeys.CONVERSATIONS)
        if not data:
            return []
        return [conversation_from_dict(item) for item in data]

    # Signed-in principal
    async def save_auth_user(self, principal: Principal) -> bool:
        """Save the signed-in principal snapshot."""
        return await self.set_json(StorageKeys.AUTH_USER, principal_to_dict(principal))

    async def get_auth_user(self) -> Principal | None:
        """Get the signed-in principal snapshot."""
        data = await self.get_json(StorageKeys.AUTH_USER)
        if not data:
            return None
        return principal_from_dict(data)

    async def clear_auth_user(self) -> None:
        """Forget the signed-in principal."""
        await self.remove(StorageKeys.AUTH_USER)

    # Loan applications
    async def save_loan_applications(self, applications: list[LoanApplication]) -> bool:
        """Save loan applications."""
        return await self.set_json(
            StorageKeys.LOAN_APPLICATIONS,
            [loan_application_to_dict(a) for a in applications],
        )

    async def load_loan_applications(self) -> list[LoanApplication]:
        """Load loan applications (empty if none saved)."""
        data = await self.get_json(StorageKeys.LOAN_APPLICATIONS)
        if not data:
            return []
        return [loan_application_from_dict(item) for item in data]

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event. Failures are logged, not raised."""
        conn = self._require_conn()

        try:
            await conn.execute(
                """
                INSERT INTO trace_events (id, event_type, actor, data, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    event.id or str(uuid.uuid4()),
                    event.event_type,
                    event.actor,
                    json.dumps(event.data, ensure_ascii=False),
                    event.timestamp.isoformat(),
                ),
            )
            await conn.commit()
        except (TypeError, ValueError, aiosqlite.Error) as e:
            logger.error(
                "Error saving trace event %s: %s", event.event_type, e, exc_info=True
            )

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters (newest first)."""
        conn = self._require_conn()

        conditions = []
        params: list[Any] = []

        if after:
            if after.tzinfo is None:
                after = after.replace(tzinfo=timezone.utc)
            conditions.append("timestamp > ?")
            params.append(after.isoformat())
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            conditions.append(f"event_type IN ({placeholders})")
            params.extend(event_types)
        if actor:
            conditions.append("actor = ?")
            params.append(actor)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT id, event_type, actor, data, timestamp
            FROM trace_events
            {where_clause}
            ORDER BY timestamp DESC, rowid DESC
            LIMIT ?
        """
        params.append(limit)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            TraceEvent(
                id=row[0],
                event_type=row[1],
                actor=row[2],
                data=json.loads(row[3]),
                timestamp=datetime.fromisoformat(row[4]),
            )
            for row in rows
        ]

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        for table in ("kv_store", "trace_events"):
            await conn.execute(f"DELETE FROM {table}")

        await conn.commit()

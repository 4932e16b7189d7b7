"""
SQLite database implementation.
Simple and direct - no abstraction layers.
"""

import aiosqlite
import json
from datetime import datetime
from typing import List, Optional
import os

from .models import ShopSession, TagIndex, generate_uuid


def _parse_datetime(value: str) -> datetime:
    """Parse a stored timestamp, dropping timezone info."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


class SQLiteDatabase:
    """SQLite database for session lookup and the tag index."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Create database tables."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS shop_sessions (
                shop TEXT PRIMARY KEY,
                access_token TEXT NOT NULL,
                scope TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS tag_indexes (
                id TEXT PRIMARY KEY,
                shop TEXT NOT NULL UNIQUE,
                tags TEXT NOT NULL DEFAULT '[]',
                updated_at TEXT NOT NULL
            );
        """)
        await conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # ===== Helper Methods =====

    def _row_to_session(self, row: aiosqlite.Row) -> ShopSession:
        return ShopSession(
            shop=row["shop"],
            access_token=row["access_token"],
            scope=row["scope"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def _row_to_tag_index(self, row: aiosqlite.Row) -> TagIndex:
        return TagIndex(
            id=row["id"],
            shop=row["shop"],
            tags=json.loads(row["tags"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    # ===== Session Operations =====

    async def get_shop_session(self, shop: str) -> Optional[ShopSession]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM shop_sessions WHERE shop = ?", (shop,))
        row = await cursor.fetchone()
        return self._row_to_session(row) if row else None

    async def save_shop_session(self, session: ShopSession) -> ShopSession:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO shop_sessions (shop, access_token, scope, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(shop) DO UPDATE SET
                access_token = excluded.access_token,
                scope = excluded.scope,
                updated_at = excluded.updated_at
            """,
            (
                session.shop,
                session.access_token,
                session.scope,
                session.created_at.isoformat(),
                datetime.utcnow().isoformat(),
            )
        )
        await conn.commit()
        return await self.get_shop_session(session.shop)

    # ===== Tag Index Operations =====

    async def get_tag_index(self, shop: str) -> Optional[TagIndex]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM tag_indexes WHERE shop = ?", (shop,))
        row = await cursor.fetchone()
        return self._row_to_tag_index(row) if row else None

    async def get_indexed_tags(self, shop: str) -> List[str]:
        index = await self.get_tag_index(shop)
        return index.tags if index else []

    async def replace_tag_index(self, shop: str, tags: List[str]) -> TagIndex:
        """
        Replace the shop's tag set, creating the record on first run.

        The previous tag list is overwritten, never merged.
        """
        conn = await self._get_connection()
        now = datetime.utcnow().isoformat()

        cursor = await conn.execute("SELECT id FROM tag_indexes WHERE shop = ?", (shop,))
        existing = await cursor.fetchone()

        if existing:
            await conn.execute(
                "UPDATE tag_indexes SET tags = ?, updated_at = ? WHERE id = ?",
                (json.dumps(tags), now, existing["id"])
            )
        else:
            await conn.execute(
                "INSERT INTO tag_indexes (id, shop, tags, updated_at) VALUES (?, ?, ?, ?)",
                (generate_uuid(), shop, json.dumps(tags), now)
            )

        await conn.commit()
        return await self.get_tag_index(shop)

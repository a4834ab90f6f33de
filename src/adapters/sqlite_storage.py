"""SQLite storage adapter.

Implements the core StorePort by keeping each document as a JSON blob in a
simple SQLite database.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Iterable, Optional

from core.models import Account, Group, Transaction

SETTINGS_ID = "settings"


class SQLiteStore:
    """Thin SQLite wrapper that satisfies the StorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - accounts: bank accounts keyed by id
        - groups: account groups keyed by id
        - transactions: bank operations, with a to_categorize column so the
          categorization query does not parse every document
        - settings: the single user settings document
        """

        with self._connect() as conn:
            for table in ("accounts", "groups", "settings"):
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id TEXT PRIMARY KEY,
                        data TEXT NOT NULL
                    )
                    """
                )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    to_categorize INTEGER NOT NULL DEFAULT 0,
                    data TEXT NOT NULL
                )
                """
            )

    def _upsert(self, table: str, rows: Iterable[tuple[str, dict[str, Any]]]) -> None:
        with self._connect() as conn:
            conn.executemany(
                f"""
                INSERT INTO {table} (id, data) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET data = excluded.data
                """,
                [(doc_id, json.dumps(doc)) for doc_id, doc in rows],
            )

    def get_accounts(self, ids: Iterable[str]) -> list[Account]:
        """Return the accounts matching ``ids``; unknown ids are skipped."""

        ids = list(ids)
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT data FROM accounts WHERE id IN ({placeholders}) ORDER BY id",
                ids,
            ).fetchall()
        return [Account.from_dict(json.loads(row["data"])) for row in rows]

    def save_accounts(self, accounts: Iterable[Account]) -> None:
        self._upsert("accounts", ((account.id, account.to_dict()) for account in accounts))

    def get_groups(self) -> list[Group]:
        with self._connect() as conn:
            rows = conn.execute("SELECT data FROM groups ORDER BY id").fetchall()
        return [Group.from_dict(json.loads(row["data"])) for row in rows]

    def save_groups(self, groups: Iterable[Group]) -> None:
        self._upsert("groups", ((group.id, group.to_dict()) for group in groups))

    def get_transactions_to_categorize(self) -> list[Transaction]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT data FROM transactions WHERE to_categorize = 1"
            ).fetchall()
        return [Transaction.from_dict(json.loads(row["data"])) for row in rows]

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO transactions (id, to_categorize, data) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    to_categorize = excluded.to_categorize,
                    data = excluded.data
                """,
                [
                    (transaction.id, int(transaction.to_categorize), json.dumps(transaction.to_dict()))
                    for transaction in transactions
                ],
            )

    def get_settings(self) -> Optional[dict[str, Any]]:
        """Return the stored settings document, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM settings WHERE id = ?",
                (SETTINGS_ID,),
            ).fetchone()
        return json.loads(row["data"]) if row else None

    def save_settings(self, settings: dict[str, Any]) -> None:
        self._upsert("settings", [(SETTINGS_ID, settings)])

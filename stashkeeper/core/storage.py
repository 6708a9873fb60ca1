"""
Storage layer for Stashkeeper.

InventoryStorage is the document store behind the inventory core. It wraps
SQLite and holds three kinds of documents:

- item templates (the read-only catalog)
- player root documents (profile plus the update counter)
- inventory section snapshots (stash, expedition, equipment)

Multi-document writes go through a UnitOfWork, which collects the intended
writes and commits all of them in one SQLite transaction or none of them.
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import CatalogUnavailableError, StoreUnavailableError
from .models import SECTIONS, ItemTemplate, now

# Placeholder replaced by the commit timestamp
_TIMESTAMP = object()


class InventoryStorage:
    """
    Manages the SQLite database for templates, players and inventories.

    One connection is shared by all request threads; every use of it is
    serialized by an internal lock so statements from different requests
    never interleave inside a transaction.

    Attributes:
        db_path: Path to SQLite database file
        conn: Database connection (None until initialize() is called)
    """

    def __init__(self, db_path: str):
        """
        Initialize storage for a database file.

        Args:
            db_path: Path to SQLite database file
                    Use ':memory:' for in-memory testing database
        """
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def initialize(self, schema_path: Optional[str] = None) -> None:
        """
        Open the database connection and create tables if they don't exist.

        Args:
            schema_path: Path to schema.sql file (uses the bundled one if not provided)
        """
        # isolation_level=None: transactions are opened explicitly with BEGIN
        self.conn = sqlite3.connect(
            self.db_path,
            isolation_level=None,
            check_same_thread=False,
        )
        self.conn.row_factory = sqlite3.Row

        if schema_path is None:
            schema_path = Path(__file__).parent / 'schema.sql'

        with open(schema_path, 'r') as f:
            schema = f.read()

        with self._lock:
            self.conn.executescript(schema)

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    # ========== Transaction Management ==========

    @contextmanager
    def transaction(self):
        """
        Context manager for a write transaction.

        Usage:
            with storage.transaction() as conn:
                conn.execute(...)
                # Commits on success, rolls back on exception

        Raises:
            StoreUnavailableError: If SQLite rejects any statement or the commit
        """
        if self.conn is None:
            raise StoreUnavailableError("Storage is not initialized")

        with self._lock:
            try:
                self.conn.execute('BEGIN IMMEDIATE')
                yield self.conn
                self.conn.execute('COMMIT')
            except sqlite3.Error as e:
                if self.conn.in_transaction:
                    self.conn.execute('ROLLBACK')
                raise StoreUnavailableError(f"Transaction failed: {e}") from e
            except Exception:
                if self.conn.in_transaction:
                    self.conn.execute('ROLLBACK')
                raise

    def unit_of_work(self) -> 'UnitOfWork':
        """Start collecting writes that must commit together."""
        return UnitOfWork(self)

    def _query(self, sql: str, params: Tuple = ()) -> List[sqlite3.Row]:
        if self.conn is None:
            raise StoreUnavailableError("Storage is not initialized")
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Query failed: {e}") from e

    # ========== Item Templates ==========

    def list_templates(self) -> Dict[str, ItemTemplate]:
        """
        Load the full template catalog.

        Returns:
            Mapping of template key to ItemTemplate

        Raises:
            CatalogUnavailableError: If the catalog cannot be read or decoded
        """
        try:
            rows = self._query("SELECT key, data FROM item_templates ORDER BY key")
            return {
                row['key']: ItemTemplate.from_dict(row['key'], json.loads(row['data']))
                for row in rows
            }
        except (StoreUnavailableError, ValueError, TypeError) as e:
            raise CatalogUnavailableError(f"Failed to load item templates: {e}") from e

    def import_templates(self, templates: Mapping[str, Mapping[str, Any]]) -> int:
        """
        Insert or replace catalog documents.

        Args:
            templates: Mapping of template key to catalog document

        Returns:
            Number of templates written
        """
        timestamp = now().isoformat()
        with self.transaction() as conn:
            for key, data in templates.items():
                document = ItemTemplate.from_dict(key, data).to_dict()
                conn.execute("""
                    INSERT OR REPLACE INTO item_templates (key, data, modified_at)
                    VALUES (?, ?, ?)
                """, (key, json.dumps(document), timestamp))
        return len(templates)

    # ========== Players ==========

    def get_player(self, player_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a player root document.

        Args:
            player_id: Player to look up

        Returns:
            Player document if found, None otherwise
        """
        rows = self._query("""
            SELECT id, profile, update_count, created_at, last_updated
            FROM players
            WHERE id = ?
        """, (player_id,))
        if not rows:
            return None
        row = rows[0]
        return {
            'id': row['id'],
            'profile': json.loads(row['profile']),
            'update_count': row['update_count'],
            'created_at': row['created_at'],
            'last_updated': row['last_updated'],
        }

    # ========== Inventory Sections ==========

    def get_section(self, player_id: str, section: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve one persisted inventory snapshot.

        Args:
            player_id: Owner of the snapshot
            section: 'stash', 'expedition' or 'equipment'

        Returns:
            {'items': [...], 'last_updated': ...} if found, None otherwise
        """
        rows = self._query("""
            SELECT items, last_updated
            FROM inventory_sections
            WHERE player_id = ? AND section = ?
        """, (player_id, section))
        if not rows:
            return None
        return {
            'items': json.loads(rows[0]['items']),
            'last_updated': rows[0]['last_updated'],
        }

    def get_inventory(self, player_id: str) -> Dict[str, List[Dict[str, Any]]]:
        """All three sections for a player; sections never written read as empty."""
        inventory = {}
        for section in SECTIONS:
            document = self.get_section(player_id, section)
            inventory[section] = document['items'] if document else []
        return inventory


class UnitOfWork:
    """
    Collects writes and commits them atomically.

    Nothing touches the database until commit(). If any statement fails,
    the whole transaction rolls back and StoreUnavailableError is raised.

    Usage:
        uow = storage.unit_of_work()
        uow.replace_section(player_id, 'stash', items)
        uow.touch_player(player_id)
        uow.commit()
    """

    def __init__(self, storage: InventoryStorage):
        self.storage = storage
        self._writes: List[Tuple[str, Tuple]] = []
        self.committed = False

    @property
    def pending(self) -> int:
        """Number of collected statements."""
        return len(self._writes)

    def replace_section(self, player_id: str, section: str,
                        items: List[Dict[str, Any]]) -> None:
        """Replace a whole inventory section snapshot."""
        if section not in SECTIONS:
            raise ValueError(f"Unknown inventory section: {section}")
        self._writes.append(("""
            INSERT OR REPLACE INTO inventory_sections (player_id, section, items, last_updated)
            VALUES (?, ?, ?, ?)
        """, (player_id, section, json.dumps(items), _TIMESTAMP)))

    def touch_player(self, player_id: str) -> None:
        """Increment the player's update counter and refresh last_updated."""
        self._writes.append(("""
            INSERT INTO players (id, update_count, created_at, last_updated)
            VALUES (?, 1, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                update_count = update_count + 1,
                last_updated = excluded.last_updated
        """, (player_id, _TIMESTAMP, _TIMESTAMP)))

    def commit(self) -> None:
        """
        Execute every collected write in a single transaction.

        Raises:
            StoreUnavailableError: If the transaction could not be committed
            RuntimeError: If this unit of work was already committed
        """
        if self.committed:
            raise RuntimeError("Unit of work already committed")

        # One timestamp for every document in the batch
        timestamp = now().isoformat()
        with self.storage.transaction() as conn:
            for sql, params in self._writes:
                conn.execute(sql, tuple(timestamp if p is _TIMESTAMP else p for p in params))
        self.committed = True


__all__ = ['InventoryStorage', 'UnitOfWork']

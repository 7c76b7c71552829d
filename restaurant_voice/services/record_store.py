"""SQLite-backed store for reservations and takeaway orders."""

import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path

from restaurant_voice.models import NewOrder, NewReservation, Order, Reservation

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS reservations (
    id TEXT PRIMARY KEY,
    name TEXT,
    phone TEXT,
    date TEXT,
    time TEXT,
    party_size INTEGER,
    notes TEXT,
    created_at TEXT
);
CREATE TABLE IF NOT EXISTS orders (
    id TEXT PRIMARY KEY,
    name TEXT,
    phone TEXT,
    items TEXT,
    pickup_time TEXT,
    total REAL,
    created_at TEXT
);
"""


class RecordStore:
    """Append-only persistence for reservations and orders.

    One connection is shared by all concurrent call turns. Access is
    serialized with a lock and every insert is committed before it returns,
    so a returned id is immediately visible to reads.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Open the database.

        Args:
            db_path: SQLite file path, or ":memory:"
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        logger.info(f"Record store opened at {self.db_path}")

    def initialize(self) -> None:
        """Create the tables if they do not exist yet."""
        with self._lock:
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        logger.info(f"Record store schema ready at {self.db_path}")

    def close(self) -> None:
        """Close the shared connection."""
        with self._lock:
            self._conn.close()

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _insert(self, sql: str, params: tuple) -> None:
        with self._lock:
            try:
                self._conn.execute(sql, params)
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                logger.exception("Failed to write record")
                raise

    def insert_reservation(self, fields: NewReservation) -> str:
        """Store a reservation.

        Args:
            fields: Reservation fields

        Returns:
            The generated reservation id

        Raises:
            sqlite3.Error: If the row could not be written
        """
        reservation_id = self._new_id()
        self._insert(
            """
            INSERT INTO reservations
                (id, name, phone, date, time, party_size, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                reservation_id,
                fields.name,
                fields.phone,
                fields.date,
                fields.time,
                fields.party_size,
                fields.notes,
                self._now(),
            ),
        )
        logger.info(f"Stored reservation {reservation_id}")
        return reservation_id

    def insert_order(self, fields: NewOrder) -> str:
        """Store a takeaway order.

        Args:
            fields: Order fields; ``items`` is stored as a JSON array

        Returns:
            The generated order id

        Raises:
            sqlite3.Error: If the row could not be written
            TypeError: If the items cannot be encoded as JSON
        """
        order_id = self._new_id()
        self._insert(
            """
            INSERT INTO orders
                (id, name, phone, items, pickup_time, total, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order_id,
                fields.name,
                fields.phone,
                json.dumps(fields.items, ensure_ascii=False),
                fields.pickup_time,
                fields.total,
                self._now(),
            ),
        )
        logger.info(f"Stored order {order_id}")
        return order_id

    def list_recent_reservations(self, limit: int = 200) -> list[Reservation]:
        """Return the most recent reservations, newest first.

        Args:
            limit: Maximum number of rows

        Returns:
            List of Reservation objects
        """
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT * FROM reservations
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()

        return [
            Reservation(
                id=row["id"],
                name=row["name"] or "",
                phone=row["phone"] or "",
                date=row["date"] or "",
                time=row["time"] or "",
                party_size=row["party_size"] or 1,
                notes=row["notes"] or "",
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def list_recent_orders(self, limit: int = 200) -> list[Order]:
        """Return the most recent takeaway orders, newest first.

        Args:
            limit: Maximum number of rows

        Returns:
            List of Order objects with decoded items
        """
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT * FROM orders
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()

        return [
            Order(
                id=row["id"],
                name=row["name"] or "",
                phone=row["phone"] or "",
                items=json.loads(row["items"]) if row["items"] else [],
                pickup_time=row["pickup_time"] or "",
                total=row["total"] or 0.0,
                created_at=row["created_at"],
            )
            for row in rows
        ]

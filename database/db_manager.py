import sqlite3
import os
from contextlib import contextmanager
from utils.constants import (
    DB_FILE, DEFAULT_CATEGORIES, DEFAULT_INCOME, DEFAULT_RECURRING_RULES,
    MONTHLY_INCOME_KEY,
)
from utils.logging_setup import get_logger

log = get_logger("db")


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self, seed_samples: bool = True):
        """Create schema and seed defaults.

        Sample categories and recurring rules are only inserted into an empty
        database, so deleting them sticks.
        """
        conn = self.get_connection()
        self._create_schema(conn)
        self._seed_defaults(conn, seed_samples)
        conn.commit()

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE COLLATE NOCASE,
                type       TEXT NOT NULL CHECK(type IN ('budget','fixed')),
                allocated  REAL NOT NULL DEFAULT 0 CHECK(allocated >= 0),
                spent      REAL NOT NULL DEFAULT 0 CHECK(spent >= 0),
                position   INTEGER NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS recurring_rules (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                name          TEXT NOT NULL,
                type          TEXT NOT NULL CHECK(type IN ('income','expense')),
                amount        REAL NOT NULL CHECK(amount >= 0),
                category_id   INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                frequency     TEXT NOT NULL,
                day_of_month  INTEGER,
                day_of_week   INTEGER,
                last_applied  TEXT
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id                INTEGER PRIMARY KEY AUTOINCREMENT,
                type              TEXT NOT NULL CHECK(type IN ('income','expense')),
                amount            REAL NOT NULL CHECK(amount >= 0),
                category_id       INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                description       TEXT NOT NULL DEFAULT '',
                date              TEXT NOT NULL,
                recurring_rule_id INTEGER REFERENCES recurring_rules(id) ON DELETE SET NULL,
                created_at        TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_date         ON transactions(date);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id  ON transactions(category_id);

            CREATE TABLE IF NOT EXISTS history_snapshots (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                period_key   TEXT NOT NULL,
                created_at   TEXT NOT NULL DEFAULT (datetime('now')),
                income       REAL NOT NULL,
                allocated    REAL NOT NULL,
                spent        REAL NOT NULL,
                total_saved  REAL NOT NULL,
                categories   TEXT NOT NULL DEFAULT '[]'
            );

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection, seed_samples: bool):
        # Default settings
        defaults = [
            ("appearance_mode", "system"),
            ("date_format", "MM/DD/YYYY"),
            (MONTHLY_INCOME_KEY, f"{DEFAULT_INCOME if seed_samples else 0.0}"),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

        if not seed_samples:
            return
        if conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]:
            return

        log.info("Seeding sample categories and recurring rules")
        ids = {}
        for pos, cat in enumerate(DEFAULT_CATEGORIES):
            cursor = conn.execute(
                """INSERT INTO categories(name, type, allocated, spent, position)
                   VALUES (?, ?, ?, ?, ?)""",
                (cat["name"], cat["type"], cat["allocated"], cat["spent"], pos),
            )
            ids[cat["name"]] = cursor.lastrowid

        for rule in DEFAULT_RECURRING_RULES:
            conn.execute(
                """INSERT INTO recurring_rules
                   (name, type, amount, category_id, frequency, day_of_month, day_of_week)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    rule["name"], rule["type"], rule["amount"],
                    ids.get(rule["category"]), rule["frequency"],
                    rule.get("day_of_month"), rule.get("day_of_week"),
                ),
            )

    @contextmanager
    def transaction(self):
        """Commit the enclosed writes together, or roll them all back on error.

        DAO calls inside the block must pass commit=False.
        """
        conn = self.get_connection()
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str, commit: bool = True):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        if commit:
            conn.commit()

    def compare_and_set_setting(self, key: str, expected: str | None, value: str) -> bool:
        """Write value only if the stored value still equals expected (None = absent).

        Returns True when this call performed the write.
        """
        conn = self.get_connection()
        if expected is None:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )
        else:
            cursor = conn.execute(
                "UPDATE app_settings SET value = ? WHERE key = ? AND value = ?",
                (value, key, expected),
            )
        conn.commit()
        return cursor.rowcount == 1

    @staticmethod
    def open_in_folder(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (and initializes) the DB in db_folder or the CWD."""
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        log.info("Opening database %s", path)
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

from typing import Protocol, runtime_checkable
from database.db_manager import DatabaseManager


@runtime_checkable
class KeyValueStore(Protocol):
    """String key/value persistence used by the daily automation guard."""

    def get(self, key: str, default: str | None = None) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SettingsStore:
    """KeyValueStore backed by the app_settings table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def get(self, key: str, default: str | None = None) -> str | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set(self, key: str, value: str) -> None:
        self._db.set_setting(key, value)

    def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        return self._db.compare_and_set_setting(key, expected, value)

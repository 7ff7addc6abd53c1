import json
from typing import Optional
from database.db_manager import DatabaseManager
from models.snapshot import HistorySnapshot


class SnapshotDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> HistorySnapshot:
        return HistorySnapshot(
            id=row["id"],
            period_key=row["period_key"],
            created_at=row["created_at"],
            income=row["income"],
            allocated=row["allocated"],
            spent=row["spent"],
            total_saved=row["total_saved"],
            categories=json.loads(row["categories"] or "[]"),
        )

    def get_all(self) -> list[HistorySnapshot]:
        """Newest first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM history_snapshots ORDER BY id DESC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, snapshot_id: int) -> Optional[HistorySnapshot]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM history_snapshots WHERE id = ?", (snapshot_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        period_key: str,
        income: float,
        allocated: float,
        spent: float,
        total_saved: float,
        categories: list[dict],
    ) -> HistorySnapshot:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO history_snapshots
               (period_key, income, allocated, spent, total_saved, categories)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (period_key, income, allocated, spent, total_saved, json.dumps(categories)),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def delete(self, snapshot_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM history_snapshots WHERE id = ?", (snapshot_id,))
        conn.commit()

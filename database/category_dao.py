from typing import Optional
from database.db_manager import DatabaseManager
from models.category import BudgetCategory


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> BudgetCategory:
        return BudgetCategory(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            allocated=row["allocated"],
            spent=row["spent"],
            position=row["position"],
        )

    def get_all(self) -> list[BudgetCategory]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM categories ORDER BY position, id"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, category_id: int) -> Optional[BudgetCategory]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[BudgetCategory]:
        """Case-insensitive lookup."""
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE name = ? COLLATE NOCASE", (name,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self, name: str, type_: str, allocated: float = 0.0, spent: float = 0.0,
        commit: bool = True,
    ) -> BudgetCategory:
        conn = self._db.get_connection()
        next_pos = conn.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 FROM categories"
        ).fetchone()[0]
        cursor = conn.execute(
            """INSERT INTO categories(name, type, allocated, spent, position)
               VALUES (?, ?, ?, ?, ?)""",
            (name, type_, allocated, spent, next_pos),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update_amounts(
        self, category_id: int, allocated: float, spent: float, commit: bool = True,
    ) -> Optional[BudgetCategory]:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE categories SET allocated = ?, spent = ? WHERE id = ?",
            (allocated, spent, category_id),
        )
        if commit:
            conn.commit()
        return self.get_by_id(category_id)

    def set_positions(self, ordered_ids: list[int], commit: bool = True):
        conn = self._db.get_connection()
        conn.executemany(
            "UPDATE categories SET position = ? WHERE id = ?",
            [(pos, cid) for pos, cid in enumerate(ordered_ids)],
        )
        if commit:
            conn.commit()

    def reset(
        self, category_id: int, type_: str, allocated: float, spent: float,
        commit: bool = True,
    ) -> Optional[BudgetCategory]:
        """Overwrite type and amounts, keeping the row id that rules link to."""
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE categories SET type = ?, allocated = ?, spent = ? WHERE id = ?",
            (type_, allocated, spent, category_id),
        )
        if commit:
            conn.commit()
        return self.get_by_id(category_id)

    def delete_except(self, keep_ids: list[int], commit: bool = True):
        conn = self._db.get_connection()
        placeholders = ", ".join("?" for _ in keep_ids)
        conn.execute(
            f"DELETE FROM categories WHERE id NOT IN ({placeholders})", keep_ids
        )
        if commit:
            conn.commit()

    def delete(self, category_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()


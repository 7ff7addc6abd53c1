from typing import Optional
from database.db_manager import DatabaseManager
from models.transaction import Transaction


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            type=row["type"],
            amount=row["amount"],
            category_id=row["category_id"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            description=row["description"],
            date=row["date"],
            recurring_rule_id=row["recurring_rule_id"],
            created_at=row["created_at"],
        )

    def _select(self) -> str:
        return """
            SELECT t.*,
                   COALESCE(c.name, '') AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
        """

    def get_all(self) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY t.date ASC, t.id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_between(self, start_date: str, end_date: str) -> list[Transaction]:
        """Transactions with start_date <= date < end_date."""
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " WHERE t.date >= ? AND t.date < ? ORDER BY t.date ASC, t.id ASC",
            (start_date, end_date),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE t.id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        type_: str,
        amount: float,
        date: str,
        description: str = "",
        category_id: int | None = None,
        recurring_rule_id: int | None = None,
        commit: bool = True,
    ) -> Transaction:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO transactions
               (type, amount, category_id, description, date, recurring_rule_id)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (type_, amount, category_id, description, date, recurring_rule_id),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

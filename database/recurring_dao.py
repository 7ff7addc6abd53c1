from typing import Optional
from database.db_manager import DatabaseManager
from models.recurring_rule import RecurringRule, schedule_from_fields


class RecurringDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringRule:
        return RecurringRule(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            amount=row["amount"],
            category_id=row["category_id"],
            schedule=schedule_from_fields(
                row["frequency"], row["day_of_month"], row["day_of_week"]
            ),
            last_applied=row["last_applied"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            raw_frequency=row["frequency"],
        )

    def _select(self) -> str:
        return """
            SELECT r.*,
                   COALESCE(c.name, '') AS category_name
            FROM recurring_rules r
            LEFT JOIN categories c ON r.category_id = c.id
        """

    def get_all(self) -> list[RecurringRule]:
        """All rules in creation order, the order the automation applies them in."""
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY r.id"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, rule_id: int) -> Optional[RecurringRule]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE r.id = ?", (rule_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        type_: str,
        amount: float,
        category_id: int | None,
        frequency: str,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
    ) -> RecurringRule:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO recurring_rules
               (name, type, amount, category_id, frequency, day_of_month, day_of_week)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (name, type_, amount, category_id, frequency, day_of_month, day_of_week),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        rule_id: int,
        name: str,
        type_: str,
        amount: float,
        category_id: int | None,
        frequency: str,
        day_of_month: int | None = None,
        day_of_week: int | None = None,
    ) -> Optional[RecurringRule]:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE recurring_rules SET
               name=?, type=?, amount=?, category_id=?, frequency=?,
               day_of_month=?, day_of_week=?
               WHERE id=?""",
            (name, type_, amount, category_id, frequency, day_of_month, day_of_week, rule_id),
        )
        conn.commit()
        return self.get_by_id(rule_id)

    def update_last_applied(self, rule_id: int, date_str: str, commit: bool = True):
        """Advance last_applied; an earlier date never overwrites a later one."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE recurring_rules SET last_applied = ?
               WHERE id = ? AND (last_applied IS NULL OR last_applied < ?)""",
            (date_str, rule_id, date_str),
        )
        if commit:
            conn.commit()

    def delete(self, rule_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM recurring_rules WHERE id = ?", (rule_id,))
        conn.commit()

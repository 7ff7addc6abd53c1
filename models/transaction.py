from dataclasses import dataclass
from typing import Optional


@dataclass
class Transaction:
    id: int
    type: str               # 'income' | 'expense'
    amount: float
    category_id: Optional[int]
    category_name: str
    description: str
    date: str               # 'YYYY-MM-DD'
    recurring_rule_id: Optional[int] = None
    created_at: str = ""

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == "income" else -self.amount

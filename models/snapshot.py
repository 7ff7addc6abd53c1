from dataclasses import dataclass, field


@dataclass
class HistorySnapshot:
    id: int
    period_key: str         # pay period start, 'YYYY-MM-DD'
    created_at: str
    income: float
    allocated: float
    spent: float
    total_saved: float
    categories: list[dict] = field(default_factory=list)

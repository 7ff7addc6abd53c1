from dataclasses import dataclass


@dataclass
class BudgetCategory:
    id: int
    name: str
    type: str           # 'budget' | 'fixed'
    allocated: float = 0.0
    spent: float = 0.0
    position: int = 0

    @property
    def remaining(self) -> float:
        return self.allocated - self.spent

    @property
    def percentage(self) -> float:
        if self.allocated <= 0:
            return 0.0
        return self.spent / self.allocated

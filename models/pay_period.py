from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class PayPeriod:
    start: date
    key: str            # 'YYYY-MM-DD' of start
    end: date | None = None   # next adjusted payday (exclusive)

"""Recurring planned income/expense definitions with optional auto-pay."""

import calendar
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from household_budget.domain.value_objects import Frequency, TransactionType

DEFAULT_PAY_DAY = 1


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class RecurringItem:
    household_id: UUID
    type: TransactionType
    name: str
    amount: Decimal
    category: str
    id: UUID = field(default_factory=uuid4)
    # Informational only; auto-pay runs on a monthly cadence for every item.
    frequency: Frequency = Frequency.MONTHLY
    active: bool = True
    auto_pay: bool = False
    pay_day: int | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if not self.auto_pay:
            self.pay_day = None

    def deactivate(self) -> None:
        self.active = False

    def effective_pay_day(self, year: int, month: int) -> int:
        """Configured pay day, clamped to the last day of the given month."""
        last_day = calendar.monthrange(year, month)[1]
        return min(self.pay_day or DEFAULT_PAY_DAY, last_day)

    def due_date(self, year: int, month: int) -> date:
        return date(year, month, self.effective_pay_day(year, month))

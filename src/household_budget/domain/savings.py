from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SavingGoal:
    household_id: UUID
    name: str
    current_amount: Decimal = Decimal("0")
    id: UUID = field(default_factory=uuid4)
    initial_amount: Decimal | None = None
    target_amount: Decimal | None = None
    color: str | None = None
    deleted_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.current_amount, Decimal):
            self.current_amount = Decimal(str(self.current_amount))
        if self.initial_amount is None:
            self.initial_amount = self.current_amount
        elif not isinstance(self.initial_amount, Decimal):
            self.initial_amount = Decimal(str(self.initial_amount))
        if self.target_amount is not None and not isinstance(
            self.target_amount, Decimal
        ):
            self.target_amount = Decimal(str(self.target_amount))

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def progress_percent(self) -> Decimal | None:
        if not self.target_amount:
            return None
        return (self.current_amount / self.target_amount * 100).quantize(
            Decimal("0.01")
        )

    def apply_delta(self, delta: Decimal) -> None:
        self.current_amount += delta

    def soft_delete(self) -> None:
        self.deleted_at = _utc_now()


@dataclass
class SavingLog:
    """One balance movement: positive for deposits, negative for withdrawals."""

    saving_goal_id: UUID
    amount: Decimal
    id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=_utc_now)
    description: str | None = None

from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from household_budget.domain.value_objects import TransactionType


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InvalidTransactionError(Exception):
    pass


@dataclass
class Transaction:
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: date
    created_by: UUID
    id: UUID = field(default_factory=uuid4)
    is_recurring_instance: bool = False
    recurring_item_id: UUID | None = None
    deleted_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if self.recurring_item_id is not None and not self.is_recurring_instance:
            raise InvalidTransactionError(
                "A transaction linked to a recurring item must be a recurring instance"
            )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def signed_amount(self) -> Decimal:
        if self.type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount

    def soft_delete(self) -> None:
        self.deleted_at = _utc_now()

    def to_snapshot(self) -> dict[str, Any]:
        """Full JSON-compatible record, used as the deletion audit snapshot."""
        data = asdict(self)
        data["id"] = str(self.id)
        data["type"] = self.type.value
        data["amount"] = str(self.amount)
        data["date"] = self.date.isoformat()
        data["created_by"] = str(self.created_by)
        data["recurring_item_id"] = (
            str(self.recurring_item_id) if self.recurring_item_id else None
        )
        data["deleted_at"] = self.deleted_at.isoformat() if self.deleted_at else None
        data["created_at"] = self.created_at.isoformat()
        return data

"""User domain model for the identity store."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from household_budget.domain.value_objects import MembershipStatus


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class User:
    email: str
    display_name: str
    id: UUID = field(default_factory=uuid4)
    password: str | None = None
    household_id: UUID | None = None
    membership_status: MembershipStatus | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def join(self, household_id: UUID, status: MembershipStatus) -> None:
        self.household_id = household_id
        self.membership_status = status

    def leave(self) -> None:
        self.household_id = None
        self.membership_status = None

    @property
    def has_household(self) -> bool:
        return self.household_id is not None


def default_display_name(email: str) -> str:
    return email.split("@")[0]

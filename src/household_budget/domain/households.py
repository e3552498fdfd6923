"""Household domain model: shared budget container with member snapshots."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from household_budget.domain.value_objects import (
    Currency,
    MembershipStatus,
    counts_as_approved,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class MemberSnapshot:
    """Read-only view of a member as shown inside a household.

    Display fields come from the identity store at read time; the status is
    the one recorded on the membership.
    """

    user_id: UUID
    email: str
    display_name: str
    membership_status: MembershipStatus | None
    joined_at: datetime

    @property
    def is_approved(self) -> bool:
        return counts_as_approved(self.membership_status)


@dataclass
class Household:
    name: str
    invite_code: str
    id: UUID = field(default_factory=uuid4)
    owner_id: UUID | None = None
    currency: Currency = Currency.HUF
    members: list[MemberSnapshot] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utc_now)

    @property
    def is_ownerless(self) -> bool:
        return self.owner_id is None

    @property
    def member_ids(self) -> list[UUID]:
        return [m.user_id for m in self.members]

    def get_member(self, user_id: UUID) -> MemberSnapshot | None:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def is_member(self, user_id: UUID) -> bool:
        return self.get_member(user_id) is not None

    def next_owner_candidate(self, leaving_user_id: UUID) -> UUID | None:
        """First remaining approved (or legacy) member in join order."""
        for member in self.members:
            if member.user_id != leaving_user_id and member.is_approved:
                return member.user_id
        return None

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from household_budget.domain.value_objects import InvitationStatus


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InvitationStateError(Exception):
    pass


@dataclass
class Invitation:
    household_id: UUID
    email: str
    code: str
    id: UUID = field(default_factory=uuid4)
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=_utc_now)

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING

    def accept(self) -> None:
        if not self.is_pending:
            raise InvitationStateError(
                f"Cannot accept invitation in state {self.status.value}"
            )
        self.status = InvitationStatus.ACCEPTED

    def revoke(self) -> None:
        if not self.is_pending:
            raise InvitationStateError(
                f"Cannot revoke invitation in state {self.status.value}"
            )
        self.status = InvitationStatus.REVOKED

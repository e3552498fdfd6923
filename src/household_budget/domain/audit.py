"""Audit trail domain models.

Each action type carries its own payload class. The payload is serialized to
JSON when the entry is written and parsed back into the same class on read,
so an entry always reflects the data as it was at the time of the action.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AuditActionType(str, Enum):
    CREATE_HOUSEHOLD = "CREATE_HOUSEHOLD"
    JOIN_HOUSEHOLD = "JOIN_HOUSEHOLD"
    APPROVE_MEMBER = "APPROVE_MEMBER"
    REMOVE_MEMBER = "REMOVE_MEMBER"
    UPDATE_USER_PROFILE = "UPDATE_USER_PROFILE"
    CREATE_INVITATION = "CREATE_INVITATION"
    REVOKE_INVITATION = "REVOKE_INVITATION"
    CREATE_TRANSACTION = "CREATE_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    CREATE_RECURRING = "CREATE_RECURRING"
    UPDATE_RECURRING = "UPDATE_RECURRING"
    DELETE_RECURRING = "DELETE_RECURRING"
    CREATE_SAVING = "CREATE_SAVING"
    UPDATE_SAVING_BALANCE = "UPDATE_SAVING_BALANCE"
    DELETE_SAVING = "DELETE_SAVING"


@dataclass(frozen=True)
class AuditPayload:
    action_type: ClassVar[AuditActionType]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditPayload:
        return cls(**data)


@dataclass(frozen=True)
class CreateHouseholdPayload(AuditPayload):
    action_type = AuditActionType.CREATE_HOUSEHOLD
    name: str


@dataclass(frozen=True)
class JoinHouseholdPayload(AuditPayload):
    action_type = AuditActionType.JOIN_HOUSEHOLD
    code: str
    household_id: str
    via_invitation: bool = False


@dataclass(frozen=True)
class ApproveMemberPayload(AuditPayload):
    action_type = AuditActionType.APPROVE_MEMBER
    member_id: str
    member_name: str


@dataclass(frozen=True)
class RemoveMemberPayload(AuditPayload):
    action_type = AuditActionType.REMOVE_MEMBER
    member_id: str
    member_name: str
    new_owner_id: str | None = None


@dataclass(frozen=True)
class UpdateUserProfilePayload(AuditPayload):
    action_type = AuditActionType.UPDATE_USER_PROFILE
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateInvitationPayload(AuditPayload):
    action_type = AuditActionType.CREATE_INVITATION
    invitation_id: str
    email: str


@dataclass(frozen=True)
class RevokeInvitationPayload(AuditPayload):
    action_type = AuditActionType.REVOKE_INVITATION
    invitation_id: str
    email: str


@dataclass(frozen=True)
class CreateTransactionPayload(AuditPayload):
    action_type = AuditActionType.CREATE_TRANSACTION
    amount: str
    desc: str
    type: str
    is_recurring_instance: bool = False
    recurring_item_id: str | None = None


@dataclass(frozen=True)
class DeleteTransactionPayload(AuditPayload):
    """Carries the complete transaction record as it was before deletion."""

    action_type = AuditActionType.DELETE_TRANSACTION
    transaction: dict[str, Any]


@dataclass(frozen=True)
class RecurringItemPayload(AuditPayload):
    action_type = AuditActionType.CREATE_RECURRING
    name: str
    amount: str


@dataclass(frozen=True)
class UpdateRecurringPayload(RecurringItemPayload):
    action_type = AuditActionType.UPDATE_RECURRING


@dataclass(frozen=True)
class DeleteRecurringPayload(AuditPayload):
    action_type = AuditActionType.DELETE_RECURRING
    name: str


@dataclass(frozen=True)
class CreateSavingPayload(AuditPayload):
    action_type = AuditActionType.CREATE_SAVING
    name: str
    target: str | None = None


@dataclass(frozen=True)
class UpdateSavingBalancePayload(AuditPayload):
    action_type = AuditActionType.UPDATE_SAVING_BALANCE
    name: str
    diff: str


@dataclass(frozen=True)
class DeleteSavingPayload(AuditPayload):
    action_type = AuditActionType.DELETE_SAVING
    name: str


PAYLOAD_TYPES: dict[AuditActionType, type[AuditPayload]] = {
    payload_cls.action_type: payload_cls
    for payload_cls in (
        CreateHouseholdPayload,
        JoinHouseholdPayload,
        ApproveMemberPayload,
        RemoveMemberPayload,
        UpdateUserProfilePayload,
        CreateInvitationPayload,
        RevokeInvitationPayload,
        CreateTransactionPayload,
        DeleteTransactionPayload,
        RecurringItemPayload,
        UpdateRecurringPayload,
        DeleteRecurringPayload,
        CreateSavingPayload,
        UpdateSavingBalancePayload,
        DeleteSavingPayload,
    )
}


def payload_from_dict(
    action_type: AuditActionType, data: dict[str, Any]
) -> AuditPayload:
    return PAYLOAD_TYPES[action_type].from_dict(data)


@dataclass
class AuditEntry:
    action_type: AuditActionType
    payload: AuditPayload
    household_id: UUID
    id: UUID = field(default_factory=uuid4)
    performed_by: UUID | None = None
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.payload.action_type != self.action_type:
            raise ValueError(
                f"Payload {type(self.payload).__name__} does not belong to "
                f"action {self.action_type.value}"
            )

    @property
    def snapshot(self) -> dict[str, Any]:
        return self.payload.to_dict()


@dataclass
class AuditLogSummary:
    total_entries: int
    entries_by_action: dict[AuditActionType, int]
    oldest_entry: datetime | None
    newest_entry: datetime | None

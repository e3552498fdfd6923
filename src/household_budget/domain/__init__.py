from household_budget.domain.audit import AuditActionType, AuditEntry, AuditPayload
from household_budget.domain.households import Household, MemberSnapshot
from household_budget.domain.invitations import Invitation
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import (
    CATEGORIES,
    Currency,
    Frequency,
    InvitationStatus,
    MembershipStatus,
    TransactionType,
)

__all__ = [
    "AuditActionType",
    "AuditEntry",
    "AuditPayload",
    "CATEGORIES",
    "Currency",
    "Frequency",
    "Household",
    "Invitation",
    "InvitationStatus",
    "MemberSnapshot",
    "MembershipStatus",
    "RecurringItem",
    "SavingGoal",
    "SavingLog",
    "Transaction",
    "TransactionType",
    "User",
]

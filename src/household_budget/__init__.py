from household_budget.domain.households import Household, MemberSnapshot
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import (
    Currency,
    Frequency,
    MembershipStatus,
    TransactionType,
)

__all__ = [
    "Currency",
    "Frequency",
    "Household",
    "MemberSnapshot",
    "MembershipStatus",
    "RecurringItem",
    "SavingGoal",
    "SavingLog",
    "Transaction",
    "TransactionType",
    "User",
]

__version__ = "0.1.0"

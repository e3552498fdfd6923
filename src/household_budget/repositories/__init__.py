from household_budget.repositories.interfaces import (
    AuditLogRepository,
    HouseholdRepository,
    InvitationRepository,
    RecurringItemRepository,
    SavingGoalRepository,
    SessionRepository,
    TransactionRepository,
    UserRepository,
)
from household_budget.repositories.sqlite import (
    SQLiteAuditLogRepository,
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteInvitationRepository,
    SQLiteRecurringItemRepository,
    SQLiteSavingGoalRepository,
    SQLiteSessionRepository,
    SQLiteTransactionRepository,
    SQLiteUserRepository,
)

__all__ = [
    "AuditLogRepository",
    "HouseholdRepository",
    "InvitationRepository",
    "RecurringItemRepository",
    "SavingGoalRepository",
    "SessionRepository",
    "TransactionRepository",
    "UserRepository",
    "SQLiteAuditLogRepository",
    "SQLiteDatabase",
    "SQLiteHouseholdRepository",
    "SQLiteInvitationRepository",
    "SQLiteRecurringItemRepository",
    "SQLiteSavingGoalRepository",
    "SQLiteSessionRepository",
    "SQLiteTransactionRepository",
    "SQLiteUserRepository",
]

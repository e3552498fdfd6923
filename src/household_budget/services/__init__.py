from household_budget.services.audit import AuditService
from household_budget.services.autopay import AutoPaymentScheduler, month_window
from household_budget.services.households import HouseholdService
from household_budget.services.identity import IdentityService
from household_budget.services.invitations import InvitationService
from household_budget.services.recurring import RecurringItemService
from household_budget.services.savings import SavingsService
from household_budget.services.transactions import TransactionLedgerService

__all__ = [
    "AuditService",
    "AutoPaymentScheduler",
    "HouseholdService",
    "IdentityService",
    "InvitationService",
    "RecurringItemService",
    "SavingsService",
    "TransactionLedgerService",
    "month_window",
]

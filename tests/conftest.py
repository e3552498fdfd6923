from datetime import date
from decimal import Decimal

import pytest

from household_budget.domain.households import Household
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.users import User
from household_budget.domain.value_objects import TransactionType
from household_budget.repositories.sqlite import SQLiteDatabase
from household_budget.services.audit import AuditService
from household_budget.services.autopay import AutoPaymentScheduler
from household_budget.services.households import HouseholdService
from household_budget.services.identity import IdentityService
from household_budget.services.invitations import InvitationService
from household_budget.services.recurring import RecurringItemService
from household_budget.services.savings import SavingsService
from household_budget.services.transactions import TransactionLedgerService

FIXED_TODAY = date(2025, 6, 15)


@pytest.fixture
def db() -> SQLiteDatabase:
    database = SQLiteDatabase(":memory:")
    database.initialize()
    return database


@pytest.fixture
def audit_service(db: SQLiteDatabase) -> AuditService:
    return AuditService(db)


@pytest.fixture
def identity_service(db: SQLiteDatabase, audit_service: AuditService) -> IdentityService:
    return IdentityService(db, audit_service)


@pytest.fixture
def household_service(
    db: SQLiteDatabase, audit_service: AuditService
) -> HouseholdService:
    return HouseholdService(db, audit_service)


@pytest.fixture
def invitation_service(
    db: SQLiteDatabase, audit_service: AuditService
) -> InvitationService:
    return InvitationService(db, audit_service)


@pytest.fixture
def ledger_service(
    db: SQLiteDatabase, audit_service: AuditService
) -> TransactionLedgerService:
    return TransactionLedgerService(db, audit_service)


@pytest.fixture
def recurring_service(
    db: SQLiteDatabase, audit_service: AuditService
) -> RecurringItemService:
    return RecurringItemService(db, audit_service)


@pytest.fixture
def savings_service(db: SQLiteDatabase, audit_service: AuditService) -> SavingsService:
    return SavingsService(db, audit_service)


@pytest.fixture
def scheduler(
    db: SQLiteDatabase,
    recurring_service: RecurringItemService,
    ledger_service: TransactionLedgerService,
) -> AutoPaymentScheduler:
    return AutoPaymentScheduler(
        db, recurring_service, ledger_service, clock=lambda: FIXED_TODAY
    )


@pytest.fixture
def owner(identity_service: IdentityService) -> User:
    return identity_service.register("joci@demo.hu", "123", "Joci")


@pytest.fixture
def household(household_service: HouseholdService, owner: User) -> Household:
    return household_service.create_household("Otthon", owner.id)


@pytest.fixture
def auto_pay_item(household: Household) -> RecurringItem:
    return RecurringItem(
        household_id=household.id,
        type=TransactionType.EXPENSE,
        name="Internet",
        amount=Decimal("8500"),
        category="Szórakozás",
        auto_pay=True,
        pay_day=10,
    )

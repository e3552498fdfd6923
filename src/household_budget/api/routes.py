"""API routes for the household budget ledger."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from household_budget import __version__
from household_budget.api.schemas import (
    ActorRequest,
    AuditEntryResponse,
    AuditSummaryResponse,
    AutoPayRequest,
    BalanceChange,
    BalanceDelta,
    HealthResponse,
    HouseholdCreate,
    HouseholdResponse,
    InvitationCreate,
    InvitationResponse,
    JoinRequest,
    LoginRequest,
    MemberResponse,
    RecurringItemCreate,
    RecurringItemResponse,
    RecurringItemUpdate,
    RegisterRequest,
    RevokeResponse,
    SavingGoalCreate,
    SavingGoalResponse,
    SavingLogResponse,
    TransactionCreate,
    TransactionResponse,
    UserResponse,
    UserUpdate,
)
from household_budget.config import get_settings
from household_budget.domain.audit import AuditEntry
from household_budget.domain.households import Household
from household_budget.domain.invitations import Invitation
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import (
    CATEGORIES,
    Currency,
    Frequency,
    TransactionType,
)
from household_budget.exceptions import HouseholdNotFoundError, InvalidCodeError
from household_budget.repositories.sqlite import SQLiteDatabase
from household_budget.services.audit import AuditService
from household_budget.services.autopay import AutoPaymentScheduler
from household_budget.services.households import HouseholdService
from household_budget.services.identity import IdentityService
from household_budget.services.invitations import InvitationService
from household_budget.services.recurring import RecurringItemService
from household_budget.services.savings import SavingsService
from household_budget.services.transactions import (
    TransactionLedgerService,
    parse_positive_amount,
)

# Create routers
health_router = APIRouter(tags=["health"])
auth_router = APIRouter(prefix="/auth", tags=["auth"])
user_router = APIRouter(prefix="/users", tags=["users"])
household_router = APIRouter(prefix="/households", tags=["households"])
invitation_router = APIRouter(prefix="/invitations", tags=["invitations"])
transaction_router = APIRouter(prefix="/transactions", tags=["transactions"])
recurring_router = APIRouter(prefix="/recurring", tags=["recurring"])
savings_router = APIRouter(prefix="/savings", tags=["savings"])


# Dependency injection functions
def get_identity_service(db: SQLiteDatabase) -> IdentityService:
    return IdentityService(db, AuditService(db))


def get_household_service(db: SQLiteDatabase) -> HouseholdService:
    return HouseholdService(
        db, AuditService(db), default_currency=get_settings().default_currency
    )


def get_invitation_service(db: SQLiteDatabase) -> InvitationService:
    return InvitationService(db, AuditService(db))


def get_ledger_service(db: SQLiteDatabase) -> TransactionLedgerService:
    return TransactionLedgerService(db, AuditService(db))


def get_recurring_service(db: SQLiteDatabase) -> RecurringItemService:
    return RecurringItemService(db, AuditService(db))


def get_autopay_scheduler(db: SQLiteDatabase) -> AutoPaymentScheduler:
    audit = AuditService(db)
    return AutoPaymentScheduler(
        db,
        RecurringItemService(db, audit),
        TransactionLedgerService(db, audit),
        enabled=get_settings().enable_auto_payments,
    )


def get_savings_service(db: SQLiteDatabase) -> SavingsService:
    return SavingsService(db, AuditService(db))


# Helper functions
def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        household_id=user.household_id,
        membership_status=user.membership_status.value
        if user.membership_status
        else None,
        created_at=user.created_at,
    )


def _household_to_response(household: Household) -> HouseholdResponse:
    return HouseholdResponse(
        id=household.id,
        name=household.name,
        invite_code=household.invite_code,
        owner_id=household.owner_id,
        currency=household.currency.value,
        members=[
            MemberResponse(
                user_id=member.user_id,
                email=member.email,
                display_name=member.display_name,
                membership_status=member.membership_status.value
                if member.membership_status
                else None,
                joined_at=member.joined_at,
            )
            for member in household.members
        ],
        created_at=household.created_at,
    )


def _invitation_to_response(invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        household_id=invitation.household_id,
        email=invitation.email,
        code=invitation.code,
        status=invitation.status.value,
        created_at=invitation.created_at,
    )


def _transaction_to_response(txn: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        type=txn.type.value,
        amount=str(txn.amount),
        description=txn.description,
        category=txn.category,
        date=txn.date,
        created_by=txn.created_by,
        is_recurring_instance=txn.is_recurring_instance,
        recurring_item_id=txn.recurring_item_id,
        deleted_at=txn.deleted_at,
        created_at=txn.created_at,
    )


def _recurring_to_response(item: RecurringItem) -> RecurringItemResponse:
    return RecurringItemResponse(
        id=item.id,
        household_id=item.household_id,
        type=item.type.value,
        name=item.name,
        amount=str(item.amount),
        category=item.category,
        frequency=item.frequency.value,
        active=item.active,
        auto_pay=item.auto_pay,
        pay_day=item.pay_day,
        created_at=item.created_at,
    )


def _goal_to_response(goal: SavingGoal) -> SavingGoalResponse:
    progress = goal.progress_percent
    return SavingGoalResponse(
        id=goal.id,
        household_id=goal.household_id,
        name=goal.name,
        current_amount=str(goal.current_amount),
        initial_amount=str(goal.initial_amount),
        target_amount=str(goal.target_amount)
        if goal.target_amount is not None
        else None,
        progress_percent=str(progress) if progress is not None else None,
        color=goal.color,
        created_at=goal.created_at,
    )


def _log_to_response(log: SavingLog) -> SavingLogResponse:
    return SavingLogResponse(
        id=log.id,
        saving_goal_id=log.saving_goal_id,
        amount=str(log.amount),
        timestamp=log.timestamp,
        description=log.description,
    )


def _entry_to_response(entry: AuditEntry) -> AuditEntryResponse:
    return AuditEntryResponse(
        id=entry.id,
        action_type=entry.action_type.value,
        payload=entry.snapshot,
        performed_by=entry.performed_by,
        household_id=entry.household_id,
        timestamp=entry.timestamp,
    )


# Health endpoint
@health_router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# Auth endpoints
@auth_router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register(
    payload: RegisterRequest,
    db: Annotated[SQLiteDatabase, Depends()],
) -> UserResponse:
    """Register a user and make them the current session user."""
    user = get_identity_service(db).register(
        payload.email, payload.password, payload.display_name
    )
    return _user_to_response(user)


@auth_router.post("/login", response_model=UserResponse)
def login(
    payload: LoginRequest,
    db: Annotated[SQLiteDatabase, Depends()],
) -> UserResponse:
    user = get_identity_service(db).login(payload.email, payload.password)
    return _user_to_response(user)


@auth_router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(db: Annotated[SQLiteDatabase, Depends()]) -> Response:
    get_identity_service(db).logout()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@auth_router.get("/me", response_model=UserResponse | None)
def current_user(db: Annotated[SQLiteDatabase, Depends()]) -> UserResponse | None:
    """The session user, or null when nobody is logged in."""
    user = get_identity_service(db).get_current_user()
    return _user_to_response(user) if user else None


# User endpoints
@user_router.get("", response_model=list[UserResponse])
def list_users(db: Annotated[SQLiteDatabase, Depends()]) -> list[UserResponse]:
    return [_user_to_response(u) for u in get_identity_service(db).list_users()]


@user_router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> UserResponse:
    return _user_to_response(get_identity_service(db).get_user(user_id))


@user_router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> UserResponse:
    """Update profile fields that are present in the request body."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = get_identity_service(db).update_user(user_id, changes)
    return _user_to_response(user)


@user_router.post("/{user_id}/leave", response_model=HouseholdResponse)
def leave_household(
    user_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> HouseholdResponse:
    household = get_household_service(db).leave_household(user_id)
    return _household_to_response(household)


# Household endpoints
@household_router.post(
    "", response_model=HouseholdResponse, status_code=status.HTTP_201_CREATED
)
def create_household(
    payload: HouseholdCreate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> HouseholdResponse:
    currency = Currency(payload.currency) if payload.currency else None
    household = get_household_service(db).create_household(
        payload.name, payload.owner_id, currency
    )
    return _household_to_response(household)


@household_router.get("", response_model=list[HouseholdResponse])
def list_households(
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[HouseholdResponse]:
    return [
        _household_to_response(h) for h in get_household_service(db).list_households()
    ]


@household_router.post("/join", response_model=HouseholdResponse)
def join_household(
    payload: JoinRequest,
    db: Annotated[SQLiteDatabase, Depends()],
) -> HouseholdResponse:
    """Join by household code or personal invitation code as a pending member."""
    service = get_household_service(db)
    if not service.join_household(payload.code, payload.user_id):
        raise InvalidCodeError(payload.code)
    user = get_identity_service(db).get_user(payload.user_id)
    household = service.get_household(user.household_id)
    if household is None:
        raise HouseholdNotFoundError(str(user.household_id))
    return _household_to_response(household)


@household_router.get("/{household_id}", response_model=HouseholdResponse)
def get_household(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> HouseholdResponse:
    household = get_household_service(db).get_household(household_id)
    if household is None:
        raise HouseholdNotFoundError(household_id)
    return _household_to_response(household)


@household_router.post(
    "/{household_id}/members/{member_id}/approve", response_model=HouseholdResponse
)
def approve_member(
    household_id: UUID,
    member_id: UUID,
    payload: ActorRequest,
    db: Annotated[SQLiteDatabase, Depends()],
) -> HouseholdResponse:
    household = get_household_service(db).approve_member(
        household_id, member_id, payload.actor_id
    )
    return _household_to_response(household)


@household_router.delete(
    "/{household_id}/members/{member_id}", response_model=HouseholdResponse
)
def remove_member(
    household_id: UUID,
    member_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    actor_id: UUID = Query(...),
) -> HouseholdResponse:
    """Reject, evict or let a member leave; ownership moves on if needed."""
    household = get_household_service(db).remove_member(
        household_id, member_id, actor_id
    )
    return _household_to_response(household)


@household_router.post(
    "/{household_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    household_id: UUID,
    payload: InvitationCreate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> InvitationResponse:
    invitation = get_invitation_service(db).create_invitation(
        household_id, payload.email, payload.actor_id
    )
    return _invitation_to_response(invitation)


@household_router.get(
    "/{household_id}/invitations", response_model=list[InvitationResponse]
)
def list_invitations(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[InvitationResponse]:
    """Pending invitations only."""
    invitations = get_invitation_service(db).get_invitations(household_id)
    return [_invitation_to_response(i) for i in invitations]


@household_router.get(
    "/{household_id}/transactions", response_model=list[TransactionResponse]
)
def list_transactions(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[TransactionResponse]:
    """Live transactions of current members, newest date first."""
    transactions = get_ledger_service(db).get_transactions(household_id)
    return [_transaction_to_response(t) for t in transactions]


@household_router.get(
    "/{household_id}/recurring", response_model=list[RecurringItemResponse]
)
def list_recurring_items(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[RecurringItemResponse]:
    items = get_recurring_service(db).get_recurring_items(household_id)
    return [_recurring_to_response(i) for i in items]


@household_router.post(
    "/{household_id}/autopay", response_model=list[TransactionResponse]
)
def process_auto_payments(
    household_id: UUID,
    payload: AutoPayRequest,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[TransactionResponse]:
    """Materialize this month's due auto-payments."""
    created = get_autopay_scheduler(db).process_auto_payments(
        household_id, payload.user_id, payload.today
    )
    return [_transaction_to_response(t) for t in created]


@household_router.get(
    "/{household_id}/savings", response_model=list[SavingGoalResponse]
)
def list_saving_goals(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[SavingGoalResponse]:
    goals = get_savings_service(db).get_savings(household_id)
    return [_goal_to_response(g) for g in goals]


@household_router.get(
    "/{household_id}/audit", response_model=list[AuditEntryResponse]
)
def list_audit_entries(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    limit: int | None = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
) -> list[AuditEntryResponse]:
    """Audit entries for the household, newest first."""
    entries = AuditService(db).get_audit_logs(household_id, limit, offset)
    return [_entry_to_response(e) for e in entries]


@household_router.get(
    "/{household_id}/audit/summary", response_model=AuditSummaryResponse
)
def audit_summary(
    household_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> AuditSummaryResponse:
    summary = AuditService(db).get_summary(household_id)
    return AuditSummaryResponse(
        total_entries=summary.total_entries,
        entries_by_action={
            action.value: count for action, count in summary.entries_by_action.items()
        },
        oldest_entry=summary.oldest_entry,
        newest_entry=summary.newest_entry,
    )


# Invitation endpoints
@invitation_router.delete("/{invitation_id}", response_model=RevokeResponse)
def revoke_invitation(
    invitation_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    actor_id: UUID | None = Query(default=None),
) -> RevokeResponse:
    revoked = get_invitation_service(db).revoke_invitation(invitation_id, actor_id)
    return RevokeResponse(revoked=revoked)


# Transaction endpoints
@transaction_router.post(
    "", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED
)
def add_transaction(
    payload: TransactionCreate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> TransactionResponse:
    txn = get_ledger_service(db).add_transaction(
        type=TransactionType(payload.type),
        amount=payload.amount,
        description=payload.description,
        category=payload.category,
        date=payload.date,
        created_by=payload.created_by,
    )
    return _transaction_to_response(txn)


@transaction_router.get("/categories", response_model=list[str])
def list_categories() -> list[str]:
    """Suggested categories; any non-empty category is accepted."""
    return list(CATEGORIES)


@transaction_router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> TransactionResponse:
    return _transaction_to_response(get_ledger_service(db).get_transaction(transaction_id))


@transaction_router.delete("/{transaction_id}", response_model=TransactionResponse)
def delete_transaction(
    transaction_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    actor_id: UUID = Query(...),
    household_id: UUID = Query(...),
) -> TransactionResponse:
    txn = get_ledger_service(db).delete_transaction(
        transaction_id, actor_id, household_id
    )
    return _transaction_to_response(txn)


# Recurring item endpoints
@recurring_router.post(
    "", response_model=RecurringItemResponse, status_code=status.HTTP_201_CREATED
)
def add_recurring_item(
    payload: RecurringItemCreate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> RecurringItemResponse:
    item = RecurringItem(
        household_id=payload.household_id,
        type=TransactionType(payload.type),
        name=payload.name,
        amount=parse_positive_amount(payload.amount),
        category=payload.category,
        frequency=Frequency(payload.frequency),
        auto_pay=payload.auto_pay,
        pay_day=payload.pay_day,
    )
    item = get_recurring_service(db).add_recurring_item(item, payload.actor_id)
    return _recurring_to_response(item)


@recurring_router.put("/{item_id}", response_model=RecurringItemResponse)
def update_recurring_item(
    item_id: UUID,
    payload: RecurringItemUpdate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> RecurringItemResponse:
    service = get_recurring_service(db)
    existing = service.get_recurring_item(item_id)
    item = RecurringItem(
        id=item_id,
        household_id=existing.household_id,
        type=TransactionType(payload.type),
        name=payload.name,
        amount=parse_positive_amount(payload.amount),
        category=payload.category,
        frequency=Frequency(payload.frequency),
        active=payload.active,
        auto_pay=payload.auto_pay,
        pay_day=payload.pay_day,
        created_at=existing.created_at,
    )
    item = service.update_recurring_item(item, payload.actor_id)
    return _recurring_to_response(item)


@recurring_router.delete("/{item_id}", response_model=RecurringItemResponse)
def delete_recurring_item(
    item_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    actor_id: UUID | None = Query(default=None),
) -> RecurringItemResponse:
    item = get_recurring_service(db).delete_recurring_item(item_id, actor_id)
    return _recurring_to_response(item)


# Savings endpoints
@savings_router.post(
    "", response_model=SavingGoalResponse, status_code=status.HTTP_201_CREATED
)
def add_saving_goal(
    payload: SavingGoalCreate,
    db: Annotated[SQLiteDatabase, Depends()],
) -> SavingGoalResponse:
    goal = get_savings_service(db).add_saving_goal(
        payload.household_id,
        payload.name,
        initial_amount=payload.initial_amount,
        target_amount=payload.target_amount,
        color=payload.color,
        actor_id=payload.actor_id,
    )
    return _goal_to_response(goal)


@savings_router.get("/{goal_id}", response_model=SavingGoalResponse)
def get_saving_goal(
    goal_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> SavingGoalResponse:
    return _goal_to_response(get_savings_service(db).get_saving_goal(goal_id))


@savings_router.post("/{goal_id}/deposit", response_model=SavingGoalResponse)
def deposit(
    goal_id: UUID,
    payload: BalanceChange,
    db: Annotated[SQLiteDatabase, Depends()],
) -> SavingGoalResponse:
    goal = get_savings_service(db).deposit(
        goal_id, payload.amount, payload.description, payload.actor_id
    )
    return _goal_to_response(goal)


@savings_router.post("/{goal_id}/withdraw", response_model=SavingGoalResponse)
def withdraw(
    goal_id: UUID,
    payload: BalanceChange,
    db: Annotated[SQLiteDatabase, Depends()],
) -> SavingGoalResponse:
    goal = get_savings_service(db).withdraw(
        goal_id, payload.amount, payload.description, payload.actor_id
    )
    return _goal_to_response(goal)


@savings_router.post("/{goal_id}/balance", response_model=SavingGoalResponse)
def update_saving_balance(
    goal_id: UUID,
    payload: BalanceDelta,
    db: Annotated[SQLiteDatabase, Depends()],
) -> SavingGoalResponse:
    """Apply a signed balance change."""
    goal = get_savings_service(db).update_saving_balance(
        goal_id, payload.delta, payload.description, payload.actor_id
    )
    return _goal_to_response(goal)


@savings_router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saving_goal(
    goal_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
    actor_id: UUID | None = Query(default=None),
) -> Response:
    get_savings_service(db).delete_saving_goal(goal_id, actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@savings_router.get("/{goal_id}/logs", response_model=list[SavingLogResponse])
def list_saving_logs(
    goal_id: UUID,
    db: Annotated[SQLiteDatabase, Depends()],
) -> list[SavingLogResponse]:
    """Balance movements, newest first."""
    return [_log_to_response(log) for log in get_savings_service(db).get_saving_logs(goal_id)]

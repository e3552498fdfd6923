"""Savings ledger: goals with a running balance and a movement history."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    CreateSavingPayload,
    DeleteSavingPayload,
    UpdateSavingBalancePayload,
)
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.exceptions import (
    HouseholdNotFoundError,
    InvalidAmountError,
    SavingGoalNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteSavingGoalRepository,
)
from household_budget.services.audit import AuditService
from household_budget.services.transactions import parse_positive_amount

logger = get_logger(__name__)


def _to_decimal(amount: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise InvalidAmountError(str(amount), "not a number") from e
    if not value.is_finite():
        raise InvalidAmountError(str(amount), "not a finite number")
    return value


class SavingsService:
    def __init__(self, database: SQLiteDatabase, audit_service: AuditService) -> None:
        self._db = database
        self._households = SQLiteHouseholdRepository(database)
        self._goals = SQLiteSavingGoalRepository(database)
        self._audit = audit_service

    def get_savings(self, household_id: UUID) -> list[SavingGoal]:
        return list(self._goals.list_by_household(household_id))

    def get_saving_goal(self, goal_id: UUID) -> SavingGoal:
        goal = self._goals.get(goal_id)
        if goal is None or goal.is_deleted:
            raise SavingGoalNotFoundError(goal_id)
        return goal

    def add_saving_goal(
        self,
        household_id: UUID,
        name: str,
        initial_amount: Decimal | int | str = Decimal("0"),
        target_amount: Decimal | int | str | None = None,
        color: str | None = None,
        actor_id: UUID | None = None,
    ) -> SavingGoal:
        """Create a goal whose balance starts at ``initial_amount``.

        The starting balance is not recorded as a movement in the log.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Saving goal name is required")
        initial = _to_decimal(initial_amount)
        target = (
            parse_positive_amount(target_amount) if target_amount is not None else None
        )

        with self._db.transaction():
            if self._households.get(household_id) is None:
                raise HouseholdNotFoundError(household_id)

            goal = SavingGoal(
                household_id=household_id,
                name=name,
                current_amount=initial,
                initial_amount=initial,
                target_amount=target,
                color=color,
            )
            self._goals.add(goal)
            self._audit.log_action(
                AuditActionType.CREATE_SAVING,
                CreateSavingPayload(
                    name=name, target=str(target) if target is not None else None
                ),
                actor_id,
                household_id,
            )

        logger.info(
            "saving_goal_created", goal_id=str(goal.id), household_id=str(household_id)
        )
        return goal

    def update_saving_balance(
        self,
        goal_id: UUID,
        delta: Decimal | int | str,
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> SavingGoal:
        """Apply a signed movement and record it in the goal's log.

        The balance has no floor and the delta is taken as given; the sign
        and size checks live in ``deposit`` and ``withdraw``.
        """
        diff = _to_decimal(delta)

        with self._db.transaction():
            goal = self.get_saving_goal(goal_id)
            goal.apply_delta(diff)
            self._goals.update(goal)
            self._goals.add_log(
                SavingLog(saving_goal_id=goal.id, amount=diff, description=description)
            )
            self._audit.log_action(
                AuditActionType.UPDATE_SAVING_BALANCE,
                UpdateSavingBalancePayload(name=goal.name, diff=str(diff)),
                actor_id,
                goal.household_id,
            )

        logger.info(
            "saving_balance_updated",
            goal_id=str(goal_id),
            diff=str(diff),
            balance=str(goal.current_amount),
        )
        return goal

    def deposit(
        self,
        goal_id: UUID,
        amount: Decimal | int | str,
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> SavingGoal:
        return self.update_saving_balance(
            goal_id, parse_positive_amount(amount), description, actor_id
        )

    def withdraw(
        self,
        goal_id: UUID,
        amount: Decimal | int | str,
        description: str | None = None,
        actor_id: UUID | None = None,
    ) -> SavingGoal:
        return self.update_saving_balance(
            goal_id, -parse_positive_amount(amount), description, actor_id
        )

    def delete_saving_goal(
        self, goal_id: UUID, actor_id: UUID | None = None
    ) -> SavingGoal:
        with self._db.transaction():
            goal = self.get_saving_goal(goal_id)
            goal.soft_delete()
            self._goals.update(goal)
            self._audit.log_action(
                AuditActionType.DELETE_SAVING,
                DeleteSavingPayload(name=goal.name),
                actor_id,
                goal.household_id,
            )

        logger.info("saving_goal_deleted", goal_id=str(goal_id))
        return goal

    def get_saving_logs(self, goal_id: UUID) -> list[SavingLog]:
        """Movements for the goal, newest first."""
        if self._goals.get(goal_id) is None:
            raise SavingGoalNotFoundError(goal_id)
        return list(self._goals.list_logs(goal_id))

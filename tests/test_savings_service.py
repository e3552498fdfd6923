from decimal import Decimal
from uuid import uuid4

import pytest

from household_budget.domain.audit import AuditActionType
from household_budget.domain.households import Household
from household_budget.domain.savings import SavingGoal
from household_budget.domain.users import User
from household_budget.exceptions import (
    HouseholdNotFoundError,
    InvalidAmountError,
    SavingGoalNotFoundError,
    ValidationError,
)
from household_budget.repositories.sqlite import SQLiteSavingGoalRepository
from household_budget.services.audit import AuditService
from household_budget.services.savings import SavingsService


@pytest.fixture
def goal(savings_service: SavingsService, household: Household, owner: User) -> SavingGoal:
    return savings_service.add_saving_goal(
        household.id,
        "Vésztartalék",
        initial_amount="150000",
        target_amount="500000",
        color="#A0D468",
        actor_id=owner.id,
    )


class TestSavingGoal:
    def test_progress_percent(self):
        goal = SavingGoal(
            household_id=uuid4(),
            name="Nyaralás",
            current_amount=Decimal("50000"),
            target_amount=Decimal("300000"),
        )

        assert goal.progress_percent == Decimal("16.67")
        assert goal.initial_amount == Decimal("50000")

    def test_progress_without_target(self):
        goal = SavingGoal(household_id=uuid4(), name="Egyéb")

        assert goal.progress_percent is None


class TestAddSavingGoal:
    def test_starts_at_initial_amount_without_log(
        self,
        savings_service: SavingsService,
        audit_service: AuditService,
        household: Household,
        goal: SavingGoal,
    ):
        assert goal.current_amount == Decimal("150000")
        assert goal.initial_amount == Decimal("150000")
        assert savings_service.get_saving_logs(goal.id) == []
        assert [g.id for g in savings_service.get_savings(household.id)] == [goal.id]

        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.CREATE_SAVING
        assert newest.snapshot == {"name": "Vésztartalék", "target": "500000"}

    def test_negative_initial_amount_kept_as_given(
        self, savings_service: SavingsService, household: Household
    ):
        goal = savings_service.add_saving_goal(household.id, "X", initial_amount="-1")

        assert goal.current_amount == Decimal("-1")
        assert savings_service.get_saving_logs(goal.id) == []

    def test_non_numeric_initial_amount_rejected(
        self, savings_service: SavingsService, household: Household
    ):
        with pytest.raises(InvalidAmountError):
            savings_service.add_saving_goal(household.id, "X", initial_amount="sok")

    def test_blank_name_rejected(
        self, savings_service: SavingsService, household: Household
    ):
        with pytest.raises(ValidationError):
            savings_service.add_saving_goal(household.id, " ")

    def test_unknown_household_rejected(self, savings_service: SavingsService):
        with pytest.raises(HouseholdNotFoundError):
            savings_service.add_saving_goal(uuid4(), "Nyaralás")


class TestUpdateSavingBalance:
    def test_round_trip_restores_balance(
        self, savings_service: SavingsService, goal: SavingGoal, owner: User
    ):
        savings_service.update_saving_balance(goal.id, Decimal("500"), "Be", owner.id)
        updated = savings_service.update_saving_balance(
            goal.id, Decimal("-500"), "Ki", owner.id
        )

        assert updated.current_amount == Decimal("150000")
        logs = savings_service.get_saving_logs(goal.id)
        assert len(logs) == 2
        assert sum(log.amount for log in logs) == 0
        assert [log.description for log in logs] == ["Ki", "Be"]

    def test_logs_balance_change(
        self,
        savings_service: SavingsService,
        audit_service: AuditService,
        household: Household,
        goal: SavingGoal,
        owner: User,
    ):
        savings_service.update_saving_balance(goal.id, "2500", actor_id=owner.id)

        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.UPDATE_SAVING_BALANCE
        assert newest.snapshot == {"name": "Vésztartalék", "diff": "2500"}

    def test_balance_may_go_negative(
        self, savings_service: SavingsService, goal: SavingGoal
    ):
        updated = savings_service.update_saving_balance(goal.id, "-200000")

        assert updated.current_amount == Decimal("-50000")

    def test_zero_delta_recorded_as_given(
        self, savings_service: SavingsService, goal: SavingGoal
    ):
        updated = savings_service.update_saving_balance(goal.id, "0")

        assert updated.current_amount == Decimal("150000")
        assert [log.amount for log in savings_service.get_saving_logs(goal.id)] == [
            Decimal("0")
        ]

    def test_unknown_goal_raises(self, savings_service: SavingsService):
        with pytest.raises(SavingGoalNotFoundError):
            savings_service.update_saving_balance(uuid4(), "100")

    def test_failed_log_write_leaves_balance_unchanged(
        self,
        savings_service: SavingsService,
        goal: SavingGoal,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def broken_add_log(self, log):
            raise RuntimeError("write failed")

        monkeypatch.setattr(SQLiteSavingGoalRepository, "add_log", broken_add_log)

        with pytest.raises(RuntimeError):
            savings_service.update_saving_balance(goal.id, "1000")

        monkeypatch.undo()
        assert savings_service.get_saving_goal(goal.id).current_amount == Decimal(
            "150000"
        )


class TestDepositWithdraw:
    def test_deposit_and_withdraw_apply_sign(
        self, savings_service: SavingsService, goal: SavingGoal
    ):
        savings_service.deposit(goal.id, "10000", "Fizetésből")
        updated = savings_service.withdraw(goal.id, "4000", "Javítás")

        assert updated.current_amount == Decimal("156000")
        amounts = [log.amount for log in savings_service.get_saving_logs(goal.id)]
        assert amounts == [Decimal("-4000"), Decimal("10000")]

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount_rejected(
        self, savings_service: SavingsService, goal: SavingGoal, amount: str
    ):
        with pytest.raises(InvalidAmountError):
            savings_service.deposit(goal.id, amount)
        with pytest.raises(InvalidAmountError):
            savings_service.withdraw(goal.id, amount)


class TestDeleteSavingGoal:
    def test_delete_hides_goal(
        self,
        savings_service: SavingsService,
        audit_service: AuditService,
        household: Household,
        goal: SavingGoal,
        owner: User,
    ):
        savings_service.delete_saving_goal(goal.id, owner.id)

        assert savings_service.get_savings(household.id) == []
        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.DELETE_SAVING
        assert newest.snapshot == {"name": "Vésztartalék"}

    def test_deleted_goal_cannot_change_balance(
        self, savings_service: SavingsService, goal: SavingGoal
    ):
        savings_service.delete_saving_goal(goal.id)

        with pytest.raises(SavingGoalNotFoundError):
            savings_service.deposit(goal.id, "100")

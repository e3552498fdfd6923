from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from household_budget.domain.audit import AuditEntry
from household_budget.domain.households import Household
from household_budget.domain.invitations import Invitation
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import MembershipStatus


class UserRepository(ABC):
    @abstractmethod
    def add(self, user: User) -> None:
        pass

    @abstractmethod
    def get(self, user_id: UUID) -> User | None:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[User]:
        pass

    @abstractmethod
    def update(self, user: User) -> None:
        pass


class SessionRepository(ABC):
    """Holds the single current-session user marker."""

    @abstractmethod
    def get_current_user_id(self) -> UUID | None:
        pass

    @abstractmethod
    def set_current_user_id(self, user_id: UUID) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class HouseholdRepository(ABC):
    @abstractmethod
    def add(self, household: Household) -> None:
        pass

    @abstractmethod
    def get(self, household_id: UUID) -> Household | None:
        pass

    @abstractmethod
    def get_by_invite_code(self, code: str) -> Household | None:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Household]:
        pass

    @abstractmethod
    def set_owner(self, household_id: UUID, owner_id: UUID | None) -> None:
        pass

    @abstractmethod
    def add_member(
        self, household_id: UUID, user_id: UUID, status: MembershipStatus | None
    ) -> None:
        pass

    @abstractmethod
    def set_member_status(
        self, household_id: UUID, user_id: UUID, status: MembershipStatus | None
    ) -> None:
        pass

    @abstractmethod
    def remove_member(self, household_id: UUID, user_id: UUID) -> None:
        pass


class InvitationRepository(ABC):
    @abstractmethod
    def add(self, invitation: Invitation) -> None:
        pass

    @abstractmethod
    def get(self, invitation_id: UUID) -> Invitation | None:
        pass

    @abstractmethod
    def get_pending_by_code(self, code: str) -> Invitation | None:
        pass

    @abstractmethod
    def code_exists(self, code: str) -> bool:
        """True when any invitation, whatever its status, uses the code."""
        pass

    @abstractmethod
    def list_by_household(
        self, household_id: UUID, pending_only: bool = True
    ) -> Iterable[Invitation]:
        pass

    @abstractmethod
    def update(self, invitation: Invitation) -> None:
        pass


class TransactionRepository(ABC):
    @abstractmethod
    def add(self, txn: Transaction) -> None:
        pass

    @abstractmethod
    def get(self, txn_id: UUID) -> Transaction | None:
        pass

    @abstractmethod
    def list_by_creators(
        self,
        creator_ids: Iterable[UUID],
        start_date: date | None = None,
        end_date: date | None = None,
        include_deleted: bool = False,
    ) -> Iterable[Transaction]:
        pass

    @abstractmethod
    def mark_deleted(self, txn: Transaction) -> None:
        pass


class RecurringItemRepository(ABC):
    @abstractmethod
    def add(self, item: RecurringItem) -> None:
        pass

    @abstractmethod
    def get(self, item_id: UUID) -> RecurringItem | None:
        pass

    @abstractmethod
    def list_by_household(
        self, household_id: UUID, active_only: bool = True
    ) -> Iterable[RecurringItem]:
        pass

    @abstractmethod
    def update(self, item: RecurringItem) -> None:
        pass


class SavingGoalRepository(ABC):
    @abstractmethod
    def add(self, goal: SavingGoal) -> None:
        pass

    @abstractmethod
    def get(self, goal_id: UUID) -> SavingGoal | None:
        pass

    @abstractmethod
    def list_by_household(
        self, household_id: UUID, include_deleted: bool = False
    ) -> Iterable[SavingGoal]:
        pass

    @abstractmethod
    def update(self, goal: SavingGoal) -> None:
        pass

    @abstractmethod
    def add_log(self, log: SavingLog) -> None:
        pass

    @abstractmethod
    def list_logs(self, goal_id: UUID) -> Iterable[SavingLog]:
        pass


class AuditLogRepository(ABC):
    """Append-only store: entries are added and read, never changed."""

    @abstractmethod
    def append(self, entry: AuditEntry) -> None:
        pass

    @abstractmethod
    def get(self, entry_id: UUID) -> AuditEntry | None:
        pass

    @abstractmethod
    def list_by_household(
        self, household_id: UUID, limit: int | None = None, offset: int = 0
    ) -> Iterable[AuditEntry]:
        pass

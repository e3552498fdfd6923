import threading
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from household_budget.domain.households import Household
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import MembershipStatus, TransactionType
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteSessionRepository,
    SQLiteTransactionRepository,
    SQLiteUserRepository,
)


@pytest.fixture
def user_repo(db: SQLiteDatabase) -> SQLiteUserRepository:
    return SQLiteUserRepository(db)


@pytest.fixture
def household_repo(db: SQLiteDatabase) -> SQLiteHouseholdRepository:
    return SQLiteHouseholdRepository(db)


@pytest.fixture
def transaction_repo(db: SQLiteDatabase) -> SQLiteTransactionRepository:
    return SQLiteTransactionRepository(db)


class TestSQLiteDatabaseTransaction:
    def test_outermost_unit_commits(
        self, db: SQLiteDatabase, user_repo: SQLiteUserRepository
    ):
        with db.transaction():
            with db.transaction():
                user_repo.add(User(email="a@example.hu", display_name="A"))
            assert db.in_transaction

        assert not db.in_transaction
        assert user_repo.get_by_email("a@example.hu") is not None

    def test_exception_rolls_back_nested_writes(
        self, db: SQLiteDatabase, user_repo: SQLiteUserRepository
    ):
        with pytest.raises(RuntimeError):
            with db.transaction():
                user_repo.add(User(email="a@example.hu", display_name="A"))
                with db.transaction():
                    user_repo.add(User(email="b@example.hu", display_name="B"))
                raise RuntimeError("abort")

        assert list(user_repo.list_all()) == []
        assert not db.in_transaction


class TestSQLiteUserRepository:
    def test_add_and_get(self, user_repo: SQLiteUserRepository):
        user = User(email="a@example.hu", display_name="A", password="pw")

        user_repo.add(user)

        assert user_repo.get(user.id) == user
        assert user_repo.get(uuid4()) is None

    def test_update_membership_fields(self, user_repo: SQLiteUserRepository):
        user = User(email="a@example.hu", display_name="A")
        user_repo.add(user)
        household_id = uuid4()

        user.join(household_id, MembershipStatus.PENDING)
        user_repo.update(user)

        stored = user_repo.get(user.id)
        assert stored is not None
        assert stored.household_id == household_id
        assert stored.membership_status == MembershipStatus.PENDING


class TestSQLiteSessionRepository:
    def test_single_session_slot(self, db: SQLiteDatabase):
        repo = SQLiteSessionRepository(db)
        first, second = uuid4(), uuid4()

        repo.set_current_user_id(first)
        repo.set_current_user_id(second)

        assert repo.get_current_user_id() == second
        repo.clear()
        assert repo.get_current_user_id() is None


class TestSQLiteHouseholdRepository:
    def test_members_are_read_from_user_records(
        self,
        user_repo: SQLiteUserRepository,
        household_repo: SQLiteHouseholdRepository,
    ):
        user = User(email="a@example.hu", display_name="A")
        user_repo.add(user)
        household = Household(name="Otthon", invite_code="HOME-1234", owner_id=user.id)
        household_repo.add(household)
        household_repo.add_member(household.id, user.id, MembershipStatus.APPROVED)

        user.display_name = "Anna"
        user_repo.update(user)

        stored = household_repo.get(household.id)
        assert stored is not None
        assert stored.members[0].display_name == "Anna"
        assert stored.members[0].membership_status == MembershipStatus.APPROVED

    def test_members_in_join_order(
        self,
        user_repo: SQLiteUserRepository,
        household_repo: SQLiteHouseholdRepository,
    ):
        users = [User(email=f"u{i}@example.hu", display_name=f"U{i}") for i in range(3)]
        for user in users:
            user_repo.add(user)
        household = Household(name="Otthon", invite_code="HOME-1234")
        household_repo.add(household)
        for user in users:
            household_repo.add_member(household.id, user.id, MembershipStatus.PENDING)

        stored = household_repo.get(household.id)

        assert stored is not None
        assert stored.member_ids == [u.id for u in users]
        assert stored.is_ownerless

    def test_get_by_invite_code(self, household_repo: SQLiteHouseholdRepository):
        household = Household(name="Otthon", invite_code="HOME-4321")
        household_repo.add(household)

        found = household_repo.get_by_invite_code("HOME-4321")

        assert found is not None
        assert found.id == household.id
        assert household_repo.get_by_invite_code("HOME-0000") is None


class TestSQLiteTransactionRepository:
    def test_list_excludes_deleted_unless_requested(
        self, transaction_repo: SQLiteTransactionRepository
    ):
        creator = uuid4()
        txn = Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("100"),
            description="x",
            category="Egyéb",
            date=date(2025, 6, 1),
            created_by=creator,
        )
        transaction_repo.add(txn)
        txn.soft_delete()
        transaction_repo.mark_deleted(txn)

        assert list(transaction_repo.list_by_creators([creator])) == []
        assert [
            t.id
            for t in transaction_repo.list_by_creators([creator], include_deleted=True)
        ] == [txn.id]

    def test_no_creators_returns_empty(
        self, transaction_repo: SQLiteTransactionRepository
    ):
        assert list(transaction_repo.list_by_creators([])) == []


class TestSQLiteDatabaseThreads:
    @pytest.fixture
    def shared_db(self) -> SQLiteDatabase:
        database = SQLiteDatabase(":memory:", check_same_thread=False)
        database.initialize()
        return database

    def test_write_from_other_thread_survives_failed_unit(
        self, shared_db: SQLiteDatabase
    ):
        users = SQLiteUserRepository(shared_db)
        session = SQLiteSessionRepository(shared_db)
        user = User(email="a@example.hu", display_name="A")
        users.add(user)
        session.set_current_user_id(user.id)
        started = threading.Event()

        def clear_session() -> None:
            started.set()
            session.clear()

        worker = threading.Thread(target=clear_session)
        with pytest.raises(RuntimeError):
            with shared_db.transaction():
                users.add(User(email="b@example.hu", display_name="B"))
                worker.start()
                started.wait(timeout=5)
                worker.join(timeout=0.2)
                assert worker.is_alive()
                raise RuntimeError("abort")

        worker.join(timeout=5)
        assert not worker.is_alive()
        assert session.get_current_user_id() is None
        assert users.get_by_email("b@example.hu") is None

    def test_reads_from_other_thread_wait_for_commit(
        self, shared_db: SQLiteDatabase
    ):
        users = SQLiteUserRepository(shared_db)
        seen: list[int] = []

        def count_users() -> None:
            seen.append(len(list(users.list_all())))

        worker = threading.Thread(target=count_users)
        with pytest.raises(RuntimeError):
            with shared_db.transaction():
                users.add(User(email="a@example.hu", display_name="A"))
                worker.start()
                worker.join(timeout=0.2)
                raise RuntimeError("abort")

        worker.join(timeout=5)
        assert seen == [0]

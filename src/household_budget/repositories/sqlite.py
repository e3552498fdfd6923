"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import contextlib
import json
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    AuditEntry,
    payload_from_dict,
)
from household_budget.domain.households import Household, MemberSnapshot
from household_budget.domain.invitations import Invitation
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.savings import SavingGoal, SavingLog
from household_budget.domain.transactions import Transaction
from household_budget.domain.users import User
from household_budget.domain.value_objects import (
    Currency,
    Frequency,
    InvitationStatus,
    MembershipStatus,
    TransactionType,
)
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


def _uuid_or_none(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def _str_or_none(value: object | None) -> str | None:
    return str(value) if value is not None else None


def _decimal_or_none(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _datetime_or_none(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _status_or_none(value: str | None) -> MembershipStatus | None:
    return MembershipStatus(value) if value else None


class SQLiteDatabase:
    """SQLite database connection manager.

    One connection is shared by every thread. Each repository call runs
    inside ``transaction()``, which holds the lock for its whole duration:
    a call made on its own commits immediately, while calls nested in an
    outer unit commit once when that unit exits or roll back with it.
    Another thread waits for the open unit before it reads or writes.
    """

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        with self._lock:
            if self._connection is None:
                self._connection = sqlite3.connect(
                    self._path, check_same_thread=self._check_same_thread
                )
                self._connection.row_factory = sqlite3.Row
                self._connection.execute("PRAGMA foreign_keys = ON")
            return self._connection

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block of repository calls as one commit unit."""
        with self._lock:
            conn = self.get_connection()
            self._depth += 1
            try:
                yield conn
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    conn.rollback()
                raise
            else:
                self._depth -= 1
                if self._depth == 0:
                    conn.commit()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def initialize(self) -> None:
        """Create all database tables."""
        with self._lock:
            self.get_connection().executescript(
                """
                -- Users table
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password TEXT,
                    display_name TEXT NOT NULL,
                    household_id TEXT,
                    membership_status TEXT,
                    created_at TEXT NOT NULL
                );

                -- Single-slot session marker
                CREATE TABLE IF NOT EXISTS session (
                    slot INTEGER PRIMARY KEY CHECK (slot = 1),
                    user_id TEXT NOT NULL
                );

                -- Households table
                CREATE TABLE IF NOT EXISTS households (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    invite_code TEXT NOT NULL UNIQUE,
                    owner_id TEXT,
                    currency TEXT NOT NULL DEFAULT 'HUF',
                    created_at TEXT NOT NULL
                );

                -- Household members table
                CREATE TABLE IF NOT EXISTS household_members (
                    household_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    membership_status TEXT,
                    joined_at TEXT NOT NULL,
                    PRIMARY KEY (household_id, user_id),
                    FOREIGN KEY (household_id) REFERENCES households(id),
                    FOREIGN KEY (user_id) REFERENCES users(id)
                );
                CREATE INDEX IF NOT EXISTS idx_household_members_user ON household_members(user_id);

                -- Invitations table
                CREATE TABLE IF NOT EXISTS invitations (
                    id TEXT PRIMARY KEY,
                    household_id TEXT NOT NULL,
                    email TEXT NOT NULL,
                    code TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'PENDING',
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (household_id) REFERENCES households(id)
                );
                CREATE INDEX IF NOT EXISTS idx_invitations_household ON invitations(household_id);
                CREATE INDEX IF NOT EXISTS idx_invitations_code ON invitations(code);

                -- Transactions table
                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    type TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    category TEXT NOT NULL DEFAULT '',
                    date TEXT NOT NULL,
                    created_by TEXT NOT NULL,
                    is_recurring_instance INTEGER NOT NULL DEFAULT 0,
                    recurring_item_id TEXT,
                    deleted_at TEXT,
                    created_at TEXT NOT NULL,
                    CHECK (recurring_item_id IS NULL OR is_recurring_instance = 1)
                );
                CREATE INDEX IF NOT EXISTS idx_transactions_created_by ON transactions(created_by);
                CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date);

                -- Recurring items table
                CREATE TABLE IF NOT EXISTS recurring_items (
                    id TEXT PRIMARY KEY,
                    household_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    name TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT '',
                    frequency TEXT NOT NULL DEFAULT 'MONTHLY',
                    active INTEGER NOT NULL DEFAULT 1,
                    auto_pay INTEGER NOT NULL DEFAULT 0,
                    pay_day INTEGER,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (household_id) REFERENCES households(id)
                );
                CREATE INDEX IF NOT EXISTS idx_recurring_items_household ON recurring_items(household_id);

                -- Saving goals table
                CREATE TABLE IF NOT EXISTS saving_goals (
                    id TEXT PRIMARY KEY,
                    household_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    current_amount TEXT NOT NULL,
                    initial_amount TEXT NOT NULL,
                    target_amount TEXT,
                    color TEXT,
                    deleted_at TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (household_id) REFERENCES households(id)
                );
                CREATE INDEX IF NOT EXISTS idx_saving_goals_household ON saving_goals(household_id);

                -- Saving logs table
                CREATE TABLE IF NOT EXISTS saving_logs (
                    id TEXT PRIMARY KEY,
                    saving_goal_id TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    description TEXT,
                    FOREIGN KEY (saving_goal_id) REFERENCES saving_goals(id)
                );
                CREATE INDEX IF NOT EXISTS idx_saving_logs_goal ON saving_logs(saving_goal_id);

                -- Audit log table
                CREATE TABLE IF NOT EXISTS audit_logs (
                    id TEXT PRIMARY KEY,
                    action_type TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    performed_by TEXT,
                    timestamp TEXT NOT NULL,
                    household_id TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_audit_logs_household ON audit_logs(household_id);
                CREATE INDEX IF NOT EXISTS idx_audit_logs_timestamp ON audit_logs(timestamp);
                """
            )

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None


class SQLiteUserRepository(UserRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, user: User) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (id, email, password, display_name, household_id,
                                   membership_status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(user.id),
                    user.email,
                    user.password,
                    user.display_name,
                    _str_or_none(user.household_id),
                    user.membership_status.value if user.membership_status else None,
                    user.created_at.isoformat(),
                ),
            )

    def get(self, user_id: UUID) -> User | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (str(user_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    def get_by_email(self, email: str) -> User | None:
        with self._db.transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
            if row is None:
                return None
            return self._row_to_user(row)

    def list_all(self) -> Iterable[User]:
        with self._db.transaction() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at").fetchall()
            return [self._row_to_user(row) for row in rows]

    def update(self, user: User) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE users SET
                    email = ?,
                    password = ?,
                    display_name = ?,
                    household_id = ?,
                    membership_status = ?
                WHERE id = ?
                """,
                (
                    user.email,
                    user.password,
                    user.display_name,
                    _str_or_none(user.household_id),
                    user.membership_status.value if user.membership_status else None,
                    str(user.id),
                ),
            )

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            password=row["password"],
            display_name=row["display_name"],
            household_id=_uuid_or_none(row["household_id"]),
            membership_status=_status_or_none(row["membership_status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteSessionRepository(SessionRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def get_current_user_id(self) -> UUID | None:
        with self._db.transaction() as conn:
            row = conn.execute("SELECT user_id FROM session WHERE slot = 1").fetchone()
            if row is None:
                return None
            return UUID(row["user_id"])

    def set_current_user_id(self, user_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO session (slot, user_id) VALUES (1, ?)",
                (str(user_id),),
            )

    def clear(self) -> None:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM session")


class SQLiteHouseholdRepository(HouseholdRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, household: Household) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO households (id, name, invite_code, owner_id, currency, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(household.id),
                    household.name,
                    household.invite_code,
                    _str_or_none(household.owner_id),
                    household.currency.value,
                    household.created_at.isoformat(),
                ),
            )
            for member in household.members:
                self._insert_member(
                    conn,
                    household.id,
                    member.user_id,
                    member.membership_status,
                    member.joined_at,
                )

    def get(self, household_id: UUID) -> Household | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM households WHERE id = ?", (str(household_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_household(row)

    def get_by_invite_code(self, code: str) -> Household | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM households WHERE invite_code = ?", (code,)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_household(row)

    def list_all(self) -> Iterable[Household]:
        with self._db.transaction() as conn:
            rows = conn.execute("SELECT * FROM households ORDER BY created_at").fetchall()
            return [self._row_to_household(row) for row in rows]

    def set_owner(self, household_id: UUID, owner_id: UUID | None) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE households SET owner_id = ? WHERE id = ?",
                (_str_or_none(owner_id), str(household_id)),
            )

    def add_member(
        self, household_id: UUID, user_id: UUID, status: MembershipStatus | None
    ) -> None:
        with self._db.transaction() as conn:
            self._insert_member(conn, household_id, user_id, status, datetime.now(UTC))

    def set_member_status(
        self, household_id: UUID, user_id: UUID, status: MembershipStatus | None
    ) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE household_members SET membership_status = ?
                WHERE household_id = ? AND user_id = ?
                """,
                (status.value if status else None, str(household_id), str(user_id)),
            )

    def remove_member(self, household_id: UUID, user_id: UUID) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "DELETE FROM household_members WHERE household_id = ? AND user_id = ?",
                (str(household_id), str(user_id)),
            )

    def _insert_member(
        self,
        conn: sqlite3.Connection,
        household_id: UUID,
        user_id: UUID,
        status: MembershipStatus | None,
        joined_at: datetime,
    ) -> None:
        conn.execute(
            """
            INSERT INTO household_members (household_id, user_id, membership_status, joined_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                str(household_id),
                str(user_id),
                status.value if status else None,
                joined_at.isoformat(),
            ),
        )

    def _list_members(self, household_id: str) -> list[MemberSnapshot]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                """
                SELECT m.user_id, m.membership_status, m.joined_at, u.email, u.display_name
                FROM household_members m
                JOIN users u ON u.id = m.user_id
                WHERE m.household_id = ?
                ORDER BY m.joined_at, m.rowid
                """,
                (household_id,),
            ).fetchall()
            return [
                MemberSnapshot(
                    user_id=UUID(row["user_id"]),
                    email=row["email"],
                    display_name=row["display_name"],
                    membership_status=_status_or_none(row["membership_status"]),
                    joined_at=datetime.fromisoformat(row["joined_at"]),
                )
                for row in rows
            ]

    def _row_to_household(self, row: sqlite3.Row) -> Household:
        return Household(
            id=UUID(row["id"]),
            name=row["name"],
            invite_code=row["invite_code"],
            owner_id=_uuid_or_none(row["owner_id"]),
            currency=Currency(row["currency"]),
            members=self._list_members(row["id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteInvitationRepository(InvitationRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, invitation: Invitation) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO invitations (id, household_id, email, code, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(invitation.id),
                    str(invitation.household_id),
                    invitation.email,
                    invitation.code,
                    invitation.status.value,
                    invitation.created_at.isoformat(),
                ),
            )

    def get(self, invitation_id: UUID) -> Invitation | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM invitations WHERE id = ?", (str(invitation_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_invitation(row)

    def get_pending_by_code(self, code: str) -> Invitation | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                """
                SELECT * FROM invitations
                WHERE code = ? AND status = ?
                ORDER BY created_at
                LIMIT 1
                """,
                (code, InvitationStatus.PENDING.value),
            ).fetchone()
            if row is None:
                return None
            return self._row_to_invitation(row)

    def code_exists(self, code: str) -> bool:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT 1 FROM invitations WHERE code = ? LIMIT 1", (code,)
            ).fetchone()
            return row is not None

    def list_by_household(
        self, household_id: UUID, pending_only: bool = True
    ) -> Iterable[Invitation]:
        with self._db.transaction() as conn:
            if pending_only:
                rows = conn.execute(
                    """
                    SELECT * FROM invitations
                    WHERE household_id = ? AND status = ?
                    ORDER BY created_at
                    """,
                    (str(household_id), InvitationStatus.PENDING.value),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM invitations WHERE household_id = ? ORDER BY created_at",
                    (str(household_id),),
                ).fetchall()
            return [self._row_to_invitation(row) for row in rows]

    def update(self, invitation: Invitation) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE invitations SET status = ? WHERE id = ?",
                (invitation.status.value, str(invitation.id)),
            )

    def _row_to_invitation(self, row: sqlite3.Row) -> Invitation:
        return Invitation(
            id=UUID(row["id"]),
            household_id=UUID(row["household_id"]),
            email=row["email"],
            code=row["code"],
            status=InvitationStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteTransactionRepository(TransactionRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, txn: Transaction) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO transactions (id, type, amount, description, category, date,
                                          created_by, is_recurring_instance, recurring_item_id,
                                          deleted_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(txn.id),
                    txn.type.value,
                    str(txn.amount),
                    txn.description,
                    txn.category,
                    txn.date.isoformat(),
                    str(txn.created_by),
                    1 if txn.is_recurring_instance else 0,
                    _str_or_none(txn.recurring_item_id),
                    txn.deleted_at.isoformat() if txn.deleted_at else None,
                    txn.created_at.isoformat(),
                ),
            )

    def get(self, txn_id: UUID) -> Transaction | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM transactions WHERE id = ?", (str(txn_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_transaction(row)

    def list_by_creators(
        self,
        creator_ids: Iterable[UUID],
        start_date: date | None = None,
        end_date: date | None = None,
        include_deleted: bool = False,
    ) -> Iterable[Transaction]:
        ids = [str(creator_id) for creator_id in creator_ids]
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        query = f"SELECT * FROM transactions WHERE created_by IN ({placeholders})"
        params: list[object] = list(ids)

        if not include_deleted:
            query += " AND deleted_at IS NULL"
        if start_date:
            query += " AND date >= ?"
            params.append(start_date.isoformat())
        if end_date:
            query += " AND date <= ?"
            params.append(end_date.isoformat())

        query += " ORDER BY date DESC, created_at DESC"

        with self._db.transaction() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_transaction(row) for row in rows]

    def mark_deleted(self, txn: Transaction) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE transactions SET deleted_at = ? WHERE id = ?",
                (txn.deleted_at.isoformat() if txn.deleted_at else None, str(txn.id)),
            )

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=UUID(row["id"]),
            type=TransactionType(row["type"]),
            amount=Decimal(row["amount"]),
            description=row["description"],
            category=row["category"],
            date=date.fromisoformat(row["date"]),
            created_by=UUID(row["created_by"]),
            is_recurring_instance=bool(row["is_recurring_instance"]),
            recurring_item_id=_uuid_or_none(row["recurring_item_id"]),
            deleted_at=_datetime_or_none(row["deleted_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteRecurringItemRepository(RecurringItemRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, item: RecurringItem) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO recurring_items (id, household_id, type, name, amount, category,
                                             frequency, active, auto_pay, pay_day, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item.id),
                    str(item.household_id),
                    item.type.value,
                    item.name,
                    str(item.amount),
                    item.category,
                    item.frequency.value,
                    1 if item.active else 0,
                    1 if item.auto_pay else 0,
                    item.pay_day,
                    item.created_at.isoformat(),
                ),
            )

    def get(self, item_id: UUID) -> RecurringItem | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM recurring_items WHERE id = ?", (str(item_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_item(row)

    def list_by_household(
        self, household_id: UUID, active_only: bool = True
    ) -> Iterable[RecurringItem]:
        with self._db.transaction() as conn:
            query = "SELECT * FROM recurring_items WHERE household_id = ?"
            if active_only:
                query += " AND active = 1"
            query += " ORDER BY created_at, rowid"
            rows = conn.execute(query, (str(household_id),)).fetchall()
            return [self._row_to_item(row) for row in rows]

    def update(self, item: RecurringItem) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE recurring_items SET
                    household_id = ?,
                    type = ?,
                    name = ?,
                    amount = ?,
                    category = ?,
                    frequency = ?,
                    active = ?,
                    auto_pay = ?,
                    pay_day = ?
                WHERE id = ?
                """,
                (
                    str(item.household_id),
                    item.type.value,
                    item.name,
                    str(item.amount),
                    item.category,
                    item.frequency.value,
                    1 if item.active else 0,
                    1 if item.auto_pay else 0,
                    item.pay_day,
                    str(item.id),
                ),
            )

    def _row_to_item(self, row: sqlite3.Row) -> RecurringItem:
        return RecurringItem(
            id=UUID(row["id"]),
            household_id=UUID(row["household_id"]),
            type=TransactionType(row["type"]),
            name=row["name"],
            amount=Decimal(row["amount"]),
            category=row["category"],
            frequency=Frequency(row["frequency"]),
            active=bool(row["active"]),
            auto_pay=bool(row["auto_pay"]),
            pay_day=row["pay_day"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteSavingGoalRepository(SavingGoalRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, goal: SavingGoal) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO saving_goals (id, household_id, name, current_amount, initial_amount,
                                          target_amount, color, deleted_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(goal.id),
                    str(goal.household_id),
                    goal.name,
                    str(goal.current_amount),
                    str(goal.initial_amount),
                    _str_or_none(goal.target_amount),
                    goal.color,
                    goal.deleted_at.isoformat() if goal.deleted_at else None,
                    goal.created_at.isoformat(),
                ),
            )

    def get(self, goal_id: UUID) -> SavingGoal | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM saving_goals WHERE id = ?", (str(goal_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_goal(row)

    def list_by_household(
        self, household_id: UUID, include_deleted: bool = False
    ) -> Iterable[SavingGoal]:
        with self._db.transaction() as conn:
            query = "SELECT * FROM saving_goals WHERE household_id = ?"
            if not include_deleted:
                query += " AND deleted_at IS NULL"
            query += " ORDER BY created_at, rowid"
            rows = conn.execute(query, (str(household_id),)).fetchall()
            return [self._row_to_goal(row) for row in rows]

    def update(self, goal: SavingGoal) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE saving_goals SET
                    name = ?,
                    current_amount = ?,
                    target_amount = ?,
                    color = ?,
                    deleted_at = ?
                WHERE id = ?
                """,
                (
                    goal.name,
                    str(goal.current_amount),
                    _str_or_none(goal.target_amount),
                    goal.color,
                    goal.deleted_at.isoformat() if goal.deleted_at else None,
                    str(goal.id),
                ),
            )

    def add_log(self, log: SavingLog) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO saving_logs (id, saving_goal_id, amount, timestamp, description)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(log.id),
                    str(log.saving_goal_id),
                    str(log.amount),
                    log.timestamp.isoformat(),
                    log.description,
                ),
            )

    def list_logs(self, goal_id: UUID) -> Iterable[SavingLog]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM saving_logs
                WHERE saving_goal_id = ?
                ORDER BY timestamp DESC, rowid DESC
                """,
                (str(goal_id),),
            ).fetchall()
            return [
                SavingLog(
                    id=UUID(row["id"]),
                    saving_goal_id=UUID(row["saving_goal_id"]),
                    amount=Decimal(row["amount"]),
                    timestamp=datetime.fromisoformat(row["timestamp"]),
                    description=row["description"],
                )
                for row in rows
            ]

    def _row_to_goal(self, row: sqlite3.Row) -> SavingGoal:
        return SavingGoal(
            id=UUID(row["id"]),
            household_id=UUID(row["household_id"]),
            name=row["name"],
            current_amount=Decimal(row["current_amount"]),
            initial_amount=Decimal(row["initial_amount"]),
            target_amount=_decimal_or_none(row["target_amount"]),
            color=row["color"],
            deleted_at=_datetime_or_none(row["deleted_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteAuditLogRepository(AuditLogRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def append(self, entry: AuditEntry) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO audit_logs (id, action_type, payload, performed_by, timestamp, household_id)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(entry.id),
                    entry.action_type.value,
                    json.dumps(entry.payload.to_dict(), ensure_ascii=False),
                    _str_or_none(entry.performed_by),
                    entry.timestamp.isoformat(),
                    str(entry.household_id),
                ),
            )

    def get(self, entry_id: UUID) -> AuditEntry | None:
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM audit_logs WHERE id = ?", (str(entry_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_entry(row)

    def list_by_household(
        self, household_id: UUID, limit: int | None = None, offset: int = 0
    ) -> Iterable[AuditEntry]:
        with self._db.transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM audit_logs
                WHERE household_id = ?
                ORDER BY timestamp DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (str(household_id), -1 if limit is None else limit, offset),
            ).fetchall()
            return [self._row_to_entry(row) for row in rows]

    def _row_to_entry(self, row: sqlite3.Row) -> AuditEntry:
        action_type = AuditActionType(row["action_type"])
        return AuditEntry(
            id=UUID(row["id"]),
            action_type=action_type,
            payload=payload_from_dict(action_type, json.loads(row["payload"])),
            performed_by=_uuid_or_none(row["performed_by"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            household_id=UUID(row["household_id"]),
        )

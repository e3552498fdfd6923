"""Transaction ledger: dated income/expense records scoped by household membership."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    CreateTransactionPayload,
    DeleteTransactionPayload,
)
from household_budget.domain.transactions import Transaction
from household_budget.domain.value_objects import TransactionType
from household_budget.exceptions import (
    InvalidAmountError,
    TransactionNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteTransactionRepository,
    SQLiteUserRepository,
)
from household_budget.services.audit import AuditService

logger = get_logger(__name__)


def parse_positive_amount(amount: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise InvalidAmountError(str(amount), "not a number") from e
    if not value.is_finite():
        raise InvalidAmountError(str(amount), "not a finite number")
    if value <= 0:
        raise InvalidAmountError(str(amount), "must be positive")
    return value


class TransactionLedgerService:
    def __init__(self, database: SQLiteDatabase, audit_service: AuditService) -> None:
        self._db = database
        self._users = SQLiteUserRepository(database)
        self._households = SQLiteHouseholdRepository(database)
        self._transactions = SQLiteTransactionRepository(database)
        self._audit = audit_service

    def get_transactions(
        self,
        household_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        """Live transactions created by the household's current members.

        Membership is resolved on every call, so transactions of a removed
        member drop out of view while pending members' transactions stay in.
        """
        household = self._households.get(household_id)
        if household is None:
            return []
        return list(
            self._transactions.list_by_creators(
                household.member_ids, start_date=start_date, end_date=end_date
            )
        )

    def get_transaction(self, transaction_id: UUID) -> Transaction:
        txn = self._transactions.get(transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        return txn

    def add_transaction(
        self,
        type: TransactionType | str,
        amount: Decimal | int | float | str,
        description: str,
        category: str,
        date: date,
        created_by: UUID,
        is_recurring_instance: bool = False,
        recurring_item_id: UUID | None = None,
    ) -> Transaction:
        txn_type = TransactionType(type)
        value = parse_positive_amount(amount)
        if recurring_item_id is not None and not is_recurring_instance:
            raise ValidationError(
                "A transaction linked to a recurring item must be a recurring instance",
                context={"recurring_item_id": str(recurring_item_id)},
            )

        txn = Transaction(
            type=txn_type,
            amount=value,
            description=description.strip(),
            category=category,
            date=date,
            created_by=created_by,
            is_recurring_instance=is_recurring_instance,
            recurring_item_id=recurring_item_id,
        )

        with self._db.transaction():
            self._transactions.add(txn)

            # The audit entry follows the creator's household, not a caller-supplied one.
            creator = self._users.get(created_by)
            household_id = creator.household_id if creator else None
            if household_id is None:
                logger.warning(
                    "transaction_without_household",
                    transaction_id=str(txn.id),
                    created_by=str(created_by),
                )
            else:
                self._audit.log_action(
                    AuditActionType.CREATE_TRANSACTION,
                    CreateTransactionPayload(
                        amount=str(txn.amount),
                        desc=txn.description,
                        type=txn.type.value,
                        is_recurring_instance=txn.is_recurring_instance,
                        recurring_item_id=str(recurring_item_id)
                        if recurring_item_id
                        else None,
                    ),
                    created_by,
                    household_id,
                )

        logger.info(
            "transaction_created",
            transaction_id=str(txn.id),
            type=txn.type.value,
            amount=str(txn.amount),
        )
        return txn

    def delete_transaction(
        self, transaction_id: UUID, actor_id: UUID, household_id: UUID
    ) -> Transaction:
        """Soft-delete; the audit entry keeps the complete pre-delete record."""
        with self._db.transaction():
            txn = self.get_transaction(transaction_id)
            if txn.is_deleted:
                logger.info(
                    "transaction_already_deleted", transaction_id=str(transaction_id)
                )
                return txn

            snapshot = txn.to_snapshot()
            txn.soft_delete()
            self._transactions.mark_deleted(txn)
            self._audit.log_action(
                AuditActionType.DELETE_TRANSACTION,
                DeleteTransactionPayload(transaction=snapshot),
                actor_id,
                household_id,
            )

        logger.info("transaction_deleted", transaction_id=str(transaction_id))
        return txn

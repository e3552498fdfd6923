"""Auto-payment scheduler.

Scans a household's active auto-pay items and materializes at most one
transaction per item per calendar month, once the item's pay day has
arrived. Missed months are never back-filled.
"""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import date
from uuid import UUID

from household_budget.domain.transactions import Transaction
from household_budget.domain.value_objects import Frequency
from household_budget.exceptions import HouseholdNotFoundError, MemberNotFoundError
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
)
from household_budget.services.recurring import RecurringItemService
from household_budget.services.transactions import TransactionLedgerService

logger = get_logger(__name__)


def month_window(day: date) -> tuple[date, date]:
    """First and last day of the calendar month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


class AutoPaymentScheduler:
    def __init__(
        self,
        database: SQLiteDatabase,
        recurring_service: RecurringItemService,
        ledger_service: TransactionLedgerService,
        clock: Callable[[], date] = date.today,
        enabled: bool = True,
    ) -> None:
        self._db = database
        self._households = SQLiteHouseholdRepository(database)
        self._recurring = recurring_service
        self._ledger = ledger_service
        self._clock = clock
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def process_auto_payments(
        self, household_id: UUID, user_id: UUID, today: date | None = None
    ) -> list[Transaction]:
        """Create this month's due auto-payments for the household.

        The invoking user, who must be a member of the household, is recorded
        as the creator of every generated transaction. Running twice in the
        same month creates nothing new.
        """
        if not self._enabled:
            logger.debug("autopay_disabled", household_id=str(household_id))
            return []

        today = today or self._clock()
        start, end = month_window(today)
        created: list[Transaction] = []

        with self._db.transaction():
            # The paid-this-month check only sees transactions of current
            # members, so the creator has to be one.
            household = self._households.get(household_id)
            if household is None:
                raise HouseholdNotFoundError(household_id)
            if not household.is_member(user_id):
                raise MemberNotFoundError(household_id, user_id)

            items = self._recurring.get_auto_pay_items(household_id)
            if not items:
                return created

            paid_item_ids = {
                txn.recurring_item_id
                for txn in self._ledger.get_transactions(
                    household_id, start_date=start, end_date=end
                )
                if txn.recurring_item_id is not None
            }

            for item in items:
                if item.id in paid_item_ids:
                    continue
                if today.day < item.effective_pay_day(today.year, today.month):
                    continue
                if item.frequency is not Frequency.MONTHLY:
                    logger.debug(
                        "autopay_frequency_treated_as_monthly",
                        item_id=str(item.id),
                        frequency=item.frequency.value,
                    )

                txn = self._ledger.add_transaction(
                    type=item.type,
                    amount=item.amount,
                    description=item.name,
                    category=item.category,
                    date=item.due_date(today.year, today.month),
                    created_by=user_id,
                    is_recurring_instance=True,
                    recurring_item_id=item.id,
                )
                created.append(txn)

        if created:
            logger.info(
                "autopay_processed",
                household_id=str(household_id),
                created=len(created),
                month=start.strftime("%Y-%m"),
            )
        return created

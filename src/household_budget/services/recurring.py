from __future__ import annotations

from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    DeleteRecurringPayload,
    RecurringItemPayload,
    UpdateRecurringPayload,
)
from household_budget.domain.recurring import RecurringItem
from household_budget.exceptions import (
    HouseholdNotFoundError,
    InvalidPayDayError,
    RecurringItemNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteRecurringItemRepository,
)
from household_budget.services.audit import AuditService
from household_budget.services.transactions import parse_positive_amount

logger = get_logger(__name__)


def validate_recurring_item(item: RecurringItem) -> None:
    if not item.name.strip():
        raise ValidationError("Recurring item name is required")
    item.amount = parse_positive_amount(item.amount)
    if item.auto_pay:
        if item.pay_day is not None and not 1 <= item.pay_day <= 31:
            raise InvalidPayDayError(item.pay_day)
    else:
        item.pay_day = None


class RecurringItemService:
    """Registry of planned monthly income and expenses."""

    def __init__(self, database: SQLiteDatabase, audit_service: AuditService) -> None:
        self._db = database
        self._households = SQLiteHouseholdRepository(database)
        self._items = SQLiteRecurringItemRepository(database)
        self._audit = audit_service

    def get_recurring_items(self, household_id: UUID) -> list[RecurringItem]:
        """Active items, oldest first."""
        return list(self._items.list_by_household(household_id))

    def get_recurring_item(self, item_id: UUID) -> RecurringItem:
        item = self._items.get(item_id)
        if item is None:
            raise RecurringItemNotFoundError(item_id)
        return item

    def get_auto_pay_items(self, household_id: UUID) -> list[RecurringItem]:
        return [item for item in self.get_recurring_items(household_id) if item.auto_pay]

    def add_recurring_item(
        self, item: RecurringItem, actor_id: UUID | None = None
    ) -> RecurringItem:
        validate_recurring_item(item)

        with self._db.transaction():
            if self._households.get(item.household_id) is None:
                raise HouseholdNotFoundError(item.household_id)
            self._items.add(item)
            self._audit.log_action(
                AuditActionType.CREATE_RECURRING,
                RecurringItemPayload(name=item.name, amount=str(item.amount)),
                actor_id,
                item.household_id,
            )

        logger.info(
            "recurring_item_created",
            item_id=str(item.id),
            household_id=str(item.household_id),
            auto_pay=item.auto_pay,
        )
        return item

    def update_recurring_item(
        self, item: RecurringItem, actor_id: UUID | None = None
    ) -> RecurringItem:
        """Replace the stored item with the given one, matched by id."""
        validate_recurring_item(item)

        with self._db.transaction():
            existing = self.get_recurring_item(item.id)
            # Ownership and creation time belong to the stored record.
            item.household_id = existing.household_id
            item.created_at = existing.created_at
            self._items.update(item)
            self._audit.log_action(
                AuditActionType.UPDATE_RECURRING,
                UpdateRecurringPayload(name=item.name, amount=str(item.amount)),
                actor_id,
                item.household_id,
            )

        logger.info("recurring_item_updated", item_id=str(item.id))
        return item

    def delete_recurring_item(
        self, item_id: UUID, actor_id: UUID | None = None
    ) -> RecurringItem:
        with self._db.transaction():
            item = self.get_recurring_item(item_id)
            item.deactivate()
            self._items.update(item)
            self._audit.log_action(
                AuditActionType.DELETE_RECURRING,
                DeleteRecurringPayload(name=item.name),
                actor_id,
                item.household_id,
            )

        logger.info("recurring_item_deactivated", item_id=str(item_id))
        return item

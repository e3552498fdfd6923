"""Dependency injection container for the household budget ledger.

Services are created lazily on first access and share one database handle,
so every service participates in the same commit units.

Usage:
    from household_budget.container import get_container

    container = get_container()
    ledger = container.ledger_service
"""

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from household_budget.config import Settings, get_settings
from household_budget.logging_config import get_logger

if TYPE_CHECKING:
    from household_budget.repositories.sqlite import SQLiteDatabase
    from household_budget.services.audit import AuditService
    from household_budget.services.autopay import AutoPaymentScheduler
    from household_budget.services.households import HouseholdService
    from household_budget.services.identity import IdentityService
    from household_budget.services.invitations import InvitationService
    from household_budget.services.recurring import RecurringItemService
    from household_budget.services.savings import SavingsService
    from household_budget.services.transactions import TransactionLedgerService

logger = get_logger(__name__)


class Container:
    """Lazy access to the database and every application service.

    For tests, build one directly with in-memory settings:

        container = Container(settings=Settings(sqlite_path=":memory:"))
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        logger.debug(
            "container_created",
            environment=self._settings.environment.value,
            sqlite_path=str(self._settings.sqlite_path),
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def database(self) -> "SQLiteDatabase":
        """The SQLite database, created and initialized on first access."""
        from household_budget.repositories.sqlite import SQLiteDatabase

        db_path = str(self._settings.sqlite_path)
        logger.info("initializing_sqlite_database", path=db_path)

        # API handlers run on worker threads; the database lock serializes access.
        db = SQLiteDatabase(db_path, check_same_thread=False)
        db.initialize()
        return db

    @cached_property
    def audit_service(self) -> "AuditService":
        from household_budget.services.audit import AuditService

        return AuditService(self.database)

    @cached_property
    def identity_service(self) -> "IdentityService":
        from household_budget.services.identity import IdentityService

        return IdentityService(self.database, self.audit_service)

    @cached_property
    def household_service(self) -> "HouseholdService":
        from household_budget.services.households import HouseholdService

        return HouseholdService(
            self.database,
            self.audit_service,
            default_currency=self._settings.default_currency,
        )

    @cached_property
    def invitation_service(self) -> "InvitationService":
        from household_budget.services.invitations import InvitationService

        return InvitationService(self.database, self.audit_service)

    @cached_property
    def ledger_service(self) -> "TransactionLedgerService":
        from household_budget.services.transactions import TransactionLedgerService

        return TransactionLedgerService(self.database, self.audit_service)

    @cached_property
    def recurring_service(self) -> "RecurringItemService":
        from household_budget.services.recurring import RecurringItemService

        return RecurringItemService(self.database, self.audit_service)

    @cached_property
    def autopay_scheduler(self) -> "AutoPaymentScheduler":
        from household_budget.services.autopay import AutoPaymentScheduler

        return AutoPaymentScheduler(
            self.database,
            self.recurring_service,
            self.ledger_service,
            enabled=self._settings.enable_auto_payments,
        )

    @cached_property
    def savings_service(self) -> "SavingsService":
        from household_budget.services.savings import SavingsService

        return SavingsService(self.database, self.audit_service)

    def close(self) -> None:
        """Close the database if it was ever opened."""
        if "database" in self.__dict__:
            logger.info("closing_database_connection")
            self.database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_container: Container | None = None


@lru_cache
def get_container() -> Container:
    """Get the global container singleton."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Drop the global container. Used by tests."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
    get_container.cache_clear()


# FastAPI dependency
def get_database() -> "SQLiteDatabase":
    return get_container().database

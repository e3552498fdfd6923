"""Command-line interface for the household budget ledger."""

import argparse
import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from household_budget import __version__
from household_budget.config import Settings
from household_budget.container import Container
from household_budget.domain.recurring import RecurringItem
from household_budget.domain.value_objects import TransactionType
from household_budget.exceptions import HouseholdBudgetError
from household_budget.logging_config import LogContext
from household_budget.repositories.sqlite import SQLiteDatabase

DEMO_EMAIL = "joci@demo.hu"
DEMO_PASSWORD = "123"


def get_default_db_path() -> Path:
    """Get the default database path in user's home directory."""
    return Path.home() / ".household_budget" / "budget.db"


def _db_path(args: argparse.Namespace) -> Path:
    return Path(args.database) if args.database else get_default_db_path()


def create_container(db_path: Path | None = None) -> Container:
    """Create a service container bound to the given database file."""
    if db_path is None:
        db_path = get_default_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    return Container(settings=Settings(sqlite_path=db_path))


def _parse_uuid(value: str, label: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        print(f"Error: Invalid {label}: {value}")
        return None


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = _db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = SQLiteDatabase(str(db_path))
    db.initialize()
    db.close()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status."""
    db_path = _db_path(args)

    if not db_path.exists():
        print(f"No database found at {db_path}")
        print("Run 'household-budget init' to create a new database")
        return 1

    with create_container(db_path) as container:
        users = container.identity_service.list_users()
        households = container.household_service.list_households()

        print(f"Database: {db_path}")
        print(f"Users: {len(users)}")
        print(f"Households: {len(households)}")

        for household in households:
            transactions = container.ledger_service.get_transactions(household.id)
            pending = sum(1 for m in household.members if not m.is_approved)
            owner = "no owner" if household.is_ownerless else f"owner {household.owner_id}"
            print(
                f"  - {household.name} [{household.invite_code}] {household.id}: "
                f"{len(household.members)} members ({pending} pending), "
                f"{len(transactions)} transactions, {owner}"
            )

    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Household Budget v{__version__}")
    return 0


def cmd_seed_demo(args: argparse.Namespace) -> int:
    """Create the demo household with sample transactions, bills and savings."""
    db_path = _db_path(args)
    today = date.today()

    with create_container(db_path) as container:
        try:
            with container.database.transaction():
                user = container.identity_service.register(
                    DEMO_EMAIL, DEMO_PASSWORD, "Joci"
                )
                household = container.household_service.create_household(
                    "Otthon", user.id
                )

                ledger = container.ledger_service
                ledger.add_transaction(
                    TransactionType.EXPENSE, "25000", "Nagybevásárlás",
                    "Élelmiszer", today, user.id,
                )
                ledger.add_transaction(
                    TransactionType.INCOME, "450000", "Fizetés",
                    "Fizetés", today, user.id, is_recurring_instance=True,
                )
                ledger.add_transaction(
                    TransactionType.EXPENSE, "12000", "Netflix & Spotify",
                    "Szórakozás", today, user.id, is_recurring_instance=True,
                )

                recurring = container.recurring_service
                recurring.add_recurring_item(
                    RecurringItem(
                        household_id=household.id,
                        type=TransactionType.EXPENSE,
                        name="Internet + TV",
                        amount=Decimal("8500"),
                        category="Szórakozás",
                        auto_pay=True,
                        pay_day=10,
                    ),
                    user.id,
                )
                recurring.add_recurring_item(
                    RecurringItem(
                        household_id=household.id,
                        type=TransactionType.EXPENSE,
                        name="Lakbér",
                        amount=Decimal("150000"),
                        category="Lakhatás",
                    ),
                    user.id,
                )

                savings = container.savings_service
                savings.add_saving_goal(
                    household.id, "Vésztartalék", "150000", "500000",
                    color="#A0D468", actor_id=user.id,
                )
                savings.add_saving_goal(
                    household.id, "Nyaralás", "50000", "300000",
                    color="#4FC1E9", actor_id=user.id,
                )
        except HouseholdBudgetError as e:
            print(f"Error: {e.message}")
            return 1

    print(f"Demo household created: {household.name} ({household.id})")
    print(f"  Invite code: {household.invite_code}")
    print(f"  Login: {DEMO_EMAIL} / {DEMO_PASSWORD}")
    return 0


def cmd_autopay(args: argparse.Namespace) -> int:
    """Process this month's due auto-payments for a household."""
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        return 1

    household_id = _parse_uuid(args.household_id, "household ID")
    user_id = _parse_uuid(args.user_id, "user ID")
    if household_id is None or user_id is None:
        return 1

    try:
        today = date.fromisoformat(args.date) if args.date else None
    except ValueError:
        print(f"Error: Invalid date: {args.date}")
        return 1

    with create_container(db_path) as container:
        with LogContext(household_id=str(household_id), user_id=str(user_id)):
            try:
                created = container.autopay_scheduler.process_auto_payments(
                    household_id, user_id, today
                )
            except HouseholdBudgetError as e:
                print(f"Error: {e.message}")
                return 1

    if not created:
        print("No auto-payments due")
        return 0

    print(f"Created {len(created)} auto-payment(s):")
    for txn in created:
        print(f"  {txn.date.isoformat()}  {txn.type.value:<7} {txn.amount:>12}  {txn.description}")
    return 0


def cmd_transactions(args: argparse.Namespace) -> int:
    """List a household's live transactions."""
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        return 1

    household_id = _parse_uuid(args.household_id, "household ID")
    if household_id is None:
        return 1

    with create_container(db_path) as container:
        transactions = container.ledger_service.get_transactions(household_id)

    if not transactions:
        print("No transactions found")
        return 0

    income = sum((t.amount for t in transactions if t.type is TransactionType.INCOME), Decimal("0"))
    expense = sum((t.amount for t in transactions if t.type is TransactionType.EXPENSE), Decimal("0"))

    print(f"{'Date':<12} {'Type':<8} {'Amount':>12}  {'Category':<16} Description")
    print("-" * 72)
    for txn in transactions:
        marker = "*" if txn.is_recurring_instance else " "
        print(
            f"{txn.date.isoformat():<12} {txn.type.value:<8} {txn.amount:>12}{marker} "
            f"{txn.category:<16} {txn.description}"
        )
    print("-" * 72)
    balance = sum((t.signed_amount for t in transactions), Decimal("0"))
    print(f"Income: {income}  Expense: {expense}  Balance: {balance}")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    """Show a household's audit trail, newest first."""
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        return 1

    household_id = _parse_uuid(args.household_id, "household ID")
    if household_id is None:
        return 1

    with create_container(db_path) as container:
        audit = container.audit_service
        if args.summary:
            summary = audit.get_summary(household_id)
            print(f"Total entries: {summary.total_entries}")
            for action, count in sorted(
                summary.entries_by_action.items(), key=lambda item: item[0].value
            ):
                print(f"  {action.value:<24} {count}")
            return 0

        entries = audit.get_audit_logs(household_id, limit=args.limit)

    if not entries:
        print("No audit entries found")
        return 0

    for entry in entries:
        actor = entry.performed_by or "-"
        print(f"{entry.timestamp.isoformat()}  {entry.action_type.value:<24} {actor}")
        print(f"    {entry.snapshot}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the REST API with uvicorn."""
    import uvicorn

    if args.database:
        os.environ["HB_SQLITE_PATH"] = str(Path(args.database))

    settings = Settings()
    uvicorn.run(
        "household_budget.api.app:app",
        host=args.host or settings.api_host,
        port=int(args.port) if args.port else settings.api_port,
        reload=args.reload,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="household-budget",
        description="Household Budget - shared household ledger with recurring bills and savings",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show database status")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # seed-demo command
    seed_parser = subparsers.add_parser(
        "seed-demo", help="Create the demo household 'Otthon'"
    )
    seed_parser.set_defaults(func=cmd_seed_demo)

    # autopay command
    autopay_parser = subparsers.add_parser(
        "autopay", help="Create this month's due auto-payments"
    )
    autopay_parser.add_argument("--household-id", required=True, help="Household ID")
    autopay_parser.add_argument(
        "--user-id", required=True, help="User recorded as creator"
    )
    autopay_parser.add_argument(
        "--date", default=None, help="Run as of this date (YYYY-MM-DD)"
    )
    autopay_parser.set_defaults(func=cmd_autopay)

    # transactions command
    transactions_parser = subparsers.add_parser(
        "transactions", help="List a household's transactions"
    )
    transactions_parser.add_argument(
        "--household-id", required=True, help="Household ID"
    )
    transactions_parser.set_defaults(func=cmd_transactions)

    # audit command
    audit_parser = subparsers.add_parser("audit", help="Show the audit trail")
    audit_parser.add_argument("--household-id", required=True, help="Household ID")
    audit_parser.add_argument(
        "--limit", type=int, default=None, help="Maximum number of entries"
    )
    audit_parser.add_argument(
        "--summary", action="store_true", help="Show counts per action instead"
    )
    audit_parser.set_defaults(func=cmd_audit)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", default=None, help="Port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())

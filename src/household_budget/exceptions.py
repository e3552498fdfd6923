"""Domain exception hierarchy for the household budget ledger.

All domain-specific exceptions inherit from HouseholdBudgetError.
This allows catching all application errors with a single base class
while preserving specificity for individual error types.
"""

from typing import Any
from uuid import UUID


class HouseholdBudgetError(Exception):
    """Base exception for all household budget errors.

    Includes optional error_code for API responses and extra context.
    """

    error_code: str = "HB_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class NotFoundError(HouseholdBudgetError):
    """Base exception for lookups of unknown ids."""

    error_code = "NOT_FOUND"
    status_code = 404

    resource: str = "Record"

    def __init__(self, record_id: UUID | str) -> None:
        super().__init__(
            f"{self.resource} not found: {record_id}",
            context={"id": str(record_id)},
        )


# =============================================================================
# Identity Errors
# =============================================================================


class IdentityError(HouseholdBudgetError):
    """Base exception for user and credential errors."""

    error_code = "IDENTITY_ERROR"
    status_code = 400


class DuplicateEmailError(IdentityError):
    """Raised when registering an email that is already taken."""

    error_code = "DUPLICATE_EMAIL"
    status_code = 409

    def __init__(self, email: str) -> None:
        super().__init__(
            f"A user with this email already exists: {email}",
            context={"email": email},
        )


class UserNotFoundError(IdentityError):
    """Raised when a user cannot be found by id or email."""

    error_code = "USER_NOT_FOUND"
    status_code = 404

    def __init__(self, user_ref: UUID | str) -> None:
        super().__init__(
            f"User not found: {user_ref}",
            context={"user": str(user_ref)},
        )


class InvalidCredentialError(IdentityError):
    """Raised when the supplied password does not match."""

    error_code = "INVALID_CREDENTIAL"
    status_code = 401

    def __init__(self, email: str) -> None:
        super().__init__("Invalid password", context={"email": email})


# =============================================================================
# Household Errors
# =============================================================================


class HouseholdError(HouseholdBudgetError):
    """Base exception for household and membership errors."""

    error_code = "HOUSEHOLD_ERROR"
    status_code = 400


class HouseholdNotFoundError(NotFoundError):
    error_code = "HOUSEHOLD_NOT_FOUND"
    resource = "Household"


class MemberNotFoundError(HouseholdError):
    """Raised when a user is not a member of the given household."""

    error_code = "MEMBER_NOT_FOUND"
    status_code = 404

    def __init__(self, household_id: UUID | str, member_id: UUID | str) -> None:
        super().__init__(
            f"User {member_id} is not a member of household {household_id}",
            context={"household_id": str(household_id), "member_id": str(member_id)},
        )


class AlreadyInHouseholdError(HouseholdError):
    """Raised when a user tries to join while still belonging to a household."""

    error_code = "ALREADY_IN_HOUSEHOLD"
    status_code = 409

    def __init__(self, user_id: UUID | str, household_id: UUID | str) -> None:
        super().__init__(
            f"User {user_id} already belongs to household {household_id}",
            context={"user_id": str(user_id), "household_id": str(household_id)},
        )


class InvalidCodeError(HouseholdError):
    """Raised by outer surfaces when a join code matches nothing.

    The service itself reports an unknown code as a ``False`` result.
    """

    error_code = "INVALID_CODE"
    status_code = 404

    def __init__(self, code: str) -> None:
        super().__init__(
            "Invalid or expired invite code", context={"code": code}
        )


class InvitationNotFoundError(NotFoundError):
    error_code = "INVITATION_NOT_FOUND"
    resource = "Invitation"


# =============================================================================
# Ledger Errors
# =============================================================================


class TransactionNotFoundError(NotFoundError):
    error_code = "TRANSACTION_NOT_FOUND"
    resource = "Transaction"


class RecurringItemNotFoundError(NotFoundError):
    error_code = "RECURRING_ITEM_NOT_FOUND"
    resource = "Recurring item"


class SavingGoalNotFoundError(NotFoundError):
    error_code = "SAVING_GOAL_NOT_FOUND"
    resource = "Saving goal"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(HouseholdBudgetError):
    """Base exception for validation errors."""

    error_code = "VALIDATION_ERROR"
    status_code = 422


class InvalidAmountError(ValidationError):
    """Raised when an invalid monetary amount is provided."""

    error_code = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str) -> None:
        super().__init__(
            f"Invalid amount '{amount}': {reason}",
            context={"amount": amount, "reason": reason},
        )


class InvalidPayDayError(ValidationError):
    """Raised when an auto-pay day falls outside 1..31."""

    error_code = "INVALID_PAY_DAY"

    def __init__(self, pay_day: int) -> None:
        super().__init__(
            f"Pay day must be between 1 and 31, got {pay_day}",
            context={"pay_day": pay_day},
        )

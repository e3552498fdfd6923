from enum import Enum


class Currency(str, Enum):
    HUF = "HUF"
    EUR = "EUR"
    USD = "USD"


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class MembershipStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REVOKED = "REVOKED"


class Frequency(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


# Suggestions offered to the user; categories themselves are free-form.
CATEGORIES: tuple[str, ...] = (
    "Élelmiszer",
    "Lakhatás",
    "Szórakozás",
    "Utazás",
    "Egyéb",
    "Fizetés",
    "Megtakarítás",
)


def counts_as_approved(status: MembershipStatus | None) -> bool:
    """Members without a status predate the approval workflow and count as approved."""
    return status is None or status == MembershipStatus.APPROVED

"""Household membership lifecycle: creation, join, approval, removal.

Every write that touches both a user and the household it belongs to runs
through this service inside a single commit unit, which keeps the user's
household link and the household's member list in agreement.
"""

from __future__ import annotations

import secrets
from uuid import UUID

from household_budget.domain.audit import (
    ApproveMemberPayload,
    AuditActionType,
    CreateHouseholdPayload,
    JoinHouseholdPayload,
    RemoveMemberPayload,
)
from household_budget.domain.households import Household, MemberSnapshot
from household_budget.domain.users import User
from household_budget.domain.value_objects import Currency, MembershipStatus
from household_budget.exceptions import (
    AlreadyInHouseholdError,
    HouseholdNotFoundError,
    MemberNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteInvitationRepository,
    SQLiteUserRepository,
)
from household_budget.services.audit import AuditService

logger = get_logger(__name__)

INVITE_CODE_PREFIX = "HOME-"


class HouseholdService:
    def __init__(
        self,
        database: SQLiteDatabase,
        audit_service: AuditService,
        default_currency: Currency = Currency.HUF,
    ) -> None:
        self._db = database
        self._users = SQLiteUserRepository(database)
        self._households = SQLiteHouseholdRepository(database)
        self._invitations = SQLiteInvitationRepository(database)
        self._audit = audit_service
        self._default_currency = default_currency

    def _generate_invite_code(self) -> str:
        while True:
            code = f"{INVITE_CODE_PREFIX}{1000 + secrets.randbelow(9000)}"
            if self._households.get_by_invite_code(code) is None:
                return code

    def _require_household(self, household_id: UUID) -> Household:
        household = self._households.get(household_id)
        if household is None:
            raise HouseholdNotFoundError(household_id)
        return household

    def _require_user(self, user_id: UUID) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _require_member(self, household: Household, user_id: UUID) -> MemberSnapshot:
        member = household.get_member(user_id)
        if member is None:
            raise MemberNotFoundError(household.id, user_id)
        return member

    def create_household(
        self, name: str, owner_id: UUID, currency: Currency | None = None
    ) -> Household:
        name = name.strip()
        if not name:
            raise ValidationError("Household name is required")

        with self._db.transaction():
            owner = self._require_user(owner_id)
            if owner.has_household:
                raise AlreadyInHouseholdError(owner.id, owner.household_id)

            household = Household(
                name=name,
                invite_code=self._generate_invite_code(),
                owner_id=owner.id,
                currency=currency or self._default_currency,
            )
            self._households.add(household)

            owner.join(household.id, MembershipStatus.APPROVED)
            self._users.update(owner)
            self._households.add_member(
                household.id, owner.id, MembershipStatus.APPROVED
            )

            self._audit.log_action(
                AuditActionType.CREATE_HOUSEHOLD,
                CreateHouseholdPayload(name=name),
                owner.id,
                household.id,
            )

        logger.info(
            "household_created", household_id=str(household.id), owner_id=str(owner_id)
        )
        return self._require_household(household.id)

    def get_household(self, household_id: UUID) -> Household | None:
        return self._households.get(household_id)

    def list_households(self) -> list[Household]:
        return list(self._households.list_all())

    def join_household(self, code: str, user_id: UUID) -> bool:
        """Join via the household-wide code or a pending personal invitation.

        Returns False, without writing anything, when the code matches neither.
        Joiners always start as PENDING members.
        """
        code = code.strip()
        with self._db.transaction():
            user = self._require_user(user_id)

            household = self._households.get_by_invite_code(code)
            invitation = None
            if household is None:
                invitation = self._invitations.get_pending_by_code(code)
                if invitation is not None:
                    household = self._households.get(invitation.household_id)

            if household is None:
                logger.info("join_rejected_unknown_code", user_id=str(user_id))
                return False

            if user.has_household:
                raise AlreadyInHouseholdError(user.id, user.household_id)

            user.join(household.id, MembershipStatus.PENDING)
            self._users.update(user)
            self._households.add_member(
                household.id, user.id, MembershipStatus.PENDING
            )

            if invitation is not None:
                invitation.accept()
                self._invitations.update(invitation)

            self._audit.log_action(
                AuditActionType.JOIN_HOUSEHOLD,
                JoinHouseholdPayload(
                    code=code,
                    household_id=str(household.id),
                    via_invitation=invitation is not None,
                ),
                user.id,
                household.id,
            )

        logger.info(
            "household_joined",
            household_id=str(household.id),
            user_id=str(user_id),
            via_invitation=invitation is not None,
        )
        return True

    def approve_member(
        self, household_id: UUID, member_id: UUID, actor_id: UUID
    ) -> Household:
        with self._db.transaction():
            household = self._require_household(household_id)
            member = self._require_member(household, member_id)
            if member.membership_status != MembershipStatus.PENDING:
                logger.debug(
                    "member_already_approved",
                    household_id=str(household_id),
                    member_id=str(member_id),
                )
                return household
            user = self._require_user(member_id)

            user.membership_status = MembershipStatus.APPROVED
            self._users.update(user)
            self._households.set_member_status(
                household.id, member_id, MembershipStatus.APPROVED
            )

            if household.is_ownerless:
                self._households.set_owner(household.id, member_id)
                logger.info(
                    "ownerless_household_claimed",
                    household_id=str(household.id),
                    owner_id=str(member_id),
                )

            self._audit.log_action(
                AuditActionType.APPROVE_MEMBER,
                ApproveMemberPayload(
                    member_id=str(member_id), member_name=user.display_name
                ),
                actor_id,
                household.id,
            )

        logger.info(
            "member_approved", household_id=str(household_id), member_id=str(member_id)
        )
        return self._require_household(household_id)

    def remove_member(
        self, household_id: UUID, member_id: UUID, actor_id: UUID
    ) -> Household:
        """Remove a member (rejection, eviction or leaving).

        Removing the owner hands ownership to the first remaining approved
        member in join order; with no candidate the household is left
        without an owner.
        """
        with self._db.transaction():
            household = self._require_household(household_id)
            self._require_member(household, member_id)
            user = self._require_user(member_id)

            new_owner_id = None
            if household.owner_id == member_id:
                new_owner_id = household.next_owner_candidate(member_id)
                self._households.set_owner(household.id, new_owner_id)
                if new_owner_id is None:
                    logger.warning(
                        "household_left_without_owner", household_id=str(household.id)
                    )
                else:
                    logger.info(
                        "household_ownership_transferred",
                        household_id=str(household.id),
                        previous_owner_id=str(member_id),
                        new_owner_id=str(new_owner_id),
                    )

            if user.household_id == household.id:
                user.leave()
                self._users.update(user)
            self._households.remove_member(household.id, member_id)

            self._audit.log_action(
                AuditActionType.REMOVE_MEMBER,
                RemoveMemberPayload(
                    member_id=str(member_id),
                    member_name=user.display_name,
                    new_owner_id=str(new_owner_id) if new_owner_id else None,
                ),
                actor_id,
                household.id,
            )

        logger.info(
            "member_removed", household_id=str(household_id), member_id=str(member_id)
        )
        return self._require_household(household_id)

    def leave_household(self, user_id: UUID) -> Household:
        user = self._require_user(user_id)
        if user.household_id is None:
            raise ValidationError(
                "User does not belong to a household",
                context={"user_id": str(user_id)},
            )
        return self.remove_member(user.household_id, user_id, user_id)

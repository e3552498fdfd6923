from __future__ import annotations

import secrets
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    CreateInvitationPayload,
    RevokeInvitationPayload,
)
from household_budget.domain.invitations import Invitation
from household_budget.exceptions import (
    HouseholdNotFoundError,
    InvitationNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteInvitationRepository,
)
from household_budget.services.audit import AuditService

logger = get_logger(__name__)


class InvitationService:
    """Personal one-time invitation codes for a household."""

    def __init__(self, database: SQLiteDatabase, audit_service: AuditService) -> None:
        self._db = database
        self._households = SQLiteHouseholdRepository(database)
        self._invitations = SQLiteInvitationRepository(database)
        self._audit = audit_service

    def _generate_code(self) -> str:
        # Six digits, never reused: an accepted or revoked code stays dead.
        while True:
            code = str(100000 + secrets.randbelow(900000))
            if not self._invitations.code_exists(code):
                return code

    def create_invitation(
        self, household_id: UUID, email: str, actor_id: UUID | None = None
    ) -> Invitation:
        email = email.strip()
        if not email:
            raise ValidationError("Email is required")

        with self._db.transaction():
            if self._households.get(household_id) is None:
                raise HouseholdNotFoundError(household_id)

            invitation = Invitation(
                household_id=household_id,
                email=email,
                code=self._generate_code(),
            )
            self._invitations.add(invitation)
            self._audit.log_action(
                AuditActionType.CREATE_INVITATION,
                CreateInvitationPayload(invitation_id=str(invitation.id), email=email),
                actor_id,
                household_id,
            )

        logger.info(
            "invitation_created",
            household_id=str(household_id),
            invitation_id=str(invitation.id),
        )
        return invitation

    def get_invitations(self, household_id: UUID) -> list[Invitation]:
        """Pending invitations only."""
        return list(self._invitations.list_by_household(household_id))

    def get_invitation(self, invitation_id: UUID) -> Invitation | None:
        return self._invitations.get(invitation_id)

    def revoke_invitation(
        self, invitation_id: UUID, actor_id: UUID | None = None
    ) -> bool:
        """Revoke a pending invitation. Returns False if it was no longer pending."""
        with self._db.transaction():
            invitation = self._invitations.get(invitation_id)
            if invitation is None:
                raise InvitationNotFoundError(invitation_id)
            if not invitation.is_pending:
                logger.info(
                    "invitation_revoke_skipped",
                    invitation_id=str(invitation_id),
                    status=invitation.status.value,
                )
                return False

            invitation.revoke()
            self._invitations.update(invitation)
            self._audit.log_action(
                AuditActionType.REVOKE_INVITATION,
                RevokeInvitationPayload(
                    invitation_id=str(invitation.id), email=invitation.email
                ),
                actor_id,
                invitation.household_id,
            )

        logger.info("invitation_revoked", invitation_id=str(invitation_id))
        return True

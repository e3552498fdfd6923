from uuid import uuid4

import pytest

from household_budget.domain.audit import AuditActionType
from household_budget.domain.households import Household
from household_budget.domain.invitations import Invitation, InvitationStateError
from household_budget.domain.users import User
from household_budget.domain.value_objects import InvitationStatus
from household_budget.exceptions import (
    HouseholdNotFoundError,
    InvitationNotFoundError,
    ValidationError,
)
from household_budget.services.audit import AuditService
from household_budget.services.households import HouseholdService
from household_budget.services.identity import IdentityService
from household_budget.services.invitations import InvitationService


class TestInvitation:
    def test_terminal_invitation_cannot_transition(self):
        invitation = Invitation(household_id=uuid4(), email="a@b.hu", code="123456")
        invitation.revoke()

        with pytest.raises(InvitationStateError):
            invitation.accept()


class TestCreateInvitation:
    def test_creates_pending_six_digit_code(
        self, invitation_service: InvitationService, household: Household, owner: User
    ):
        invitation = invitation_service.create_invitation(
            household.id, "anna@example.hu", owner.id
        )

        assert invitation.status == InvitationStatus.PENDING
        assert len(invitation.code) == 6
        assert invitation.code.isdigit()
        assert invitation.code != household.invite_code

    def test_logs_create_invitation(
        self,
        invitation_service: InvitationService,
        audit_service: AuditService,
        household: Household,
        owner: User,
    ):
        invitation = invitation_service.create_invitation(
            household.id, "anna@example.hu", owner.id
        )

        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.CREATE_INVITATION
        assert newest.snapshot == {
            "invitation_id": str(invitation.id),
            "email": "anna@example.hu",
        }

    def test_codes_are_unique_among_pending(
        self, invitation_service: InvitationService, household: Household
    ):
        codes = {
            invitation_service.create_invitation(household.id, f"u{i}@example.hu").code
            for i in range(20)
        }

        assert len(codes) == 20

    def test_accepted_code_is_never_reissued(
        self,
        invitation_service: InvitationService,
        household_service: HouseholdService,
        identity_service: IdentityService,
        household: Household,
        monkeypatch: pytest.MonkeyPatch,
    ):
        draws = iter([123456, 123456, 654321])
        monkeypatch.setattr(
            "household_budget.services.invitations.secrets.randbelow",
            lambda upper: next(draws),
        )
        anna = identity_service.register("anna@example.hu", "secret")
        bela = identity_service.register("bela@example.hu", "secret")

        first = invitation_service.create_invitation(household.id, anna.email)
        assert household_service.join_household(first.code, anna.id) is True
        second = invitation_service.create_invitation(household.id, bela.email)

        assert first.code == "223456"
        assert second.code == "754321"
        assert household_service.join_household(first.code, bela.id) is False

    def test_revoked_code_is_never_reissued(
        self,
        invitation_service: InvitationService,
        household: Household,
        monkeypatch: pytest.MonkeyPatch,
    ):
        draws = iter([111111, 111111, 222222])
        monkeypatch.setattr(
            "household_budget.services.invitations.secrets.randbelow",
            lambda upper: next(draws),
        )

        first = invitation_service.create_invitation(household.id, "a@example.hu")
        invitation_service.revoke_invitation(first.id)
        second = invitation_service.create_invitation(household.id, "b@example.hu")

        assert second.code != first.code

    def test_unknown_household_rejected(self, invitation_service: InvitationService):
        with pytest.raises(HouseholdNotFoundError):
            invitation_service.create_invitation(uuid4(), "anna@example.hu")

    def test_blank_email_rejected(
        self, invitation_service: InvitationService, household: Household
    ):
        with pytest.raises(ValidationError):
            invitation_service.create_invitation(household.id, "  ")


class TestRevokeInvitation:
    def test_revoke_pending_invitation(
        self,
        invitation_service: InvitationService,
        audit_service: AuditService,
        household: Household,
        owner: User,
    ):
        invitation = invitation_service.create_invitation(
            household.id, "anna@example.hu", owner.id
        )

        assert invitation_service.revoke_invitation(invitation.id, owner.id) is True
        assert invitation_service.get_invitations(household.id) == []
        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.REVOKE_INVITATION

    def test_revoke_twice_returns_false_without_audit(
        self,
        invitation_service: InvitationService,
        audit_service: AuditService,
        household: Household,
    ):
        invitation = invitation_service.create_invitation(household.id, "a@example.hu")
        invitation_service.revoke_invitation(invitation.id)
        count = len(audit_service.get_audit_logs(household.id))

        assert invitation_service.revoke_invitation(invitation.id) is False
        assert len(audit_service.get_audit_logs(household.id)) == count

    def test_revoked_code_cannot_join(
        self,
        invitation_service: InvitationService,
        household_service: HouseholdService,
        identity_service: IdentityService,
        household: Household,
    ):
        anna = identity_service.register("anna@example.hu", "secret")
        invitation = invitation_service.create_invitation(household.id, anna.email)
        invitation_service.revoke_invitation(invitation.id)

        assert household_service.join_household(invitation.code, anna.id) is False

    def test_unknown_invitation_raises(self, invitation_service: InvitationService):
        with pytest.raises(InvitationNotFoundError):
            invitation_service.revoke_invitation(uuid4())


class TestGetInvitations:
    def test_lists_only_pending(
        self, invitation_service: InvitationService, household: Household
    ):
        keep = invitation_service.create_invitation(household.id, "keep@example.hu")
        drop = invitation_service.create_invitation(household.id, "drop@example.hu")
        invitation_service.revoke_invitation(drop.id)

        pending = invitation_service.get_invitations(household.id)

        assert [i.id for i in pending] == [keep.id]

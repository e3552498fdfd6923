"""Tests for household creation, joining, approval and removal."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from household_budget.domain.audit import (
    AuditActionType,
    JoinHouseholdPayload,
    RemoveMemberPayload,
)
from household_budget.domain.households import Household
from household_budget.domain.users import User
from household_budget.domain.value_objects import (
    Currency,
    InvitationStatus,
    MembershipStatus,
    TransactionType,
)
from household_budget.exceptions import (
    AlreadyInHouseholdError,
    HouseholdNotFoundError,
    MemberNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from household_budget.services.audit import AuditService
from household_budget.services.households import HouseholdService
from household_budget.services.identity import IdentityService
from household_budget.services.invitations import InvitationService
from household_budget.services.transactions import TransactionLedgerService


@pytest.fixture
def anna(identity_service: IdentityService) -> User:
    return identity_service.register("anna@example.hu", "secret", "Anna")


@pytest.fixture
def bela(identity_service: IdentityService) -> User:
    return identity_service.register("bela@example.hu", "secret", "Béla")


class TestCreateHousehold:
    def test_owner_is_first_approved_member(
        self, household: Household, owner: User
    ):
        assert household.name == "Otthon"
        assert household.owner_id == owner.id
        assert household.currency == Currency.HUF
        assert household.invite_code.startswith("HOME-")
        assert household.member_ids == [owner.id]
        assert household.members[0].membership_status == MembershipStatus.APPROVED

    def test_owner_user_record_is_linked(
        self, identity_service: IdentityService, household: Household, owner: User
    ):
        user = identity_service.get_user(owner.id)

        assert user.household_id == household.id
        assert user.membership_status == MembershipStatus.APPROVED

    def test_logs_create_household(
        self, audit_service: AuditService, household: Household, owner: User
    ):
        entries = audit_service.get_audit_logs(household.id)

        assert len(entries) == 1
        assert entries[0].action_type == AuditActionType.CREATE_HOUSEHOLD
        assert entries[0].performed_by == owner.id
        assert entries[0].snapshot == {"name": "Otthon"}

    def test_custom_currency(self, household_service: HouseholdService, anna: User):
        household = household_service.create_household("Lakás", anna.id, Currency.EUR)

        assert household.currency == Currency.EUR

    def test_blank_name_rejected(self, household_service: HouseholdService, anna: User):
        with pytest.raises(ValidationError):
            household_service.create_household("   ", anna.id)

    def test_unknown_owner_rejected(self, household_service: HouseholdService):
        with pytest.raises(UserNotFoundError):
            household_service.create_household("Otthon", uuid4())

    def test_owner_already_in_household_rejected(
        self, household_service: HouseholdService, household: Household, owner: User
    ):
        with pytest.raises(AlreadyInHouseholdError):
            household_service.create_household("Second", owner.id)

        assert len(household_service.list_households()) == 1


class TestJoinHousehold:
    def test_join_with_household_code_is_pending(
        self,
        household_service: HouseholdService,
        identity_service: IdentityService,
        household: Household,
        anna: User,
    ):
        assert household_service.join_household(household.invite_code, anna.id) is True

        refreshed = household_service.get_household(household.id)
        assert refreshed is not None
        member = refreshed.get_member(anna.id)
        assert member is not None
        assert member.membership_status == MembershipStatus.PENDING
        user = identity_service.get_user(anna.id)
        assert user.household_id == household.id
        assert user.membership_status == MembershipStatus.PENDING

    def test_unknown_code_returns_false_without_writes(
        self,
        household_service: HouseholdService,
        audit_service: AuditService,
        household: Household,
        anna: User,
    ):
        assert household_service.join_household("HOME-0000x", anna.id) is False

        refreshed = household_service.get_household(household.id)
        assert refreshed is not None
        assert not refreshed.is_member(anna.id)
        assert len(audit_service.get_audit_logs(household.id)) == 1

    def test_join_with_invitation_code_consumes_invitation(
        self,
        household_service: HouseholdService,
        invitation_service: InvitationService,
        audit_service: AuditService,
        household: Household,
        owner: User,
        anna: User,
    ):
        invitation = invitation_service.create_invitation(
            household.id, anna.email, owner.id
        )

        assert household_service.join_household(invitation.code, anna.id) is True

        stored = invitation_service.get_invitation(invitation.id)
        assert stored is not None
        assert stored.status == InvitationStatus.ACCEPTED
        assert invitation_service.get_invitations(household.id) == []

        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.JOIN_HOUSEHOLD
        assert isinstance(newest.payload, JoinHouseholdPayload)
        assert newest.payload.via_invitation is True

    def test_accepted_invitation_code_cannot_be_reused(
        self,
        household_service: HouseholdService,
        invitation_service: InvitationService,
        household: Household,
        anna: User,
        bela: User,
    ):
        invitation = invitation_service.create_invitation(household.id, anna.email)
        household_service.join_household(invitation.code, anna.id)

        assert household_service.join_household(invitation.code, bela.id) is False

    def test_join_while_in_household_rejected(
        self,
        household_service: HouseholdService,
        household: Household,
        anna: User,
    ):
        other = household_service.create_household("Nyaraló", anna.id)

        with pytest.raises(AlreadyInHouseholdError):
            household_service.join_household(household.invite_code, anna.id)

        refreshed = household_service.get_household(other.id)
        assert refreshed is not None
        assert refreshed.member_ids == [anna.id]


class TestApproveMember:
    def test_scenario_pending_members_and_partial_approval(
        self,
        household_service: HouseholdService,
        ledger_service: TransactionLedgerService,
        household: Household,
        owner: User,
        anna: User,
        bela: User,
    ):
        household_service.join_household(household.invite_code, anna.id)
        household_service.join_household(household.invite_code, bela.id)

        refreshed = household_service.approve_member(household.id, anna.id, owner.id)

        statuses = {m.user_id: m.membership_status for m in refreshed.members}
        assert statuses[anna.id] == MembershipStatus.APPROVED
        assert statuses[bela.id] == MembershipStatus.PENDING

        txn = ledger_service.add_transaction(
            TransactionType.EXPENSE,
            Decimal("3200"),
            "Pékség",
            "Élelmiszer",
            date(2025, 6, 3),
            bela.id,
        )
        visible = ledger_service.get_transactions(household.id)
        assert txn.id in [t.id for t in visible]

    def test_approve_updates_user_record(
        self,
        household_service: HouseholdService,
        identity_service: IdentityService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)
        household_service.approve_member(household.id, anna.id, owner.id)

        assert (
            identity_service.get_user(anna.id).membership_status
            == MembershipStatus.APPROVED
        )

    def test_approving_approved_member_changes_nothing(
        self,
        household_service: HouseholdService,
        audit_service: AuditService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)
        household_service.approve_member(household.id, anna.id, owner.id)
        count = len(audit_service.get_audit_logs(household.id))

        refreshed = household_service.approve_member(household.id, anna.id, owner.id)

        assert refreshed.get_member(anna.id).membership_status == (
            MembershipStatus.APPROVED
        )
        assert len(audit_service.get_audit_logs(household.id)) == count

    def test_approving_owner_writes_no_audit_entry(
        self,
        household_service: HouseholdService,
        audit_service: AuditService,
        household: Household,
        owner: User,
    ):
        household_service.approve_member(household.id, owner.id, owner.id)

        actions = [e.action_type for e in audit_service.get_audit_logs(household.id)]
        assert actions == [AuditActionType.CREATE_HOUSEHOLD]

    def test_approve_non_member_raises(
        self,
        household_service: HouseholdService,
        household: Household,
        owner: User,
        anna: User,
    ):
        with pytest.raises(MemberNotFoundError):
            household_service.approve_member(household.id, anna.id, owner.id)

    def test_approve_in_unknown_household_raises(
        self, household_service: HouseholdService, owner: User
    ):
        with pytest.raises(HouseholdNotFoundError):
            household_service.approve_member(uuid4(), owner.id, owner.id)


class TestRemoveMember:
    def test_removing_owner_transfers_ownership(
        self,
        household_service: HouseholdService,
        audit_service: AuditService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)
        household_service.approve_member(household.id, anna.id, owner.id)

        refreshed = household_service.remove_member(household.id, owner.id, owner.id)

        assert refreshed.owner_id == anna.id
        assert refreshed.member_ids == [anna.id]

        newest = audit_service.get_audit_logs(household.id)[0]
        assert newest.action_type == AuditActionType.REMOVE_MEMBER
        assert isinstance(newest.payload, RemoveMemberPayload)
        assert newest.payload.member_id == str(owner.id)
        assert newest.payload.new_owner_id == str(anna.id)

    def test_pending_member_is_not_ownership_candidate(
        self,
        household_service: HouseholdService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)

        refreshed = household_service.remove_member(household.id, owner.id, owner.id)

        assert refreshed.is_ownerless
        assert refreshed.member_ids == [anna.id]

    def test_ownerless_household_claimed_by_next_approval(
        self,
        household_service: HouseholdService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)
        household_service.remove_member(household.id, owner.id, owner.id)

        refreshed = household_service.approve_member(household.id, anna.id, anna.id)

        assert refreshed.owner_id == anna.id

    def test_removed_user_is_detached(
        self,
        household_service: HouseholdService,
        identity_service: IdentityService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)

        household_service.remove_member(household.id, anna.id, owner.id)

        user = identity_service.get_user(anna.id)
        assert user.household_id is None
        assert user.membership_status is None

    def test_remove_non_member_raises(
        self,
        household_service: HouseholdService,
        household: Household,
        owner: User,
        anna: User,
    ):
        with pytest.raises(MemberNotFoundError):
            household_service.remove_member(household.id, anna.id, owner.id)


class TestLeaveHousehold:
    def test_leave_removes_self(
        self,
        household_service: HouseholdService,
        household: Household,
        owner: User,
        anna: User,
    ):
        household_service.join_household(household.invite_code, anna.id)

        refreshed = household_service.leave_household(anna.id)

        assert refreshed.member_ids == [owner.id]

    def test_leave_without_household_rejected(
        self, household_service: HouseholdService, anna: User
    ):
        with pytest.raises(ValidationError):
            household_service.leave_household(anna.id)

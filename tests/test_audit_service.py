"""Tests for the household audit trail."""

from uuid import uuid4

import pytest

from household_budget.domain.audit import (
    PAYLOAD_TYPES,
    AuditActionType,
    AuditEntry,
    CreateHouseholdPayload,
    DeleteRecurringPayload,
    RecurringItemPayload,
    UpdateRecurringPayload,
    payload_from_dict,
)
from household_budget.domain.households import Household
from household_budget.domain.users import User
from household_budget.services.audit import AuditService


class TestAuditPayloads:
    def test_every_action_has_a_payload_type(self):
        assert set(PAYLOAD_TYPES) == set(AuditActionType)

    def test_update_payload_is_distinct_from_create(self):
        assert RecurringItemPayload.action_type == AuditActionType.CREATE_RECURRING
        assert UpdateRecurringPayload.action_type == AuditActionType.UPDATE_RECURRING

    def test_payload_parsed_back_into_its_class(self):
        payload = payload_from_dict(
            AuditActionType.UPDATE_RECURRING, {"name": "Internet", "amount": "9000"}
        )

        assert payload == UpdateRecurringPayload(name="Internet", amount="9000")

    def test_entry_rejects_mismatched_payload(self):
        with pytest.raises(ValueError):
            AuditEntry(
                action_type=AuditActionType.DELETE_SAVING,
                payload=DeleteRecurringPayload(name="Internet"),
                household_id=uuid4(),
            )


class TestAuditService:
    def test_log_action_round_trips_typed_payload(
        self, audit_service: AuditService, household: Household, owner: User
    ):
        entry = audit_service.log_action(
            AuditActionType.DELETE_RECURRING,
            DeleteRecurringPayload(name="Internet"),
            owner.id,
            household.id,
        )

        stored = audit_service.get_entry(entry.id)
        assert stored is not None
        assert stored.payload == DeleteRecurringPayload(name="Internet")
        assert stored.performed_by == owner.id
        assert stored.timestamp == entry.timestamp

    def test_newest_first_with_non_increasing_timestamps(
        self, audit_service: AuditService, household: Household, owner: User
    ):
        for name in ["a", "b", "c"]:
            audit_service.log_action(
                AuditActionType.DELETE_RECURRING,
                DeleteRecurringPayload(name=name),
                owner.id,
                household.id,
            )

        entries = audit_service.get_audit_logs(household.id)

        assert [e.snapshot.get("name") for e in entries[:3]] == ["c", "b", "a"]
        timestamps = [e.timestamp for e in entries]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_scoped_to_household(
        self, audit_service: AuditService, household: Household
    ):
        other = uuid4()
        audit_service.log_action(
            AuditActionType.CREATE_HOUSEHOLD,
            CreateHouseholdPayload(name="Másik"),
            None,
            other,
        )

        assert [e.household_id for e in audit_service.get_audit_logs(other)] == [other]
        assert all(
            e.household_id == household.id
            for e in audit_service.get_audit_logs(household.id)
        )

    def test_limit_and_offset(
        self, audit_service: AuditService, household: Household, owner: User
    ):
        for name in ["a", "b", "c"]:
            audit_service.log_action(
                AuditActionType.DELETE_RECURRING,
                DeleteRecurringPayload(name=name),
                owner.id,
                household.id,
            )

        page = audit_service.get_audit_logs(household.id, limit=2, offset=1)

        assert [e.snapshot["name"] for e in page] == ["b", "a"]

    def test_summary_counts_per_action(
        self, audit_service: AuditService, household: Household, owner: User
    ):
        audit_service.log_action(
            AuditActionType.DELETE_RECURRING,
            DeleteRecurringPayload(name="x"),
            owner.id,
            household.id,
        )

        summary = audit_service.get_summary(household.id)

        assert summary.total_entries == 2
        assert summary.entries_by_action == {
            AuditActionType.CREATE_HOUSEHOLD: 1,
            AuditActionType.DELETE_RECURRING: 1,
        }
        assert summary.oldest_entry is not None
        assert summary.newest_entry is not None
        assert summary.oldest_entry <= summary.newest_entry

    def test_summary_of_empty_household(self, audit_service: AuditService):
        summary = audit_service.get_summary(uuid4())

        assert summary.total_entries == 0
        assert summary.oldest_entry is None

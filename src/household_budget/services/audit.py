"""Audit trail service: the append-only record of household mutations."""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    AuditEntry,
    AuditLogSummary,
    AuditPayload,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteAuditLogRepository,
    SQLiteDatabase,
)

logger = get_logger(__name__)


class AuditService:
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database
        self._repo = SQLiteAuditLogRepository(database)

    def log_action(
        self,
        action_type: AuditActionType,
        payload: AuditPayload,
        actor_id: UUID | None,
        household_id: UUID,
    ) -> AuditEntry:
        """Append one immutable entry.

        Callers invoke this inside their own commit unit so the entry is
        written together with the change it records, or not at all.
        """
        entry = AuditEntry(
            action_type=action_type,
            payload=payload,
            performed_by=actor_id,
            household_id=household_id,
        )
        self._repo.append(entry)
        logger.debug(
            "audit_entry_appended",
            action_type=action_type.value,
            household_id=str(household_id),
            entry_id=str(entry.id),
        )
        return entry

    def get_entry(self, entry_id: UUID) -> AuditEntry | None:
        return self._repo.get(entry_id)

    def get_audit_logs(
        self, household_id: UUID, limit: int | None = None, offset: int = 0
    ) -> list[AuditEntry]:
        """Entries for the household, newest first."""
        return list(self._repo.list_by_household(household_id, limit, offset))

    def get_summary(self, household_id: UUID) -> AuditLogSummary:
        entries = self.get_audit_logs(household_id)
        counts = Counter(entry.action_type for entry in entries)
        return AuditLogSummary(
            total_entries=len(entries),
            entries_by_action=dict(counts),
            oldest_entry=entries[-1].timestamp if entries else None,
            newest_entry=entries[0].timestamp if entries else None,
        )

"""Identity service: registration, login, session marker and profile updates.

Credential handling is intentionally plain: the stored secret is compared in
constant time but not hashed.
"""

from __future__ import annotations

import secrets
from typing import Any
from uuid import UUID

from household_budget.domain.audit import (
    AuditActionType,
    UpdateUserProfilePayload,
)
from household_budget.domain.users import User, default_display_name
from household_budget.exceptions import (
    DuplicateEmailError,
    InvalidCredentialError,
    UserNotFoundError,
    ValidationError,
)
from household_budget.logging_config import get_logger
from household_budget.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteSessionRepository,
    SQLiteUserRepository,
)
from household_budget.services.audit import AuditService

logger = get_logger(__name__)

PROFILE_FIELDS = frozenset({"display_name", "email", "password"})
REDACTED = "***"


class IdentityService:
    def __init__(self, database: SQLiteDatabase, audit_service: AuditService) -> None:
        self._db = database
        self._users = SQLiteUserRepository(database)
        self._session = SQLiteSessionRepository(database)
        self._audit = audit_service

    def register(self, email: str, password: str, display_name: str = "") -> User:
        email = email.strip()
        if not email:
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")

        with self._db.transaction():
            if self._users.get_by_email(email) is not None:
                raise DuplicateEmailError(email)

            user = User(
                email=email,
                password=password,
                display_name=display_name.strip() or default_display_name(email),
            )
            self._users.add(user)
            self._session.set_current_user_id(user.id)

        logger.info("user_registered", user_id=str(user.id))
        return user

    def login(self, email: str, password: str) -> User:
        with self._db.transaction():
            user = self._users.get_by_email(email.strip())
            if user is None:
                raise UserNotFoundError(email)

            if user.password is None:
                # Accounts created before credentials existed adopt the first password used.
                user.password = password
                self._users.update(user)
                logger.info("legacy_credential_adopted", user_id=str(user.id))
            elif not secrets.compare_digest(
                user.password.encode("utf-8"), password.encode("utf-8")
            ):
                logger.warning("login_rejected", user_id=str(user.id))
                raise InvalidCredentialError(email)

            self._session.set_current_user_id(user.id)

        logger.info("user_logged_in", user_id=str(user.id))
        return user

    def logout(self) -> None:
        self._session.clear()

    def get_current_user(self) -> User | None:
        user_id = self._session.get_current_user_id()
        if user_id is None:
            return None
        return self._users.get(user_id)

    def get_user(self, user_id: UUID) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def list_users(self) -> list[User]:
        return list(self._users.list_all())

    def update_user(self, user_id: UUID, changes: dict[str, Any]) -> User:
        """Merge profile fields into the user.

        Household member views read display fields from the user record, and
        the membership status lives on the membership itself, so an update
        here can never promote or demote a member.
        """
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                context={"fields": sorted(unknown)},
            )

        with self._db.transaction():
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            if "email" in changes:
                email = str(changes["email"]).strip()
                if not email:
                    raise ValidationError("Email is required")
                existing = self._users.get_by_email(email)
                if existing is not None and existing.id != user.id:
                    raise DuplicateEmailError(email)
                user.email = email
            if "display_name" in changes:
                user.display_name = (
                    str(changes["display_name"]).strip()
                    or default_display_name(user.email)
                )
            if "password" in changes:
                if not changes["password"]:
                    raise ValidationError("Password is required")
                user.password = str(changes["password"])

            self._users.update(user)

            if user.has_household:
                audited = {
                    key: REDACTED if key == "password" else value
                    for key, value in changes.items()
                }
                self._audit.log_action(
                    AuditActionType.UPDATE_USER_PROFILE,
                    UpdateUserProfilePayload(changes=audited),
                    user.id,
                    user.household_id,
                )

        logger.info(
            "user_profile_updated", user_id=str(user.id), fields=sorted(changes)
        )
        return user

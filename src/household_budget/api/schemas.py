"""Pydantic v2 schemas for API request/response models."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# Health
class HealthResponse(BaseModel):
    status: str
    version: str


# Identity Schemas
class RegisterRequest(BaseModel):
    """Schema for registering a user."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    display_name: str = ""


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Partial profile update; only fields that are sent are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    display_name: str | None = None
    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: str
    household_id: UUID | None
    membership_status: str | None
    created_at: datetime


# Household Schemas
class HouseholdCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    owner_id: UUID
    currency: str | None = Field(default=None, pattern=r"^(HUF|EUR|USD)$")


class JoinRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(..., min_length=1)
    user_id: UUID


class ActorRequest(BaseModel):
    actor_id: UUID


class MemberResponse(BaseModel):
    user_id: UUID
    email: str
    display_name: str
    membership_status: str | None
    joined_at: datetime


class HouseholdResponse(BaseModel):
    id: UUID
    name: str
    invite_code: str
    owner_id: UUID | None
    currency: str
    members: list[MemberResponse]
    created_at: datetime


# Invitation Schemas
class InvitationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=255)
    actor_id: UUID | None = None


class InvitationResponse(BaseModel):
    id: UUID
    household_id: UUID
    email: str
    code: str
    status: str
    created_at: datetime


class RevokeResponse(BaseModel):
    revoked: bool


# Transaction Schemas
class TransactionCreate(BaseModel):
    """Schema for recording an income or expense."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field(..., pattern=r"^(INCOME|EXPENSE)$")
    amount: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(..., min_length=1)
    date: date
    created_by: UUID


class TransactionResponse(BaseModel):
    id: UUID
    type: str
    amount: str
    description: str
    category: str
    date: date
    created_by: UUID
    is_recurring_instance: bool
    recurring_item_id: UUID | None
    deleted_at: datetime | None
    created_at: datetime


# Recurring Item Schemas
class RecurringItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    household_id: UUID
    type: str = Field(..., pattern=r"^(INCOME|EXPENSE)$")
    name: str = Field(..., min_length=1, max_length=255)
    amount: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    frequency: str = Field(default="MONTHLY", pattern=r"^(MONTHLY|QUARTERLY|YEARLY)$")
    auto_pay: bool = False
    pay_day: int | None = None
    actor_id: UUID | None = None


class RecurringItemUpdate(BaseModel):
    """Full replacement of a recurring item's editable fields."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field(..., pattern=r"^(INCOME|EXPENSE)$")
    name: str = Field(..., min_length=1, max_length=255)
    amount: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    frequency: str = Field(default="MONTHLY", pattern=r"^(MONTHLY|QUARTERLY|YEARLY)$")
    active: bool = True
    auto_pay: bool = False
    pay_day: int | None = None
    actor_id: UUID | None = None


class RecurringItemResponse(BaseModel):
    id: UUID
    household_id: UUID
    type: str
    name: str
    amount: str
    category: str
    frequency: str
    active: bool
    auto_pay: bool
    pay_day: int | None
    created_at: datetime


class AutoPayRequest(BaseModel):
    user_id: UUID
    today: date | None = None


# Savings Schemas
class SavingGoalCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    household_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    initial_amount: str = "0"
    target_amount: str | None = None
    color: str | None = None
    actor_id: UUID | None = None


class BalanceChange(BaseModel):
    """A deposit or withdrawal; the amount is always positive."""

    amount: str = Field(..., min_length=1)
    description: str | None = None
    actor_id: UUID | None = None


class BalanceDelta(BaseModel):
    delta: str = Field(..., min_length=1)
    description: str | None = None
    actor_id: UUID | None = None


class SavingGoalResponse(BaseModel):
    id: UUID
    household_id: UUID
    name: str
    current_amount: str
    initial_amount: str
    target_amount: str | None
    progress_percent: str | None
    color: str | None
    created_at: datetime


class SavingLogResponse(BaseModel):
    id: UUID
    saving_goal_id: UUID
    amount: str
    timestamp: datetime
    description: str | None


# Audit Schemas
class AuditEntryResponse(BaseModel):
    id: UUID
    action_type: str
    payload: dict[str, Any]
    performed_by: UUID | None
    household_id: UUID
    timestamp: datetime


class AuditSummaryResponse(BaseModel):
    total_entries: int
    entries_by_action: dict[str, int]
    oldest_entry: datetime | None
    newest_entry: datetime | None

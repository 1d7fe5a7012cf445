"""Request and response schemas for the HTTP API."""

import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from messmate.models.notification import TargetType
from messmate.models.subscription import PlanType


# Error response model
class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorBody


# Mess
class MessCreate(BaseModel):
    name: str | None = None


class MessRename(BaseModel):
    name: str


class MessResponse(BaseModel):
    id: int
    name: str | None
    manager_id: str
    current_month: str
    status: str
    suspend_reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SuspendRequest(BaseModel):
    reason: str


class SubscriptionRequest(BaseModel):
    plan_type: PlanType
    start_date: datetime.date | None = None


class SubscriptionResponse(BaseModel):
    id: int
    mess_id: int
    plan_type: str
    status: str
    start_date: datetime.date
    end_date: datetime.date

    model_config = ConfigDict(from_attributes=True)


# Members
class MemberCreate(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    room_number: str | None = None
    user_id: str | None = None


class MemberUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    room_number: str | None = None
    user_id: str | None = None


class MemberStatusUpdate(BaseModel):
    is_active: bool


class MemberResponse(BaseModel):
    id: int
    mess_id: int
    name: str
    email: str | None
    phone: str | None
    room_number: str | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# Ledger entries
class MealCreate(BaseModel):
    member_id: int
    date: datetime.date
    breakfast: int = Field(default=0, ge=0)
    lunch: int = Field(default=0, ge=0)
    dinner: int = Field(default=0, ge=0)


class MealResponse(BaseModel):
    id: int
    member_id: int
    date: datetime.date
    breakfast: int
    lunch: int
    dinner: int
    units: int

    model_config = ConfigDict(from_attributes=True)


class BazarCreate(BaseModel):
    date: datetime.date
    cost: Decimal
    person_name: str
    items: str | None = None
    note: str | None = None
    member_id: int | None = None


class BazarResponse(BaseModel):
    id: int
    date: datetime.date
    cost: Decimal
    person_name: str
    member_id: int | None
    items: str | None
    note: str | None

    model_config = ConfigDict(from_attributes=True)


class DepositCreate(BaseModel):
    member_id: int
    date: datetime.date
    amount: Decimal
    note: str | None = None


class DepositResponse(BaseModel):
    id: int
    member_id: int
    date: datetime.date
    amount: Decimal
    note: str | None

    model_config = ConfigDict(from_attributes=True)


class AdditionalCostCreate(BaseModel):
    date: datetime.date
    amount: Decimal
    description: str
    note: str | None = None


class AdditionalCostResponse(BaseModel):
    id: int
    date: datetime.date
    amount: Decimal
    description: str
    note: str | None

    model_config = ConfigDict(from_attributes=True)


# Balances
class MemberBalanceResponse(BaseModel):
    member_id: int
    name: str
    is_active: bool
    total_meals: int
    total_deposits: Decimal
    meal_cost: Decimal
    additional_cost: Decimal
    total_cost: Decimal
    balance: Decimal  # positive = credit, negative = due

    model_config = ConfigDict(from_attributes=True)


class BalanceSummaryResponse(BaseModel):
    month: str
    total_bazar: Decimal
    total_meals: int
    total_deposits: Decimal
    total_additional_cost: Decimal
    meal_rate: Decimal
    additional_cost_per_head: Decimal
    active_member_count: int
    members: list[MemberBalanceResponse]

    model_config = ConfigDict(from_attributes=True)


class MonthsResponse(BaseModel):
    months: list[str]


class ArchiveResponse(BaseModel):
    id: int
    mess_id: int
    month: str
    total_bazar: Decimal
    total_meals: int
    total_additional_cost: Decimal
    total_deposits: Decimal
    meal_rate: Decimal
    members_data: list[dict[str, Any]]
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogResponse(BaseModel):
    id: int
    action: str
    actor: str | None
    changes: dict[str, Any] | None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


# Settlement
class RolloverRequest(BaseModel):
    target_month: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}$")
    mess_ids: list[int] | None = None


# Messaging
class MessageCreate(BaseModel):
    message: str


class NoticeCreate(BaseModel):
    message: str
    member_id: int | None = None


class AdminMessageCreate(BaseModel):
    message: str
    target_type: TargetType = TargetType.GLOBAL
    mess_id: int | None = None


class NotificationResponse(BaseModel):
    id: int
    mess_id: int | None
    sender_type: str
    target_type: str
    to_member_id: int | None
    message: str
    is_read: bool
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

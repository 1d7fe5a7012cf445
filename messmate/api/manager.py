"""Manager API endpoints: roster, ledger entry forms, live balances, notices."""

import logging
import time

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.api.schemas import (
    AdditionalCostCreate,
    AdditionalCostResponse,
    ArchiveResponse,
    BalanceSummaryResponse,
    BazarCreate,
    BazarResponse,
    DepositCreate,
    DepositResponse,
    MealCreate,
    MealResponse,
    MemberBalanceResponse,
    MemberCreate,
    MemberResponse,
    MemberStatusUpdate,
    MemberUpdate,
    MessCreate,
    MessRename,
    MessResponse,
    MonthsResponse,
    NoticeCreate,
    NotificationResponse,
)
from messmate.errors import UnauthorizedError
from messmate.models.monthly_archive import MonthlyArchive
from messmate.models.notification import Notification
from messmate.services import get_db
from messmate.services.auth_service import AuthSession, require_manager
from messmate.services.balance_service import BalanceCalculationService, current_month
from messmate.services.ledger_service import EntryKind, LedgerService
from messmate.services.member_service import MemberService
from messmate.services.message_service import MessageService
from messmate.services.mess_service import MessService
from messmate.services.settlement_service import MessSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/manager", tags=["manager"])


def build_balance_response(month: str, summary: MessSummary) -> BalanceSummaryResponse:
    """Shared by the manager and member balance endpoints."""
    return BalanceSummaryResponse(
        month=month,
        total_bazar=summary.total_bazar,
        total_meals=summary.total_meals,
        total_deposits=summary.total_deposits,
        total_additional_cost=summary.total_additional_cost,
        meal_rate=summary.meal_rate,
        additional_cost_per_head=summary.additional_cost_per_head,
        active_member_count=summary.active_member_count,
        members=[MemberBalanceResponse.model_validate(m) for m in summary.members],
    )


def manager_notification_response(
    notification: Notification, read_ids: set[int]
) -> NotificationResponse:
    """Broadcasts are read per manager; other messages carry their own flag."""
    response = NotificationResponse.model_validate(notification)
    if notification.id in read_ids:
        response.is_read = True
    return response


# Mess
@router.post("/register", response_model=MessResponse, status_code=status.HTTP_201_CREATED)
def register_mess(
    payload: MessCreate,
    x_auth_subject: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> MessResponse:
    """Create the caller's mess (the caller becomes its manager)."""
    if not x_auth_subject or not x_auth_subject.strip():
        raise UnauthorizedError()
    mess = MessService(db).create_mess(payload.name, x_auth_subject.strip())
    return MessResponse.model_validate(mess)


@router.get("/mess", response_model=MessResponse)
def get_mess(
    session: AuthSession = Depends(require_manager), db: Session = Depends(get_db)
) -> MessResponse:
    return MessResponse.model_validate(MessService(db).get_mess(session.mess_id))


@router.patch("/mess", response_model=MessResponse)
def rename_mess(
    payload: MessRename,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> MessResponse:
    return MessResponse.model_validate(MessService(db).rename_mess(session.mess_id, payload.name))


# Members
@router.get("/members", response_model=list[MemberResponse])
def list_members(
    active_only: bool = False,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[MemberResponse]:
    members = MemberService(db).list_members(session.mess_id, active_only=active_only)
    return [MemberResponse.model_validate(m) for m in members]


@router.post("/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def add_member(
    payload: MemberCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> MemberResponse:
    MessService(db).ensure_writable(session.mess_id)
    member = MemberService(db).add_member(session.mess_id, **payload.model_dump())
    return MemberResponse.model_validate(member)


@router.patch("/members/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> MemberResponse:
    MessService(db).ensure_writable(session.mess_id)
    member = MemberService(db).update_member(
        member_id, session.mess_id, **payload.model_dump(exclude_unset=True)
    )
    return MemberResponse.model_validate(member)


@router.patch("/members/{member_id}/status", response_model=MemberResponse)
def set_member_status(
    member_id: int,
    payload: MemberStatusUpdate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> MemberResponse:
    MessService(db).ensure_writable(session.mess_id)
    member = MemberService(db).set_active(member_id, session.mess_id, payload.is_active)
    return MemberResponse.model_validate(member)


# Ledger entries
@router.post("/meals", response_model=MealResponse, status_code=status.HTTP_201_CREATED)
def record_meal(
    payload: MealCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> MealResponse:
    meal = LedgerService(db).record_meal(
        session.mess_id,
        payload.member_id,
        payload.date,
        payload.breakfast,
        payload.lunch,
        payload.dinner,
    )
    return MealResponse.model_validate(meal)


@router.get("/meals", response_model=list[MealResponse])
def list_meals(
    month: str | None = Query(default=None),
    member_id: int | None = Query(default=None),
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[MealResponse]:
    rows = LedgerService(db).list_entries(EntryKind.MEAL, session.mess_id, month, member_id)
    return [MealResponse.model_validate(r) for r in rows]


@router.post("/bazars", response_model=BazarResponse, status_code=status.HTTP_201_CREATED)
def record_bazar(
    payload: BazarCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> BazarResponse:
    bazar = LedgerService(db).record_bazar(
        session.mess_id,
        payload.date,
        payload.cost,
        payload.person_name,
        items=payload.items,
        note=payload.note,
        member_id=payload.member_id,
    )
    return BazarResponse.model_validate(bazar)


@router.get("/bazars", response_model=list[BazarResponse])
def list_bazars(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[BazarResponse]:
    rows = LedgerService(db).list_entries(EntryKind.BAZAR, session.mess_id, month)
    return [BazarResponse.model_validate(r) for r in rows]


@router.post("/deposits", response_model=DepositResponse, status_code=status.HTTP_201_CREATED)
def record_deposit(
    payload: DepositCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> DepositResponse:
    deposit = LedgerService(db).record_deposit(
        session.mess_id, payload.member_id, payload.date, payload.amount, note=payload.note
    )
    return DepositResponse.model_validate(deposit)


@router.get("/deposits", response_model=list[DepositResponse])
def list_deposits(
    month: str | None = Query(default=None),
    member_id: int | None = Query(default=None),
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[DepositResponse]:
    rows = LedgerService(db).list_entries(EntryKind.DEPOSIT, session.mess_id, month, member_id)
    return [DepositResponse.model_validate(r) for r in rows]


@router.post(
    "/additional-costs",
    response_model=AdditionalCostResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_additional_cost(
    payload: AdditionalCostCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> AdditionalCostResponse:
    cost = LedgerService(db).record_additional_cost(
        session.mess_id, payload.date, payload.amount, payload.description, note=payload.note
    )
    return AdditionalCostResponse.model_validate(cost)


@router.get("/additional-costs", response_model=list[AdditionalCostResponse])
def list_additional_costs(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> list[AdditionalCostResponse]:
    rows = LedgerService(db).list_entries(EntryKind.ADDITIONAL_COST, session.mess_id, month)
    return [AdditionalCostResponse.model_validate(r) for r in rows]


@router.delete("/{kind}/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    kind: EntryKind,
    entry_id: int,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> None:
    LedgerService(db).delete_entry(kind, entry_id, session.mess_id)


# Balances
@router.get("/balances", response_model=BalanceSummaryResponse)
def get_balances(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> BalanceSummaryResponse:
    """Live meal-rate and per-member balances for a month (default: current month)."""
    start_time = time.time()
    target_month = month or current_month()
    summary = BalanceCalculationService(db).get_month_summary(session.mess_id, target_month)
    logger.debug(
        "manager.balances: mess_id=%d month=%s duration_ms=%d",
        session.mess_id,
        target_month,
        int((time.time() - start_time) * 1000),
    )
    return build_balance_response(target_month, summary)


@router.get("/months", response_model=MonthsResponse)
def get_months(
    session: AuthSession = Depends(require_manager), db: Session = Depends(get_db)
) -> MonthsResponse:
    return MonthsResponse(months=BalanceCalculationService(db).get_available_months(session.mess_id))


@router.get("/archives", response_model=list[ArchiveResponse])
def list_archives(
    session: AuthSession = Depends(require_manager), db: Session = Depends(get_db)
) -> list[ArchiveResponse]:
    archives = db.scalars(
        select(MonthlyArchive)
        .filter(MonthlyArchive.mess_id == session.mess_id)
        .order_by(MonthlyArchive.month.desc())
    ).all()
    return [ArchiveResponse.model_validate(a) for a in archives]


# Messaging
@router.post("/notices", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def send_notice(
    payload: NoticeCreate,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    MessService(db).ensure_writable(session.mess_id)
    notification = MessageService(db).send_manager_notice(
        session.subject, session.mess_id, payload.message, member_id=payload.member_id
    )
    return NotificationResponse.model_validate(notification)


@router.get("/inbox", response_model=list[NotificationResponse])
def manager_inbox(
    session: AuthSession = Depends(require_manager), db: Session = Depends(get_db)
) -> list[NotificationResponse]:
    service = MessageService(db)
    read_ids = service.manager_read_ids(session.mess_id)
    return [
        manager_notification_response(n, read_ids) for n in service.inbox_for_manager(session.mess_id)
    ]


@router.post("/inbox/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    session: AuthSession = Depends(require_manager),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    service = MessageService(db)
    notification = service.mark_read(notification_id, session.mess_id)
    return manager_notification_response(notification, service.manager_read_ids(session.mess_id))

"""Member portal API endpoints: own balance, own entries, messages to the manager."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from messmate.api.manager import build_balance_response
from messmate.api.schemas import (
    BalanceSummaryResponse,
    DepositResponse,
    MealResponse,
    MemberBalanceResponse,
    MessageCreate,
    NotificationResponse,
)
from messmate.services import get_db
from messmate.services.auth_service import AuthSession, require_member
from messmate.services.balance_service import BalanceCalculationService, current_month
from messmate.services.ledger_service import EntryKind, LedgerService
from messmate.services.message_service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/member", tags=["member"])


@router.get("/balance", response_model=MemberBalanceResponse)
def get_own_balance(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_member),
    db: Session = Depends(get_db),
) -> MemberBalanceResponse:
    """The caller's balance line for a month (default: current month)."""
    line = BalanceCalculationService(db).get_member_balance(
        session.mess_id, session.member_id, month or current_month()
    )
    return MemberBalanceResponse.model_validate(line)


@router.get("/mess-summary", response_model=BalanceSummaryResponse)
def get_mess_summary(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_member),
    db: Session = Depends(get_db),
) -> BalanceSummaryResponse:
    """Mess-wide meal-rate and balances, as shown on the member dashboard."""
    target_month = month or current_month()
    summary = BalanceCalculationService(db).get_month_summary(session.mess_id, target_month)
    return build_balance_response(target_month, summary)


@router.get("/meals", response_model=list[MealResponse])
def get_own_meals(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_member),
    db: Session = Depends(get_db),
) -> list[MealResponse]:
    rows = LedgerService(db).list_entries(
        EntryKind.MEAL, session.mess_id, month, member_id=session.member_id
    )
    return [MealResponse.model_validate(r) for r in rows]


@router.get("/deposits", response_model=list[DepositResponse])
def get_own_deposits(
    month: str | None = Query(default=None),
    session: AuthSession = Depends(require_member),
    db: Session = Depends(get_db),
) -> list[DepositResponse]:
    rows = LedgerService(db).list_entries(
        EntryKind.DEPOSIT, session.mess_id, month, member_id=session.member_id
    )
    return [DepositResponse.model_validate(r) for r in rows]


@router.post("/messages", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def message_manager(
    payload: MessageCreate,
    session: AuthSession = Depends(require_member),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    notification = MessageService(db).send_member_message(
        session.member_id, session.mess_id, payload.message
    )
    return NotificationResponse.model_validate(notification)


@router.get("/inbox", response_model=list[NotificationResponse])
def member_inbox(
    session: AuthSession = Depends(require_member), db: Session = Depends(get_db)
) -> list[NotificationResponse]:
    messages = MessageService(db).inbox_for_member(session.member_id, session.mess_id)
    return [NotificationResponse.model_validate(n) for n in messages]

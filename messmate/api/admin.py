"""Super-admin API endpoints: mess oversight, subscriptions, broadcasts, settlement."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.api.schemas import (
    AdminMessageCreate,
    ArchiveResponse,
    AuditLogResponse,
    MessResponse,
    NotificationResponse,
    RolloverRequest,
    SubscriptionRequest,
    SubscriptionResponse,
    SuspendRequest,
)
from messmate.models.mess import MessStatus
from messmate.models.monthly_archive import MonthlyArchive
from messmate.services import get_db
from messmate.services.audit_service import AuditAction, AuditService
from messmate.services.auth_service import AuthSession, require_admin
from messmate.services.message_service import MessageService
from messmate.services.mess_service import MessService
from messmate.services.rollover_service import MonthlyRolloverService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/messes", response_model=list[MessResponse])
def list_messes(
    status_filter: MessStatus | None = None,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[MessResponse]:
    messes = MessService(db).list_messes(status_filter)
    return [MessResponse.model_validate(m) for m in messes]


@router.post("/messes/{mess_id}/suspend", response_model=MessResponse)
def suspend_mess(
    mess_id: int,
    payload: SuspendRequest,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessResponse:
    mess = MessService(db).suspend_mess(mess_id, payload.reason, actor=session.subject)
    return MessResponse.model_validate(mess)


@router.post("/messes/{mess_id}/unsuspend", response_model=MessResponse)
def unsuspend_mess(
    mess_id: int,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessResponse:
    mess = MessService(db).unsuspend_mess(mess_id, actor=session.subject)
    return MessResponse.model_validate(mess)


@router.post(
    "/messes/{mess_id}/subscription",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def activate_subscription(
    mess_id: int,
    payload: SubscriptionRequest,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SubscriptionResponse:
    subscription = MessService(db).activate_subscription(
        mess_id, payload.plan_type, start_date=payload.start_date, actor=session.subject
    )
    return SubscriptionResponse.model_validate(subscription)


@router.get("/messes/{mess_id}/archives", response_model=list[ArchiveResponse])
def list_archives(
    mess_id: int,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[ArchiveResponse]:
    MessService(db).get_mess(mess_id)
    archives = db.scalars(
        select(MonthlyArchive)
        .filter(MonthlyArchive.mess_id == mess_id)
        .order_by(MonthlyArchive.month.desc())
    ).all()
    return [ArchiveResponse.model_validate(a) for a in archives]


@router.get("/messes/{mess_id}/audit", response_model=list[AuditLogResponse])
def mess_audit_trail(
    mess_id: int,
    action: AuditAction | None = None,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AuditLogResponse]:
    """Lifecycle events of one mess, oldest first."""
    MessService(db).get_mess(mess_id)
    entries = AuditService(db).mess_history(mess_id, action)
    return [AuditLogResponse.model_validate(e) for e in entries]


@router.post("/messages", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def broadcast(
    payload: AdminMessageCreate,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    notification = MessageService(db).send_admin_message(
        session.subject, payload.message, payload.target_type, payload.mess_id
    )
    return NotificationResponse.model_validate(notification)


@router.post("/rollover")
def run_rollover(
    payload: RolloverRequest | None = None,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    """Run the monthly settlement now; returns the per-mess result set.

    Per-mess failures are reported in the results, never as an HTTP error.
    """
    payload = payload or RolloverRequest()
    logger.info(
        "admin.rollover: actor=%s target=%s mess_ids=%s",
        session.subject,
        payload.target_month,
        payload.mess_ids,
    )
    report = MonthlyRolloverService(db).run(
        target_month=payload.target_month, mess_ids=payload.mess_ids
    )
    return report.to_dict()

"""Monthly settlement (rollover) service.

For every mess whose stored ``current_month`` is before the target month:

1. Summarise all working rows (meals, bazars, deposits, additional costs) of the
   mess for the full roster, active and inactive.
2. Write one MonthlyArchive for the closing month and commit.
3. Only after that commit: delete the working rows, advance ``current_month``
   and commit again.

Each mess is processed independently. A failure is rolled back, logged and
reported in the mess's result; it never stops the batch. An archive write that
fails leaves the working rows untouched. If step 3 fails after a successful
archive, the next run finds the existing archive for that month and only
repeats step 3, provided the working rows still match the archived totals.
Rows written after that archive are never cleared; the mess is reported as
an error until the mismatch is resolved. A target month earlier than the
mess's current month is skipped, so a mess never moves back onto a month
that already has an archive.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from messmate.errors import MessMateError, SettlementError
from messmate.models.additional_cost import AdditionalCost
from messmate.models.bazar import Bazar
from messmate.models.deposit import Deposit
from messmate.models.meal import Meal
from messmate.models.member import Member
from messmate.models.mess import Mess
from messmate.models.monthly_archive import MonthlyArchive
from messmate.services.audit_service import AuditAction, AuditService
from messmate.services.balance_service import current_month, month_bounds
from messmate.services.settlement_service import MessSummary, summarize_mess

logger = logging.getLogger(__name__)

# Working tables cleared at rollover, in delete order
WORKING_MODELS = (Meal, Bazar, Deposit, AdditionalCost)


class RolloverStatus(str, Enum):
    """Outcome of a rollover attempt for one mess."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class RolloverResult:
    """Per-mess rollover outcome."""

    mess_id: int
    status: RolloverStatus
    archived_month: str | None = None
    archive_id: int | None = None
    deleted_rows: dict[str, int] = field(default_factory=dict)
    reason: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"mess_id": self.mess_id, "status": self.status.value}
        if self.archived_month:
            data["archived_month"] = self.archived_month
        if self.archive_id is not None:
            data["archive_id"] = self.archive_id
        if self.deleted_rows:
            data["deleted_rows"] = dict(self.deleted_rows)
        if self.reason:
            data["reason"] = self.reason
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class RolloverReport:
    """Result set of one batch run."""

    target_month: str
    results: list[RolloverResult] = field(default_factory=list)

    def _count(self, status: RolloverStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(RolloverStatus.SUCCESS)

    @property
    def skipped(self) -> int:
        return self._count(RolloverStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(RolloverStatus.ERROR)

    def to_dict(self) -> dict:
        return {
            "target_month": self.target_month,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


class MonthlyRolloverService:
    """Close the open accounting period of each mess."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def run(
        self,
        target_month: str | None = None,
        mess_ids: list[int] | None = None,
        today: date | None = None,
    ) -> RolloverReport:
        """Roll every selected mess over to ``target_month``.

        Args:
            target_month: Period to advance to (default: current UTC month)
            mess_ids: Restrict the batch to these messes (default: all)
            today: Override "today" when deriving the default target month

        Returns:
            RolloverReport with one result per mess
        """
        target = target_month or current_month(today)
        month_bounds(target)  # validates the token

        stmt = select(Mess.id).order_by(Mess.id)
        if mess_ids:
            stmt = stmt.filter(Mess.id.in_(mess_ids))
        ids = self.db.scalars(stmt).all()

        report = RolloverReport(target_month=target)
        for mess_id in ids:
            report.results.append(self.rollover_mess(mess_id, target))

        logger.info(
            "rollover.batch: target=%s messes=%d succeeded=%d skipped=%d failed=%d",
            target,
            len(report.results),
            report.succeeded,
            report.skipped,
            report.failed,
        )
        return report

    def rollover_mess(self, mess_id: int, target_month: str) -> RolloverResult:
        """Archive and clear one mess. Never raises for persistence errors."""
        try:
            mess = self.db.get(Mess, mess_id)
            if mess is None:
                raise SettlementError(f"Mess {mess_id} not found")

            if mess.current_month == target_month:
                logger.debug("rollover.skip: mess_id=%d month=%s", mess_id, target_month)
                return RolloverResult(
                    mess_id=mess_id,
                    status=RolloverStatus.SKIPPED,
                    reason="Already on current month",
                )
            if target_month < mess.current_month:
                logger.warning(
                    "rollover.skip: mess_id=%d current=%s target=%s is behind",
                    mess_id,
                    mess.current_month,
                    target_month,
                )
                return RolloverResult(
                    mess_id=mess_id,
                    status=RolloverStatus.SKIPPED,
                    reason="Target month is before current month",
                )

            closing_month = mess.current_month
            summary = self.summarize_working_data(mess_id)
            archive = self._find_archive(mess_id, closing_month)
            if archive is None:
                archive = self._write_archive(mess_id, closing_month, summary)
            else:
                self._check_archive_covers(archive, summary)
                logger.warning(
                    "rollover.resume: mess_id=%d month=%s archive_id=%d already written",
                    mess_id,
                    closing_month,
                    archive.id,
                )

            deleted = self._clear_working_data(mess_id)
            self._advance_period(mess, closing_month, target_month, archive.id)

        except (SQLAlchemyError, MessMateError) as e:
            self.db.rollback()
            message = getattr(e, "message", None) or str(e)
            logger.error("rollover.error: mess_id=%d error=%s", mess_id, message, exc_info=True)
            return RolloverResult(mess_id=mess_id, status=RolloverStatus.ERROR, error=message)

        logger.info(
            "rollover.success: mess_id=%d archived_month=%s archive_id=%d deleted=%s",
            mess_id,
            closing_month,
            archive.id,
            deleted,
        )
        return RolloverResult(
            mess_id=mess_id,
            status=RolloverStatus.SUCCESS,
            archived_month=closing_month,
            archive_id=archive.id,
            deleted_rows=deleted,
        )

    def summarize_working_data(self, mess_id: int) -> MessSummary:
        """Summarise every working row of the mess, for all members."""
        members = self.db.scalars(
            select(Member).filter(Member.mess_id == mess_id).order_by(Member.id)
        ).all()
        meals = self.db.scalars(select(Meal).filter(Meal.mess_id == mess_id)).all()
        bazar_costs = self.db.scalars(select(Bazar.cost).filter(Bazar.mess_id == mess_id)).all()
        deposits = self.db.scalars(select(Deposit).filter(Deposit.mess_id == mess_id)).all()
        additional = self.db.scalars(
            select(AdditionalCost.amount).filter(AdditionalCost.mess_id == mess_id)
        ).all()
        return summarize_mess(members, meals, bazar_costs, deposits, additional)

    def _find_archive(self, mess_id: int, month: str) -> MonthlyArchive | None:
        return self.db.scalars(
            select(MonthlyArchive).filter(
                MonthlyArchive.mess_id == mess_id, MonthlyArchive.month == month
            )
        ).first()

    @staticmethod
    def _check_archive_covers(archive: MonthlyArchive, summary: MessSummary) -> None:
        """Raise if the working rows changed since ``archive`` was written."""
        drift = [
            name
            for name, archived, live in (
                ("total_bazar", archive.total_bazar, summary.total_bazar),
                ("total_meals", archive.total_meals, summary.total_meals),
                ("total_deposits", archive.total_deposits, summary.total_deposits),
                (
                    "total_additional_cost",
                    archive.total_additional_cost,
                    summary.total_additional_cost,
                ),
            )
            if archived != live
        ]
        if drift:
            raise SettlementError(
                f"Archive {archive.id} for {archive.month} does not cover the working data "
                f"({', '.join(drift)} changed); refusing to clear"
            )

    def _write_archive(self, mess_id: int, month: str, summary: MessSummary) -> MonthlyArchive:
        """Insert and commit the archive row; the caller deletes only after this returns."""
        archive = MonthlyArchive(
            mess_id=mess_id,
            month=month,
            total_bazar=summary.total_bazar,
            total_meals=summary.total_meals,
            total_additional_cost=summary.total_additional_cost,
            total_deposits=summary.total_deposits,
            meal_rate=summary.meal_rate,
            members_data=summary.to_archive_payload(),
        )
        self.db.add(archive)
        self.db.commit()
        return archive

    def _clear_working_data(self, mess_id: int) -> dict[str, int]:
        """Delete working rows of the mess (not committed here)."""
        deleted = {}
        for model in WORKING_MODELS:
            result = self.db.execute(delete(model).where(model.mess_id == mess_id))
            deleted[model.__tablename__] = result.rowcount or 0
        return deleted

    def _advance_period(
        self, mess: Mess, closing_month: str, target_month: str, archive_id: int
    ) -> None:
        mess.current_month = target_month
        AuditService(self.db).record_mess_event(
            mess.id,
            AuditAction.ROLLOVER,
            changes={
                "archived_month": closing_month,
                "current_month": target_month,
                "archive_id": archive_id,
            },
        )
        self.db.commit()


__all__ = [
    "MonthlyRolloverService",
    "RolloverReport",
    "RolloverResult",
    "RolloverStatus",
]

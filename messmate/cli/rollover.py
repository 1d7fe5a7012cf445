"""Command-line entry point for the monthly settlement job.

Meant to be run by cron or any scheduler shortly after a month boundary:

    messmate-rollover                   # all messes to the current month
    messmate-rollover --month 2025-11   # explicit target month
    messmate-rollover --mess-id 3 --dry-run

Exit codes: 0 success (including skips), 1 at least one mess failed,
2 invalid arguments.
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from messmate.config import LOG_LEVELS
from messmate.errors import ValidationError
from messmate.services.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Close the open month of every mess")
    parser.add_argument(
        "--month",
        default=None,
        help="Target month YYYY-MM (default: current UTC month)",
    )
    parser.add_argument(
        "--mess-id",
        type=int,
        action="append",
        dest="mess_ids",
        help="Only roll over this mess (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the settlement each mess would archive without writing anything",
    )
    parser.add_argument("--log-file", default="logs/rollover.log", help="Log file path")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    return parser


def _dry_run(db, target_month: str | None, mess_ids: list[int] | None) -> int:
    from sqlalchemy import select

    from messmate.models.mess import Mess
    from messmate.services.balance_service import current_month, month_bounds
    from messmate.services.rollover_service import MonthlyRolloverService

    target = target_month or current_month()
    month_bounds(target)
    service = MonthlyRolloverService(db)

    stmt = select(Mess).order_by(Mess.id)
    if mess_ids:
        stmt = stmt.filter(Mess.id.in_(mess_ids))
    for mess in db.scalars(stmt).all():
        if mess.current_month == target:
            print(f"mess {mess.id}: skip (already on {target})")
            continue
        if target < mess.current_month:
            print(f"mess {mess.id}: skip ({target} is before {mess.current_month})")
            continue
        summary = service.summarize_working_data(mess.id)
        print(
            f"mess {mess.id}: would archive {mess.current_month} "
            f"bazar={summary.total_bazar} meals={summary.total_meals} "
            f"meal_rate={summary.meal_rate:.2f} members={len(summary.members)}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the rollover once and print a summary line per mess."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    from messmate.services import SessionLocal
    from messmate.services.rollover_service import MonthlyRolloverService, RolloverStatus

    db = SessionLocal()
    try:
        if args.dry_run:
            return _dry_run(db, args.month, args.mess_ids)

        report = MonthlyRolloverService(db).run(target_month=args.month, mess_ids=args.mess_ids)
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    finally:
        db.close()

    for result in report.results:
        if result.status == RolloverStatus.SUCCESS:
            print(f"mess {result.mess_id}: archived {result.archived_month}")
        elif result.status == RolloverStatus.SKIPPED:
            print(f"mess {result.mess_id}: skipped ({result.reason})")
        else:
            print(f"mess {result.mess_id}: ERROR {result.error}", file=sys.stderr)

    print(
        f"Rollover to {report.target_month}: {report.succeeded} archived, "
        f"{report.skipped} skipped, {report.failed} failed"
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())

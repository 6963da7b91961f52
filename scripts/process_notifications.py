"""Run the notification processor or the retention purge once from the shell."""

from __future__ import annotations

import argparse
from datetime import timedelta

from petflix.application.use_cases.notifications import (
    build_notification_processor,
    purge_sent_notifications,
)
from petflix.config import get_settings
from petflix.infrastructure.database import SessionLocal, initialize_database
from petflix.utils import now_in_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""

    parser = argparse.ArgumentParser(
        description="Drain the Petflix notification queue or purge old sent rows.",
    )
    parser.add_argument(
        "--tick",
        action="store_true",
        help="Group and dispatch every eligible queued notification once.",
    )
    parser.add_argument(
        "--purge",
        action="store_true",
        help="Delete sent queue rows older than the configured retention.",
    )
    parser.add_argument(
        "--retention-days",
        type=int,
        default=None,
        help="Override NOTIFICATION_RETENTION_DAYS for --purge.",
    )
    args = parser.parse_args()
    if not (args.tick or args.purge):
        parser.error("choose at least one of --tick or --purge")
    return args


def main() -> None:
    args = parse_args()
    settings = get_settings()
    initialize_database()

    if args.tick:
        processor = build_notification_processor(settings, SessionLocal)
        try:
            summary = processor.process_tick()
        finally:
            processor.stop()
        if summary.aborted:
            raise SystemExit("Notification tick aborted; see the log for the storage error.")
        print(
            f"Dispatched {summary.digests} digest(s) from "
            f"{sum(summary.rows_by_type.values())} queued row(s); "
            f"outcomes: {dict(summary.outcomes)}; malformed: {summary.malformed}"
        )

    if args.purge:
        days = args.retention_days or settings.notification_retention_days
        session = SessionLocal()
        try:
            deleted = purge_sent_notifications(
                session, older_than=now_in_app_timezone() - timedelta(days=days)
            )
        finally:
            session.close()
        print(f"Purged {deleted} sent notification(s) older than {days} day(s).")


if __name__ == "__main__":
    main()

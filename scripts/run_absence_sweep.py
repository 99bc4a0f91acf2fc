"""Mark absences after the close cutoff.

Meant for cron, e.g. every weekday at 16:30 school time:

    30 16 * * 1-5  python scripts/run_absence_sweep.py

Re-running for the same day is safe; it only fills in subjects that still
have no record.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from school_attendance.common.datetime_utils import parse_iso_date
from school_attendance.container import build_container
from school_attendance.core.enums import SubjectType
from school_attendance.core.exceptions import DomainError

logger = logging.getLogger("run_absence_sweep")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--date", help="YYYY-MM-DD, defaults to today in the school timezone")
    parser.add_argument(
        "--scope",
        choices=[s.value for s in SubjectType] + ["all"],
        default="all",
    )
    parser.add_argument("--group", help="Limit to one class or department")
    parser.add_argument("--force", action="store_true", help="Run even before the close cutoff")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    scopes = list(SubjectType) if args.scope == "all" else [SubjectType(args.scope)]

    failed = 0
    try:
        work_date = parse_iso_date(args.date) if args.date else None
        for scope in scopes:
            outcome = container.absence_sweeper.run(
                scope,
                work_date,
                force=args.force,
                group_id=args.group,
                run_by="cron",
            )
            failed += outcome.failed
            logger.info(
                "%s %s: created=%d failed=%d%s",
                scope.value,
                outcome.work_date,
                outcome.created,
                outcome.failed,
                f" skipped={outcome.skipped_reason}" if outcome.skipped_reason else "",
            )
    except DomainError as e:
        logger.error("Absence sweep aborted: %s", e)
        return 2
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())

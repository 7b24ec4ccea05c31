"""CLI entry point for manual settlement recalculation.

Usage:
    python -m settleup.cli.recalc --group 7 --date 2026-01-31
    python -m settleup.cli.recalc --group 7 --date 2026-01-31 --dry-run
    python -m settleup.cli.recalc --retry-failed

Exit Codes:
    0 - Success: every requested scope recalculated
    1 - Failure: configuration error or at least one scope failed
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from settleup.services.config import load_config
from settleup.services.db import create_session_factory
from settleup.services.locale_service import format_amount
from settleup.services.logging import setup_logging
from settleup.services.reconciliation_service import ReconciliationPlan
from settleup.services.scope_locks import scope_locks
from settleup.services.settlement_service import SettlementRecalculationService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="settleup-recalc",
        description="Recalculate pending settlements for a group and day.",
    )
    parser.add_argument("--group", type=int, help="Group id")
    parser.add_argument("--date", type=date.fromisoformat, help="Scope day (YYYY-MM-DD)")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print the plan without writing it"
    )
    parser.add_argument(
        "--retry-failed",
        action="store_true",
        help="Re-run every scope whose last recalculation failed",
    )
    return parser


def describe_plan(plan: ReconciliationPlan, locale: str) -> List[str]:
    """Human-readable lines for a plan."""
    lines = []
    for transfer in plan.creates:
        lines.append(
            f"  create  {transfer.from_user_id} -> {transfer.to_user_id}  "
            f"{format_amount(transfer.amount, locale)}"
        )
    for change in plan.updates:
        lines.append(
            f"  update  #{change.settlement_id}  "
            f"{format_amount(change.previous_amount, locale)} -> "
            f"{format_amount(change.amount, locale)}"
        )
    for settlement_id in plan.deletes:
        lines.append(f"  delete  #{settlement_id}")
    if not lines:
        lines.append("  no changes")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the recalculation CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.retry_failed and (args.group is None or args.date is None):
        parser.error("--group and --date are required unless --retry-failed is given")

    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_file)
    session_factory = create_session_factory(config.database_url)

    db = session_factory()
    try:
        service = SettlementRecalculationService(db)
        if args.retry_failed:
            scopes = service.find_stale_scopes()
            logger.info(f"Retrying {len(scopes)} stale scope(s)")
        else:
            scopes = [(args.group, args.date)]

        ok = True
        for group_id, day in scopes:
            if args.dry_run:
                plan = service.compute_plan(group_id, day)
            else:
                with scope_locks.hold(group_id, day):
                    plan = service.recalc(group_id, day)

            if plan is None:
                print(f"group {group_id} {day}: FAILED (see log)")
                ok = False
                continue

            print(f"group {group_id} {day}:")
            for line in describe_plan(plan, config.locale):
                print(line)
        return 0 if ok else 1
    except Exception as e:
        logger.error(f"Recalculation failed: {e}", exc_info=True)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line ledger report.
Prints portfolio totals and per-trader balances, and imports/exports JSON backups.
"""

import argparse
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from config import get_settings
from db_engine import init_db
from services import LedgerService, ReportService, export_snapshot, import_snapshot, restore_snapshot

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def _configure_logging():
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Trader ledger balance report")
    parser.add_argument("--owner", help="Store partition (default: DEFAULT_OWNER_ID)")
    parser.add_argument("--as-of", type=date.fromisoformat, help="Report balances as they stood on YYYY-MM-DD")
    parser.add_argument("--export", metavar="FILE", help="Write a JSON backup of the ledger")
    parser.add_argument("--import", dest="import_file", metavar="FILE", help="Load a JSON backup into the ledger first")
    parser.add_argument("--traders", action="store_true", help="Also print the per-trader balance table")
    return parser.parse_args(argv)


def run_report(argv=None) -> int:
    """Run the report; returns a process exit code."""
    args = _parse_args(argv)
    _configure_logging()
    init_db()

    ledger = LedgerService(args.owner)

    if args.import_file:
        with open(args.import_file, encoding='utf-8') as fh:
            snapshot = import_snapshot(fh.read(), owner_id=ledger.owner_id)
        restore_snapshot(ledger.owner_id, snapshot)

    ledger.ensure_default_product_types()
    snapshot = ledger.snapshot()

    if args.export:
        with open(args.export, 'w', encoding='utf-8') as fh:
            fh.write(export_snapshot(snapshot))
        logger.info(f"Exported ledger to {args.export}")

    summary = ReportService.aggregate(snapshot.traders, snapshot.transactions, args.as_of)
    print(ReportService.format_summary_report(summary, snapshot.product_types))

    if args.traders and snapshot.traders:
        frame = ReportService.balances_frame(
            snapshot.traders, snapshot.transactions, snapshot.product_types, args.as_of
        )
        print(frame.to_string())

    return 0


def main():
    sys.exit(run_report())


if __name__ == "__main__":
    main()

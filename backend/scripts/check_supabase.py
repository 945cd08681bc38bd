"""
Check that the Supabase project is reachable through its REST API.
"""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from adapters.supabase import SupabaseAdapter, SupabaseConfigError
from infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check Supabase connectivity")
    parser.add_argument("--table", default="users", help="Table to count rows in")
    args = parser.parse_args(argv)

    setup_logging(json_output=False, level="INFO")

    try:
        status = SupabaseAdapter().check_connection(table=args.table)
    except SupabaseConfigError as e:
        logger.error("%s", e)
        return 1

    if not status.reachable:
        logger.error("Supabase is not reachable: %s", status.error)
        return 1

    logger.info("Supabase reachable; %s has %s row(s)", status.table, status.row_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())

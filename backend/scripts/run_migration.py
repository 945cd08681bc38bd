"""
Apply a SQL migration file to the Supabase Postgres database.

    python scripts/run_migration.py migrations/001_initial_schema.sql --mode auto

``--mode auto`` tries the direct connection first, then the session
pooler, then the transaction pooler.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from infrastructure.config import get_settings
from infrastructure.database.maintenance import (
    CONNECTION_MODES,
    MaintenanceConfigError,
    MigrationError,
    resolve_targets,
    run_sql_file,
)
from infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a SQL migration file")
    parser.add_argument("sql_file", type=Path, help="Path to the .sql file")
    parser.add_argument(
        "--mode",
        choices=[*CONNECTION_MODES, "auto"],
        default="direct",
        help="Connection style (default: direct)",
    )
    args = parser.parse_args(argv)

    setup_logging(json_output=False, level="INFO")

    if not args.sql_file.is_file():
        logger.error("SQL file not found: %s", args.sql_file)
        return 1

    try:
        targets = resolve_targets(args.mode, get_settings())
        target = asyncio.run(run_sql_file(args.sql_file, targets))
    except (MaintenanceConfigError, MigrationError) as e:
        logger.error("Migration failed: %s", e)
        return 1

    logger.info("Migration completed successfully (%s mode)", target.mode)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Drop a table (CASCADE) from the public schema.

Refuses to run without ``--yes``.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import asyncpg

from infrastructure.config import get_settings
from infrastructure.database.maintenance import (
    CONNECTION_MODES,
    MaintenanceConfigError,
    connect,
    drop_table,
    quote_identifier,
    resolve_targets,
)
from infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def _drop(table: str, mode: str) -> None:
    target = resolve_targets(mode, get_settings())[0]
    conn = await connect(target)
    try:
        await drop_table(conn, table)
    finally:
        await conn.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Drop a database table")
    parser.add_argument("table", help="Table name")
    parser.add_argument("--mode", choices=CONNECTION_MODES, default="direct")
    parser.add_argument("--yes", action="store_true", help="Confirm the drop")
    args = parser.parse_args(argv)

    setup_logging(json_output=False, level="INFO")

    try:
        quote_identifier(args.table)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    if not args.yes:
        logger.error("Refusing to drop %s without --yes", args.table)
        return 1

    try:
        asyncio.run(_drop(args.table, args.mode))
    except (MaintenanceConfigError, asyncpg.PostgresError, OSError) as e:
        logger.error("Drop failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

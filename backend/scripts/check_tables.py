"""
List public tables and report likely duplicates.

Duplicates are tables whose names differ only by case, underscores or a
plural ``s`` (e.g. ``newsletters`` and ``Newsletter``), usually left behind
by an earlier schema generation.
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
    find_duplicate_tables,
    list_public_tables,
    non_snake_case_tables,
    resolve_targets,
)
from infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def check_tables(mode: str) -> int:
    target = resolve_targets(mode, get_settings())[0]
    conn = await connect(target)
    try:
        tables = await list_public_tables(conn)
    finally:
        await conn.close()

    logger.info("Found %d public tables", len(tables))
    for name in tables:
        logger.info("  - %s", name)

    duplicates = find_duplicate_tables(tables)
    if duplicates:
        logger.warning("Potential duplicate tables:")
        for base, names in sorted(duplicates.items()):
            logger.warning("  %s: %s", base, ", ".join(names))
    else:
        logger.info("No duplicate tables found")

    for name in non_snake_case_tables(tables):
        logger.warning("  %s uses PascalCase, expected snake_case", name)

    return 2 if duplicates else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check for duplicate tables")
    parser.add_argument("--mode", choices=CONNECTION_MODES, default="direct")
    args = parser.parse_args(argv)

    setup_logging(json_output=False, level="INFO")

    try:
        return asyncio.run(check_tables(args.mode))
    except (MaintenanceConfigError, asyncpg.PostgresError, OSError) as e:
        logger.error("Table check failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

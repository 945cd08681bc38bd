"""
Helpers for the offline database maintenance scripts.

The scripts talk to Postgres directly through asyncpg rather than through
the application's SQLAlchemy engine, so they can reach a Supabase project
three ways:

- ``direct``: ``db.<ref>.supabase.co:5432``
- ``pooler``: session-mode pooler, ``aws-0-<region>.pooler.supabase.com:5432``
- ``transaction``: transaction-mode pooler on port 6543 (no prepared
  statement cache)
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import asyncpg

from infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)

CONNECTION_MODES = ("direct", "pooler", "transaction")

SESSION_PORT = 5432
TRANSACTION_PORT = 6543

# Unquoted Postgres identifier, max 63 bytes
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class MaintenanceConfigError(Exception):
    """Raised when connection settings for a mode are missing."""
    pass


class MigrationError(Exception):
    """Raised when a SQL script could not be applied with any connection mode."""
    pass


@dataclass
class ConnectionTarget:
    """A DSN plus the asyncpg options it needs."""

    mode: str
    dsn: str
    options: dict = field(default_factory=dict)

    @property
    def safe_dsn(self) -> str:
        """DSN with the password masked, for logging."""
        return re.sub(r"://([^:/@]+):[^@]*@", r"://\1:***@", self.dsn)


def _plain_postgres_url(url: str) -> str:
    """asyncpg expects ``postgresql://``; strip SQLAlchemy's driver suffix."""
    return re.sub(r"^postgresql\+\w+://", "postgresql://", url)


def build_target(
    mode: str,
    *,
    project_ref: Optional[str],
    password: Optional[str],
    region: str = "us-east-1",
    database_url: Optional[str] = None,
) -> ConnectionTarget:
    """
    Build the connection target for one mode.

    ``direct`` falls back to ``database_url`` when no Supabase project ref or
    password is available; the pooler modes always need both.

    Raises:
        MaintenanceConfigError: If the mode is unknown or settings are missing
    """
    if mode not in CONNECTION_MODES:
        raise MaintenanceConfigError(f"Unknown connection mode: {mode}")

    have_supabase = bool(project_ref and password)

    if mode == "direct":
        if have_supabase:
            dsn = (
                f"postgresql://postgres:{quote(password, safe='')}"
                f"@db.{project_ref}.supabase.co:{SESSION_PORT}/postgres"
            )
            return ConnectionTarget(mode=mode, dsn=dsn, options={"ssl": "require"})
        if database_url:
            return ConnectionTarget(mode=mode, dsn=_plain_postgres_url(database_url))
        raise MaintenanceConfigError(
            "Set DATABASE_URL, or NEXT_PUBLIC_SUPABASE_URL and SUPABASE_DB_PASSWORD"
        )

    if not have_supabase:
        raise MaintenanceConfigError(
            f"The {mode} mode needs NEXT_PUBLIC_SUPABASE_URL and SUPABASE_DB_PASSWORD"
        )

    port = TRANSACTION_PORT if mode == "transaction" else SESSION_PORT
    dsn = (
        f"postgresql://postgres.{project_ref}:{quote(password, safe='')}"
        f"@aws-0-{region}.pooler.supabase.com:{port}/postgres"
    )
    options: dict = {"ssl": "require"}
    if mode == "transaction":
        # pgbouncer in transaction mode cannot keep prepared statements
        options["statement_cache_size"] = 0
    return ConnectionTarget(mode=mode, dsn=dsn, options=options)


def resolve_targets(mode: str, settings: Settings) -> list[ConnectionTarget]:
    """
    Targets to try for ``mode``. ``auto`` yields every mode that is
    configured, in direct, pooler, transaction order.
    """
    kwargs = dict(
        project_ref=settings.supabase_project_ref,
        password=settings.supabase_db_password,
        region=settings.supabase_db_region,
        database_url=settings.database_url,
    )
    if mode != "auto":
        return [build_target(mode, **kwargs)]

    targets = []
    for candidate in CONNECTION_MODES:
        try:
            targets.append(build_target(candidate, **kwargs))
        except MaintenanceConfigError as e:
            logger.debug("Skipping %s mode: %s", candidate, e)
    if not targets:
        raise MaintenanceConfigError("No connection mode is configured")
    return targets


async def connect(target: ConnectionTarget) -> asyncpg.Connection:
    logger.info("Connecting (%s): %s", target.mode, target.safe_dsn)
    return await asyncpg.connect(dsn=target.dsn, timeout=30, **target.options)


async def execute_script(target: ConnectionTarget, sql: str) -> None:
    """Run ``sql`` as one multi-statement script and always close the connection."""
    conn = await connect(target)
    try:
        await conn.execute(sql)
    finally:
        await conn.close()


async def run_sql_file(path: Path, targets: list[ConnectionTarget]) -> ConnectionTarget:
    """
    Apply the SQL file at ``path`` using the first target that works.

    Returns:
        The target that succeeded

    Raises:
        MigrationError: If every target failed
    """
    sql = path.read_text(encoding="utf-8")
    if not sql.strip():
        raise MigrationError(f"{path} is empty")

    errors = []
    for target in targets:
        try:
            await execute_script(target, sql)
        except (asyncpg.PostgresError, OSError, TimeoutError) as e:
            logger.error("Migration failed using %s mode: %s", target.mode, e)
            errors.append(f"{target.mode}: {e}")
            continue
        logger.info("Migration %s applied using %s mode", path.name, target.mode)
        return target

    raise MigrationError("; ".join(errors))


def quote_identifier(name: str) -> str:
    """
    Double-quote a table name after validating it.

    Raises:
        ValueError: If ``name`` is not a plain identifier
    """
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return f'"{name}"'


def table_base_name(name: str) -> str:
    """Normalize a table name for duplicate detection (``Newsletter`` == ``newsletters``)."""
    base = re.sub(r"[^a-z0-9]", "", name.lower())
    return base[:-1] if base.endswith("s") else base


def find_duplicate_tables(table_names: list[str]) -> dict[str, list[str]]:
    """Group tables whose names differ only by case, separators or a plural ``s``."""
    groups: dict[str, list[str]] = defaultdict(list)
    for name in table_names:
        groups[table_base_name(name)].append(name)
    return {base: sorted(names) for base, names in groups.items() if len(names) > 1}


def non_snake_case_tables(table_names: list[str]) -> list[str]:
    """Tables containing upper-case letters."""
    return [name for name in table_names if re.search(r"[A-Z]", name)]


async def list_public_tables(conn: asyncpg.Connection) -> list[str]:
    rows = await conn.fetch(
        """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = 'public'
          AND table_type = 'BASE TABLE'
          AND table_name NOT LIKE '\\_prisma%'
        ORDER BY table_name
        """
    )
    return [row["table_name"] for row in rows]


async def drop_table(conn: asyncpg.Connection, table_name: str) -> None:
    """Drop ``table_name`` (and dependent objects) if it exists."""
    await conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table_name)} CASCADE")
    logger.info("Dropped table %s", table_name)

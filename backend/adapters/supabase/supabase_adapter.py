"""
Supabase REST API adapter.

The application talks to Postgres through SQLAlchemy; the Supabase client is
only used to check that the hosted project is reachable over HTTPS (health
check and the ``check_supabase`` maintenance script).
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


class SupabaseConfigError(Exception):
    """Raised when Supabase URL or keys are missing."""
    pass


@dataclass
class SupabaseStatus:
    """Result of a connectivity check."""

    reachable: bool
    table: str
    row_count: Optional[int] = None
    error: Optional[str] = None


class SupabaseAdapter:
    """Thin wrapper around the Supabase client."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        """
        Args:
            url: Project URL (defaults to NEXT_PUBLIC_SUPABASE_URL)
            key: API key; the service-role key is preferred, then the anon key
            client: Pre-built client, used by tests
        """
        self.url = url or settings.supabase_url
        self.key = key or settings.supabase_service_role_key or settings.supabase_anon_key
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.url or not self.key:
                raise SupabaseConfigError(
                    "NEXT_PUBLIC_SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY "
                    "(or NEXT_PUBLIC_SUPABASE_ANON_KEY) must be set"
                )
            self._client = create_client(self.url, self.key)
            logger.info("Supabase client initialized")
        return self._client

    def check_connection(self, table: str = "users") -> SupabaseStatus:
        """
        Count rows in ``table`` through the REST API.

        Configuration problems propagate; request failures are reported in
        the returned status.
        """
        client = self.client
        try:
            response = client.table(table).select("id", count="exact").limit(1).execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error("Supabase connectivity check failed: %s", e)
            return SupabaseStatus(reachable=False, table=table, error=str(e))

        return SupabaseStatus(reachable=True, table=table, row_count=response.count)


def get_supabase_adapter() -> SupabaseAdapter:
    """FastAPI dependency returning an adapter configured from settings."""
    return SupabaseAdapter()
